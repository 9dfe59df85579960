from __future__ import annotations

import threading

import numpy as np
import pytest

from blocksmith.forge.api.client import GeneratorTransientError
from blocksmith.forge.api.mock_client import MockTextureGeneratorClient
from blocksmith.forge.errors import DecodeError, RequestError, StateError
from blocksmith.forge.pipeline.session import AI_LAYER_NAME, ForgeSession


class BlockingClient:
    """Holds generate() open until `release` is set."""

    def __init__(self, blob):
        self.blob = blob
        self.release = threading.Event()

    def generate(self, *, prompt):
        self.release.wait(5)
        return self.blob

    def transform(self, *, image_png, prompt):
        self.release.wait(5)
        return self.blob


class FailingClient:
    def __init__(self, exc):
        self.exc = exc

    def generate(self, *, prompt):
        raise self.exc

    def transform(self, *, image_png, prompt):
        raise self.exc


class FixedClient:
    def __init__(self, blob):
        self.blob = blob

    def generate(self, *, prompt):
        return self.blob

    def transform(self, *, image_png, prompt):
        return self.blob


@pytest.fixture
def session(quiet_params):
    with ForgeSession(params=quiet_params) as s:
        yield s


def _snapshot(session):
    return session.layers, session.buffer.read_back()


def _assert_unchanged(session, snapshot):
    layers, frame = snapshot
    assert session.layers == layers
    assert np.array_equal(session.buffer.read_back(), frame)
    assert session.request_in_flight is False


def test_generate_appends_fitted_layer(quiet_params):
    client = MockTextureGeneratorClient()
    with ForgeSession(resolution=32, params=quiet_params) as session:
        layer = session.ai_generate("mossy cobblestone", client=client)

    assert layer is not None
    assert layer.name == AI_LAYER_NAME
    assert layer.kind == "bitmap"
    assert (layer.width, layer.height) == (32, 32)
    assert session.layers[-1] == layer
    assert client.calls == [("generate", "mossy cobblestone")]


def test_transform_sends_current_frame(session):
    client = MockTextureGeneratorClient()
    layer = session.ai_transform("make it rusty", client=client)

    assert layer is not None
    assert (layer.width, layer.height) == (16, 16)
    assert client.calls == [("transform", "make it rusty")]
    assert session.active_layer == layer


def test_empty_result_is_no_change(session):
    snap = _snapshot(session)
    assert session.ai_generate("anything", client=MockTextureGeneratorClient(empty=True)) is None
    assert session.ai_transform("anything", client=MockTextureGeneratorClient(empty=True)) is None
    _assert_unchanged(session, snap)


def test_generator_failure_propagates_without_mutation(session):
    snap = _snapshot(session)
    with pytest.raises(GeneratorTransientError):
        session.ai_generate("x", client=FailingClient(GeneratorTransientError("rate limit")))
    _assert_unchanged(session, snap)


def test_unexpected_failure_becomes_request_error(session):
    snap = _snapshot(session)
    with pytest.raises(RequestError, match="boom"):
        session.ai_transform("x", client=FailingClient(RuntimeError("boom")))
    _assert_unchanged(session, snap)


def test_undecodable_result_leaves_state_unchanged(session):
    snap = _snapshot(session)
    with pytest.raises(DecodeError):
        session.ai_generate("x", client=FixedClient(b"\x89PNG but not really"))
    _assert_unchanged(session, snap)


def test_single_request_in_flight(session, png_blob):
    client = BlockingClient(png_blob(width=16, height=16))
    pending = session.begin_generate("first", client=client)
    assert session.request_in_flight

    with pytest.raises(StateError):
        session.begin_transform("second", client=client)

    client.release.set()
    layer = session.complete(pending)
    assert layer is not None
    assert session.request_in_flight is False

    # slot is free again
    assert session.ai_generate("third", client=MockTextureGeneratorClient()) is not None


def test_cancelled_request_is_ignored(session, png_blob):
    snap = _snapshot(session)
    client = BlockingClient(png_blob(width=16, height=16))
    pending = session.begin_generate("slow", client=client)

    pending.cancel()
    client.release.set()
    assert session.complete(pending) is None
    _assert_unchanged(session, snap)


def test_timeout_raises_request_error(session, png_blob):
    snap = _snapshot(session)
    client = BlockingClient(png_blob(width=16, height=16))
    pending = session.begin_generate("slow", client=client)
    try:
        with pytest.raises(RequestError, match="timed out"):
            session.complete(pending, timeout=0.05)
    finally:
        client.release.set()
    _assert_unchanged(session, snap)


def test_complete_rejects_foreign_handle(session, png_blob):
    other = ForgeSession()
    try:
        pending = other.begin_generate("elsewhere", client=FixedClient(png_blob()))
        with pytest.raises(StateError):
            session.complete(pending)
        assert other.complete(pending) is not None
    finally:
        other.close()


@pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
def test_empty_prompt_is_rejected(session, prompt):
    with pytest.raises(ValueError):
        session.begin_generate(prompt, client=MockTextureGeneratorClient())
    assert session.request_in_flight is False


def test_cancel_frees_the_slot(session, png_blob):
    snap = _snapshot(session)
    slow = BlockingClient(png_blob(width=16, height=16))
    pending = session.begin_generate("slow", client=slow)

    pending.cancel()
    assert session.request_in_flight is False
    try:
        # new request without collecting the cancelled one
        follow_up = session.begin_generate("next", client=FixedClient(png_blob(width=16, height=16)))
        assert session.request_in_flight is True
    finally:
        slow.release.set()

    assert session.complete(follow_up) is not None
    assert session.complete(pending) is None
    assert len(session.layers) == len(snap[0]) + 1
