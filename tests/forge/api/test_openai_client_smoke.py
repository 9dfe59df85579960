from __future__ import annotations

import io
import os

import pytest
from PIL import Image

from blocksmith.forge.api.client import GeneratorBillingLimitError
from blocksmith.forge.api.openai_client import OpenAITextureGeneratorClient, OpenAITextureGeneratorConfig


@pytest.mark.integration
def test_openai_client_smoke():
    """
    Opt-in integration test. Will be skipped unless explicitly enabled.
    """
    if os.environ.get("BLOCKSMITH_RUN_OPENAI_SMOKE") != "1":
        pytest.skip("set BLOCKSMITH_RUN_OPENAI_SMOKE=1 to run live OpenAI image smoke test")

    client = OpenAITextureGeneratorClient(config=OpenAITextureGeneratorConfig(timeout_s=120))

    try:
        blob = client.generate(prompt="mossy cobblestone")
    except GeneratorBillingLimitError as e:
        pytest.skip(f"OpenAI billing hard limit reached for this org/key: {e}")

    assert blob is not None
    img = Image.open(io.BytesIO(blob))
    assert img.width == img.height
