# blocksmith/forge/api/openai_client.py
from __future__ import annotations

import base64
import io
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from openai import OpenAI

from blocksmith.forge.api.client import (
    GeneratorBillingLimitError,
    GeneratorPermanentError,
    GeneratorSafetyRefusal,
    GeneratorTransientError,
    TextureGeneratorClient,
)
from blocksmith.forge.prompt.builder import build_prompt_payload

logger = logging.getLogger(__name__)

MODEL_DEFAULT = "gpt-image-1"


@dataclass(frozen=True)
class OpenAITextureGeneratorConfig:
    model: str = MODEL_DEFAULT
    size: str = "1024x1024"
    timeout_s: float | None = None
    # used in the generate prompt only; the session fits results to the canvas
    target_resolution: int = 16


def _classify(e: Exception) -> Exception:
    msg = str(e).lower()

    if (
        "billing_hard_limit" in msg
        or "billing hard limit" in msg
        or "billing_hard_limit_reached" in msg
    ):
        return GeneratorBillingLimitError(str(e))

    if "timeout" in msg or "timed out" in msg or "rate limit" in msg:
        return GeneratorTransientError(str(e))

    if "safety" in msg or "policy" in msg:
        return GeneratorSafetyRefusal(str(e))

    return GeneratorPermanentError(str(e))


def _first_png(result: Any) -> Optional[bytes]:
    data = getattr(result, "data", None) or []
    if not data:
        return None
    b64 = getattr(data[0], "b64_json", None)
    if not b64:
        return None
    try:
        return base64.b64decode(b64)
    except (ValueError, TypeError) as e:
        raise GeneratorPermanentError("Invalid image response") from e


class OpenAITextureGeneratorClient(TextureGeneratorClient):
    """
    OpenAI Images backed generator.

    transform -> images.edit with the current texture as the reference
    generate  -> images.generate from text only
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        config: OpenAITextureGeneratorConfig | None = None,
        sdk: Any | None = None,
    ) -> None:
        self._config = config or OpenAITextureGeneratorConfig()

        if sdk is not None:
            self._client = sdk
            return

        if api_key is None:
            api_key = os.environ.get("OPENAI_API_KEY")

        if not api_key:
            raise GeneratorPermanentError("OPENAI_API_KEY not set")

        if self._config.timeout_s is not None:
            self._client = OpenAI(api_key=api_key, timeout=self._config.timeout_s)
        else:
            self._client = OpenAI(api_key=api_key)

    @property
    def config(self) -> OpenAITextureGeneratorConfig:
        return self._config

    def transform(self, *, image_png: bytes, prompt: str) -> Optional[bytes]:
        payload = build_prompt_payload(kind="transform", user_prompt=prompt)
        logger.info("openai transform (model=%s, prompt_sha=%s)", self._config.model, payload.sha256_hex[:12])
        logger.debug("prompt: %s", payload.full_prompt)

        ref_file = io.BytesIO(image_png)
        ref_file.name = "texture.png"

        try:
            edits_fn = getattr(self._client.images, "edit", None)
            if edits_fn is None:
                edits_fn = getattr(self._client.images, "edits", None)
            if edits_fn is None:
                raise GeneratorPermanentError("OpenAI SDK missing images.edit/images.edits method")

            result = edits_fn(
                model=self._config.model,
                image=[ref_file],
                prompt=payload.full_prompt,
                size=self._config.size,
            )
        except GeneratorPermanentError:
            raise
        except Exception as e:
            raise _classify(e) from e

        return _first_png(result)

    def generate(self, *, prompt: str) -> Optional[bytes]:
        payload = build_prompt_payload(
            kind="generate",
            user_prompt=prompt,
            resolution=self._config.target_resolution,
        )
        logger.info("openai generate (model=%s, prompt_sha=%s)", self._config.model, payload.sha256_hex[:12])
        logger.debug("prompt: %s", payload.full_prompt)

        try:
            result = self._client.images.generate(
                model=self._config.model,
                prompt=payload.full_prompt,
                size=self._config.size,
            )
        except Exception as e:
            raise _classify(e) from e

        return _first_png(result)
