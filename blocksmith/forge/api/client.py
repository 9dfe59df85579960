# blocksmith/forge/api/client.py
from __future__ import annotations

from typing import Optional, Protocol

from blocksmith.forge.errors import RequestError


class TextureGeneratorClient(Protocol):
    """
    The only contract the session needs from an image model.

    Both calls exchange PNG bytes. None is a valid answer and means
    "the model produced nothing"; it is not an error.
    """

    def transform(self, *, image_png: bytes, prompt: str) -> Optional[bytes]:
        ...

    def generate(self, *, prompt: str) -> Optional[bytes]:
        ...


class GeneratorError(RequestError):
    """Base class for generator failures."""


class GeneratorTransientError(GeneratorError):
    """Retryable: network glitches, rate limits, timeouts."""


class GeneratorPermanentError(GeneratorError):
    """Non-retryable: bad auth, bad request, unsupported model."""


class GeneratorSafetyRefusal(GeneratorError):
    """Model refused due to safety policy."""


class GeneratorBillingLimitError(GeneratorPermanentError):
    """Requests are blocked because the account/org is at a billing hard limit."""
