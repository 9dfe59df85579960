# blocksmith/forge/errors.py
from __future__ import annotations


class ForgeError(Exception):
    """Base class for every recoverable failure raised by the forge."""


class FormatError(ForgeError, ValueError):
    """Malformed color string, unsupported resolution or out-of-range parameter."""


class DecodeError(ForgeError, ValueError):
    """An encoded image blob could not be decoded into an RGBA pixel grid."""


class RequestError(ForgeError, RuntimeError):
    """An external image request failed or timed out."""


class StateError(ForgeError):
    """Operation on an unknown layer, the protected base layer, or a busy request slot."""
