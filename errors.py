"""Error taxonomy shared by the codec, the engines and the signers."""
from __future__ import annotations


class SigningError(Exception):
    """Base class; every failure of a signing call derives from this."""


class MalformedField(SigningError, ValueError):
    """Decode-time failure: unsupported tag type or truncated buffer."""


class UnsupportedFieldType(SigningError, TypeError):
    """Encode-time failure: a field type the writer cannot serialize."""


class PreconditionFailed(SigningError, ValueError):
    """A required input (e.g. device_id) is absent or empty."""


class RandomSourceFailure(SigningError, RuntimeError):
    """The OS random source could not produce the nonce bytes."""
