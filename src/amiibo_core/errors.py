"""Exception hierarchy. Every error carries a stable code (see amiibo_verify.const.ERRORS)."""
from __future__ import annotations


class AmiiboError(Exception):
    code = "E_AMIIBO"


class KeyLoadError(AmiiboError):
    code = "E_KEYS"


class FormatError(AmiiboError):
    code = "E_FORMAT"


class SizeError(AmiiboError):
    code = "E_SIZE"

    def __init__(self, actual: int, expected: int):
        super().__init__(f"Invalid tag size: {actual} bytes (expected {expected})")
        self.actual = actual
        self.expected = expected


class HmacError(AmiiboError):
    code = "E_HMAC"


class ValidationError(AmiiboError):
    code = "E_INPUT"


class IoError(AmiiboError):
    code = "E_IO"


class OracleError(AmiiboError):
    code = "E_ORACLE"


class SelfCheckWarning(UserWarning):
    """Emitted when a freshly written dump fails its own validation."""
