"""Exception hierarchy for btcodec.

Every failure the codec can report is a subclass of ``BTCodecError`` so
callers can catch the whole family at once, or narrow down to decode,
conversion or encode failures.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class BTCodecError(Exception):
    """Base exception for all btcodec errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize btcodec error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(BTCodecError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Configuration validation errors."""


class BencodeError(ValidationError):
    """Bencode encoding/decoding errors."""


class DecodeErrorKind(str, Enum):
    """Kinds of decode and conversion failures."""

    INVALID_TAG = "invalid_tag"
    INVALID_LENGTH = "invalid_length"
    UNEXPECTED_EOF = "unexpected_eof"
    INVALID_INTEGER = "invalid_integer"
    UNTERMINATED_LIST = "unterminated_list"
    UNTERMINATED_DICT = "unterminated_dict"
    INVALID_KEY = "invalid_key"
    DUPLICATE_KEY = "duplicate_key"
    TRAILING_DATA = "trailing_data"
    NESTING_TOO_DEEP = "nesting_too_deep"
    NOT_UTF8 = "not_utf8"
    KEY_NOT_UTF8 = "key_not_utf8"
    INTEGER_OUT_OF_RANGE = "integer_out_of_range"


class BencodeDecodeError(BencodeError):
    """Raised when bencoded input cannot be parsed.

    Attributes:
        kind: The ``DecodeErrorKind`` identifying the failure
        offset: Byte offset into the input where the failure was detected,
            or None when the error is not tied to an input position

    """

    def __init__(
        self,
        kind: DecodeErrorKind,
        message: str,
        offset: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize decode error."""
        super().__init__(message, details)
        self.kind = kind
        self.offset = offset

    def __str__(self) -> str:
        """Return string representation including kind and offset."""
        text = f"[{self.kind.value}] {self.message}"
        if self.offset is not None:
            text = f"{text} at offset {self.offset}"
        if self.details:
            text = f"{text} (Details: {self.details})"
        return text


class BencodeConversionError(BencodeDecodeError):
    """Raised when a decoded value cannot be converted to interchange form."""

    def __init__(
        self,
        kind: DecodeErrorKind,
        message: str,
        path: list[str | int] | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize conversion error."""
        self.path = list(path or [])
        merged = dict(details or {})
        if self.path:
            merged["path"] = self.path
        super().__init__(kind, message, None, merged)


class BencodeEncodeError(BencodeError):
    """Raised when a Python value cannot be bencoded."""
