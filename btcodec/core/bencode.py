"""Bencode decoder and encoder.

Values map onto Python types:

* byte-string -> ``bytes``
* integer -> ``int``
* list -> ``list``
* dictionary -> ``dict`` keyed by ``bytes``

Decoding is a recursive descent over a cursor into the input buffer.
``decode`` requires the whole input to be one value; ``decode_prefix``
parses one value and reports how many bytes it used.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Union

from btcodec.models import DEFAULT_MAX_DEPTH, DuplicateKeyPolicy
from btcodec.utils.exceptions import (
    BencodeDecodeError,
    BencodeEncodeError,
    DecodeErrorKind,
)
from btcodec.utils.logging_config import get_logger

if TYPE_CHECKING:
    from btcodec.models import CodecConfig

logger = get_logger(__name__)

BencodeValue = Union[bytes, int, list["BencodeValue"], dict[bytes, "BencodeValue"]]

_INTEGER_BODY_RE = re.compile(rb"-?[0-9]*")
_INTEGER_RE = re.compile(rb"-?(?:0|[1-9][0-9]*)")
_LENGTH_BODY_RE = re.compile(rb"[0-9]+")
_LENGTH_RE = re.compile(rb"(?:0|[1-9][0-9]*)")

_DIGITS = frozenset(b"0123456789")
_INT_TAG = ord("i")
_LIST_TAG = ord("l")
_DICT_TAG = ord("d")
_END = ord("e")
_COLON = ord(":")


class BencodeDecoder:
    """Cursor-based bencode decoder.

    ``decode()`` parses the value starting at ``pos`` and leaves ``pos``
    just past it, so several concatenated values can be read in turn.
    """

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        duplicate_keys: DuplicateKeyPolicy | str = DuplicateKeyPolicy.LAST,
    ):
        """Initialize decoder.

        Args:
            data: Bencoded input
            max_depth: Maximum nesting depth of lists and dictionaries
            duplicate_keys: Policy for repeated dictionary keys

        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            msg = f"Bencode input must be bytes-like, not {type(data).__name__}"
            raise TypeError(msg)
        if max_depth < 1:
            msg = f"max_depth must be at least 1, got {max_depth}"
            raise ValueError(msg)
        self.data = bytes(data)
        self.pos = 0
        self.max_depth = max_depth
        self.duplicate_keys = DuplicateKeyPolicy(duplicate_keys)
        self._depth = 0

    @classmethod
    def from_config(
        cls,
        data: bytes | bytearray | memoryview,
        config: CodecConfig,
    ) -> BencodeDecoder:
        """Create a decoder using codec configuration."""
        return cls(
            data,
            max_depth=config.max_depth,
            duplicate_keys=config.duplicate_keys,
        )

    def at_end(self) -> bool:
        """Return True if the whole input has been consumed."""
        return self.pos >= len(self.data)

    def decode(self) -> BencodeValue:
        """Decode the next value in the input."""
        if self.at_end():
            msg = "Unexpected end of input, expected a value"
            raise BencodeDecodeError(
                DecodeErrorKind.UNEXPECTED_EOF,
                msg,
                self.pos,
            )
        return self._decode_value()

    def _decode_value(self) -> BencodeValue:
        tag = self.data[self.pos]
        if tag == _INT_TAG:
            return self._decode_int()
        if tag in _DIGITS:
            return self._decode_bytes()
        if tag == _LIST_TAG:
            return self._decode_list()
        if tag == _DICT_TAG:
            return self._decode_dict()
        msg = f"Invalid bencode tag {bytes([tag])!r}"
        raise BencodeDecodeError(DecodeErrorKind.INVALID_TAG, msg, self.pos)

    def _decode_int(self) -> int:
        start = self.pos
        match = _INTEGER_BODY_RE.match(self.data, start + 1)
        end = match.end()
        if end >= len(self.data):
            msg = "Integer is missing its terminating 'e'"
            raise BencodeDecodeError(DecodeErrorKind.INVALID_INTEGER, msg, start)
        if self.data[end] != _END:
            msg = f"Unexpected {bytes([self.data[end]])!r} in integer"
            raise BencodeDecodeError(DecodeErrorKind.INVALID_INTEGER, msg, start)

        digits = match.group()
        if not _INTEGER_RE.fullmatch(digits) or digits == b"-0":
            msg = f"Invalid integer literal {digits!r}"
            raise BencodeDecodeError(DecodeErrorKind.INVALID_INTEGER, msg, start)

        try:
            value = int(digits)
        except ValueError as e:
            # int() refuses digit strings beyond sys.get_int_max_str_digits()
            msg = "Integer literal is too long"
            raise BencodeDecodeError(
                DecodeErrorKind.INVALID_INTEGER,
                msg,
                start,
                {"digits": len(digits)},
            ) from e

        self.pos = end + 1
        return value

    def _decode_bytes(self) -> bytes:
        start = self.pos
        match = _LENGTH_BODY_RE.match(self.data, start)
        colon = match.end()
        if colon >= len(self.data) or self.data[colon] != _COLON:
            msg = "Byte-string length is missing its ':' separator"
            raise BencodeDecodeError(DecodeErrorKind.INVALID_LENGTH, msg, start)

        length_field = match.group()
        if not _LENGTH_RE.fullmatch(length_field):
            msg = f"Invalid byte-string length {length_field!r}"
            raise BencodeDecodeError(DecodeErrorKind.INVALID_LENGTH, msg, start)

        payload_start = colon + 1
        try:
            length = int(length_field)
        except ValueError:
            # Too many digits for int(); no input can be that long
            length = None
        if length is None or payload_start + length > len(self.data):
            msg = "Byte-string is longer than the remaining input"
            raise BencodeDecodeError(
                DecodeErrorKind.UNEXPECTED_EOF,
                msg,
                payload_start,
                {
                    "declared": length_field.decode("ascii"),
                    "available": len(self.data) - payload_start,
                },
            )

        self.pos = payload_start + length
        return self.data[payload_start : self.pos]

    def _enter_container(self) -> None:
        if self._depth >= self.max_depth:
            msg = f"Nesting exceeds maximum depth of {self.max_depth}"
            raise BencodeDecodeError(
                DecodeErrorKind.NESTING_TOO_DEEP,
                msg,
                self.pos,
            )
        self._depth += 1
        self.pos += 1

    def _decode_list(self) -> list[BencodeValue]:
        self._enter_container()
        result: list[BencodeValue] = []
        while True:
            if self.at_end():
                msg = "List is missing its terminating 'e'"
                raise BencodeDecodeError(
                    DecodeErrorKind.UNTERMINATED_LIST,
                    msg,
                    self.pos,
                )
            if self.data[self.pos] == _END:
                break
            result.append(self._decode_value())

        self.pos += 1
        self._depth -= 1
        return result

    def _decode_dict(self) -> dict[bytes, BencodeValue]:
        self._enter_container()
        result: dict[bytes, BencodeValue] = {}
        while True:
            if self.at_end():
                self._raise_unterminated_dict()
            tag = self.data[self.pos]
            if tag == _END:
                break
            if tag not in _DIGITS:
                msg = f"Dictionary key must be a byte-string, found {bytes([tag])!r}"
                raise BencodeDecodeError(DecodeErrorKind.INVALID_KEY, msg, self.pos)

            key_offset = self.pos
            key = self._decode_bytes()
            if self.at_end():
                self._raise_unterminated_dict()
            value = self._decode_value()

            if key in result:
                if self.duplicate_keys is DuplicateKeyPolicy.REJECT:
                    msg = f"Duplicate dictionary key {key!r}"
                    raise BencodeDecodeError(
                        DecodeErrorKind.DUPLICATE_KEY,
                        msg,
                        key_offset,
                    )
                if self.duplicate_keys is DuplicateKeyPolicy.FIRST:
                    continue
            result[key] = value

        self.pos += 1
        self._depth -= 1
        return result

    def _raise_unterminated_dict(self) -> None:
        msg = "Dictionary is missing its terminating 'e'"
        raise BencodeDecodeError(DecodeErrorKind.UNTERMINATED_DICT, msg, self.pos)


class BencodeEncoder:
    """Canonical bencode encoder.

    ``str`` values and keys are encoded as UTF-8 byte-strings and dictionary
    keys are emitted in ascending raw-byte order.
    """

    def __init__(self, encoding: str = "utf-8"):
        """Initialize encoder.

        Args:
            encoding: Text encoding used for ``str`` values and keys

        """
        self.encoding = encoding

    def encode(self, obj: Any) -> bytes:
        """Encode a Python value to bencode."""
        chunks: list[bytes] = []
        self._encode(obj, chunks, set())
        return b"".join(chunks)

    def _to_bytes(self, obj: str | bytes | bytearray | memoryview) -> bytes:
        if isinstance(obj, str):
            try:
                return obj.encode(self.encoding)
            except UnicodeEncodeError as e:
                msg = f"Cannot encode text as {self.encoding}: {e}"
                raise BencodeEncodeError(msg) from e
        return bytes(obj)

    def _encode(self, obj: Any, chunks: list[bytes], active: set[int]) -> None:
        if isinstance(obj, (bytes, bytearray, memoryview, str)):
            data = self._to_bytes(obj)
            chunks.append(str(len(data)).encode("ascii"))
            chunks.append(b":")
            chunks.append(data)
        elif isinstance(obj, bool):
            msg = "Cannot bencode bool values"
            raise BencodeEncodeError(msg, {"value": obj})
        elif isinstance(obj, int):
            chunks.append(self._encode_int(obj))
        elif isinstance(obj, (list, tuple)):
            self._enter(obj, active)
            chunks.append(b"l")
            for item in obj:
                self._encode(item, chunks, active)
            chunks.append(b"e")
            active.discard(id(obj))
        elif isinstance(obj, Mapping):
            self._enter(obj, active)
            chunks.append(b"d")
            for key, value in self._sorted_items(obj):
                chunks.append(str(len(key)).encode("ascii"))
                chunks.append(b":")
                chunks.append(key)
                self._encode(value, chunks, active)
            chunks.append(b"e")
            active.discard(id(obj))
        else:
            msg = f"Cannot bencode value of type {type(obj).__name__}"
            raise BencodeEncodeError(msg)

    @staticmethod
    def _encode_int(value: int) -> bytes:
        try:
            return b"i%de" % value
        except ValueError as e:
            # %d refuses ints beyond sys.get_int_max_str_digits()
            msg = "Integer is too large to encode"
            raise BencodeEncodeError(msg) from e

    @staticmethod
    def _enter(obj: Any, active: set[int]) -> None:
        if id(obj) in active:
            msg = "Cannot bencode self-referencing container"
            raise BencodeEncodeError(msg)
        active.add(id(obj))

    def _sorted_items(self, obj: Mapping) -> list[tuple[bytes, Any]]:
        items: dict[bytes, Any] = {}
        for key, value in obj.items():
            if not isinstance(key, (bytes, bytearray, memoryview, str)):
                msg = (
                    "Dictionary keys must be bytes or str, "
                    f"not {type(key).__name__}"
                )
                raise BencodeEncodeError(msg, {"key": repr(key)})
            raw = self._to_bytes(key)
            if raw in items:
                msg = f"Duplicate dictionary key {raw!r} after normalization"
                raise BencodeEncodeError(msg)
            items[raw] = value
        return sorted(items.items(), key=lambda item: item[0])


def decode_prefix(
    data: bytes | bytearray | memoryview,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    duplicate_keys: DuplicateKeyPolicy | str = DuplicateKeyPolicy.LAST,
) -> tuple[BencodeValue, int]:
    """Decode the first value in ``data``, ignoring any trailing bytes.

    Returns:
        Tuple of the decoded value and the number of bytes it occupied

    """
    decoder = BencodeDecoder(
        data,
        max_depth=max_depth,
        duplicate_keys=duplicate_keys,
    )
    value = decoder.decode()
    if not decoder.at_end():
        logger.debug(
            "Ignoring %d trailing bytes after offset %d",
            len(decoder.data) - decoder.pos,
            decoder.pos,
        )
    return value, decoder.pos


def decode(
    data: bytes | bytearray | memoryview,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    duplicate_keys: DuplicateKeyPolicy | str = DuplicateKeyPolicy.LAST,
) -> BencodeValue:
    """Decode exactly one bencoded value.

    Raises:
        BencodeDecodeError: If the input is malformed or has bytes left over
            after the first value

    """
    decoder = BencodeDecoder(
        data,
        max_depth=max_depth,
        duplicate_keys=duplicate_keys,
    )
    value = decoder.decode()
    if not decoder.at_end():
        msg = "Unexpected data after bencoded value"
        raise BencodeDecodeError(
            DecodeErrorKind.TRAILING_DATA,
            msg,
            decoder.pos,
            {"trailing": len(decoder.data) - decoder.pos},
        )
    return value


def encode(obj: Any) -> bytes:
    """Encode a Python value to canonical bencode."""
    return BencodeEncoder().encode(obj)
