"""Conversion between bencode values and a JSON-like interchange form.

Byte-strings become ``str`` only when they are valid UTF-8, and integers are
checked against a fixed signed width (64 bits by default) so the output is
safe for JSON tooling. Neither case is ever silently degraded: a failing
element raises ``BencodeConversionError`` naming its path in the tree.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from btcodec.models import DEFAULT_INT_BITS
from btcodec.utils.exceptions import (
    BencodeConversionError,
    BencodeEncodeError,
    DecodeErrorKind,
)

if TYPE_CHECKING:
    from btcodec.core.bencode import BencodeValue
    from btcodec.models import InterchangeConfig


def _int_bounds(int_bits: int) -> tuple[int, int]:
    if int_bits < 1:
        msg = f"int_bits must be positive, got {int_bits}"
        raise ValueError(msg)
    limit = 1 << (int_bits - 1)
    return -limit, limit - 1


def to_interchange(value: BencodeValue, *, int_bits: int = DEFAULT_INT_BITS) -> Any:
    """Convert a decoded bencode value to plain ``str``/``int``/``list``/``dict``.

    Args:
        value: Decoded bencode value
        int_bits: Signed integer width allowed in the output

    Raises:
        BencodeConversionError: NOT_UTF8, KEY_NOT_UTF8 or INTEGER_OUT_OF_RANGE

    """
    bounds = _int_bounds(int_bits)
    return _convert(value, bounds, int_bits, [])


def _convert(
    value: Any,
    bounds: tuple[int, int],
    int_bits: int,
    path: list[str | int],
) -> Any:
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            msg = f"Byte-string is not valid UTF-8 (byte {e.start})"
            raise BencodeConversionError(
                DecodeErrorKind.NOT_UTF8,
                msg,
                path,
            ) from e
    if isinstance(value, bool):
        msg = "bool is not a bencode value"
        raise TypeError(msg)
    if isinstance(value, int):
        low, high = bounds
        if not low <= value <= high:
            msg = f"Integer does not fit in a signed {int_bits}-bit value"
            raise BencodeConversionError(
                DecodeErrorKind.INTEGER_OUT_OF_RANGE,
                msg,
                path,
                {"value": str(value)},
            )
        return value
    if isinstance(value, list):
        return [
            _convert(item, bounds, int_bits, [*path, index])
            for index, item in enumerate(value)
        ]
    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, (bytes, bytearray)):
                msg = f"Dictionary keys must be bytes, not {type(key).__name__}"
                raise TypeError(msg)
            try:
                text_key = bytes(key).decode("utf-8")
            except UnicodeDecodeError as e:
                msg = f"Dictionary key {bytes(key)!r} is not valid UTF-8"
                raise BencodeConversionError(
                    DecodeErrorKind.KEY_NOT_UTF8,
                    msg,
                    path,
                ) from e
            result[text_key] = _convert(item, bounds, int_bits, [*path, text_key])
        return result
    msg = f"Not a bencode value: {type(value).__name__}"
    raise TypeError(msg)


def to_json(
    value: BencodeValue,
    *,
    int_bits: int = DEFAULT_INT_BITS,
    indent: int | None = None,
) -> str:
    """Render a decoded bencode value as JSON text.

    Output is compact unless ``indent`` is given; non-ASCII text is kept as
    is. Object keys are sorted, which matches input order for canonical input.
    """
    data = to_interchange(value, int_bits=int_bits)
    if indent is None:
        return json.dumps(
            data, ensure_ascii=False, separators=(",", ":"), sort_keys=True
        )
    return json.dumps(data, ensure_ascii=False, indent=indent, sort_keys=True)


def to_json_with_config(value: BencodeValue, config: InterchangeConfig) -> str:
    """Render JSON using interchange configuration."""
    return to_json(value, int_bits=config.int_bits, indent=config.indent)


def from_interchange(obj: Any) -> BencodeValue:
    """Convert JSON-like data into a bencode value.

    ``str`` becomes UTF-8 ``bytes`` and dictionary keys become ``bytes``.
    Floats, ``None`` and booleans have no bencode form.

    Raises:
        BencodeEncodeError: If ``obj`` holds an unsupported type

    """
    if isinstance(obj, str):
        return _utf8(obj)
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj)
    if isinstance(obj, bool) or obj is None or isinstance(obj, float):
        msg = f"{type(obj).__name__} has no bencode representation"
        raise BencodeEncodeError(msg, {"value": repr(obj)})
    if isinstance(obj, int):
        return obj
    if isinstance(obj, (list, tuple)):
        return [from_interchange(item) for item in obj]
    if isinstance(obj, Mapping):
        result: dict[bytes, BencodeValue] = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                msg = f"Interchange keys must be str, not {type(key).__name__}"
                raise BencodeEncodeError(msg)
            result[_utf8(key)] = from_interchange(item)
        return result
    msg = f"{type(obj).__name__} has no bencode representation"
    raise BencodeEncodeError(msg)


def _utf8(text: str) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        msg = f"Text cannot be encoded as UTF-8: {e.reason}"
        raise BencodeEncodeError(msg) from e
