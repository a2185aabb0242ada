"""Bencoding module for BitTorrent protocol.

This module provides a convenient interface to the core bencode functionality.
"""

from __future__ import annotations

from btcodec.core.bencode import (
    BencodeDecoder,
    BencodeEncoder,
    BencodeValue,
    decode,
    decode_prefix,
    encode,
)
from btcodec.core.interchange import from_interchange, to_interchange, to_json
from btcodec.utils.exceptions import (
    BencodeConversionError,
    BencodeDecodeError,
    BencodeEncodeError,
    DecodeErrorKind,
)

__all__ = [
    "BencodeConversionError",
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "BencodeValue",
    "DecodeErrorKind",
    "decode",
    "decode_prefix",
    "encode",
    "from_interchange",
    "to_interchange",
    "to_json",
]
