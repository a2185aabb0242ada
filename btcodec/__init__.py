"""btcodec - bencode codec for the BitTorrent protocol."""

from __future__ import annotations

__version__ = "0.1.0"

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
    BencodeError,
    BTCodecError,
    DecodeErrorKind,
)

__all__ = [
    "BTCodecError",
    "BencodeConversionError",
    "BencodeDecodeError",
    "BencodeDecoder",
    "BencodeEncodeError",
    "BencodeEncoder",
    "BencodeError",
    "BencodeValue",
    "DecodeErrorKind",
    "__version__",
    "decode",
    "decode_prefix",
    "encode",
    "from_interchange",
    "to_interchange",
    "to_json",
]
