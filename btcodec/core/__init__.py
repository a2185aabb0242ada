"""Core bencode codec: value model, decoder, encoder and interchange conversion."""

from __future__ import annotations

from btcodec.core import bencode, interchange

__all__ = ["bencode", "interchange"]
