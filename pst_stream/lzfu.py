"""Compressed RTF (``LZFu``) bodies.

Message stores keep rich-text bodies in the MS-OXRTFCP format: a 16-byte
header (sizes, ``LZFu``/``MELA`` signature, CRC) followed by the payload.
Decoding is done by :mod:`compressed_rtf`; its failures surface here as
:class:`RtfDecompressionError` so the encoder can drop the RTF part.
"""

from __future__ import annotations

import compressed_rtf

from .errors import RtfDecompressionError

HEADER_SIZE = 16


def decompress(data: bytes) -> bytes:
    """Decode a compressed RTF stream and return the raw RTF bytes."""
    if len(data) < HEADER_SIZE:
        raise RtfDecompressionError("compressed RTF shorter than its header")
    try:
        return compressed_rtf.decompress(data)
    except Exception as exc:  # compressed_rtf raises bare Exception for corrupt input
        raise RtfDecompressionError(f"corrupt compressed RTF: {exc}") from exc
