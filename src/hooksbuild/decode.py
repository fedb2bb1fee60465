"""Decoding of the artifact payload returned by the compile service.

The service returns the artifact as a base64 string. When compression was
requested the decoded bytes are a zlib stream; otherwise they are the raw
WebAssembly module (which starts with ``\\0asm`` and so can never be mistaken
for a zlib header).
"""

import base64
import binascii
import zlib

from .errors import DecodeError

WASM_MAGIC = b"\x00asm"


def _looks_like_zlib(data: bytes) -> bool:
    # CMF/FLG check from RFC 1950: deflate method and header checksum.
    return len(data) >= 2 and data[0] & 0x0F == 8 and (data[0] << 8 | data[1]) % 31 == 0


def decode_binary(raw: str) -> bytes:
    """Decode a base64 (optionally zlib-compressed) artifact payload.

    Args:
        raw: Encoded payload from BuildResult.output

    Returns:
        The artifact bytes

    Raises:
        DecodeError: If the payload is not valid base64 or the zlib stream is corrupt
    """
    try:
        data = base64.b64decode(raw.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Artifact payload is not valid base64: {e}") from e

    if data.startswith(WASM_MAGIC) or not _looks_like_zlib(data):
        return data

    try:
        return zlib.decompress(data)
    except zlib.error as e:
        raise DecodeError(f"Artifact payload is not a valid zlib stream: {e}") from e
