"""URL token encoding understood by PlantUML servers."""

from __future__ import annotations

import zlib

# Base64 variant: digits first, then upper and lower case letters, then "-" and "_".
ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"


class MarkupEncoder:
    """Deflates markup and packs the bytes into URL-safe characters.

    The encoding is deterministic: the same text always yields the same token.
    """

    def __init__(self, level: int = 9) -> None:
        self.level = level

    def encode(self, markup: str) -> str:
        return encode64(self.compress(markup))

    def compress(self, markup: str) -> bytes:
        # Raw deflate stream: no zlib header or checksum.
        compressor = zlib.compressobj(self.level, zlib.DEFLATED, -zlib.MAX_WBITS)
        return compressor.compress(markup.encode("utf-8")) + compressor.flush()


def encode64(data: bytes) -> str:
    """Pack each 3 bytes into 4 characters; short trailing groups are zero padded."""
    chars = []
    for index in range(0, len(data), 3):
        chunk = data[index : index + 3]
        b1 = chunk[0]
        b2 = chunk[1] if len(chunk) > 1 else 0
        b3 = chunk[2] if len(chunk) > 2 else 0
        chars.append(ALPHABET[b1 >> 2])
        chars.append(ALPHABET[((b1 & 0x3) << 4) | (b2 >> 4)])
        chars.append(ALPHABET[((b2 & 0xF) << 2) | (b3 >> 6)])
        chars.append(ALPHABET[b3 & 0x3F])
    return "".join(chars)


def encode(markup: str) -> str:
    return MarkupEncoder().encode(markup)


__all__ = ["ALPHABET", "MarkupEncoder", "encode", "encode64"]
