"""Tests for the PlantUML URL token encoding."""

from __future__ import annotations

import zlib

import pytest

from umldoc.plantuml.encoder import ALPHABET, MarkupEncoder, encode, encode64

MARKUP = "@startuml\nclass Super {\n}\nclass Sub {\n}\nSuper <|-- Sub\n@enduml"


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"abc", "OM9Z"),
        (b"a", "OG00"),
        (b"\x00\x00\x00", "0000"),
        (b"\xff\xff\xff", "____"),
        (b"", ""),
    ],
)
def test_encode64_uses_plantuml_alphabet(data: bytes, expected: str) -> None:
    assert encode64(data) == expected


def test_alphabet_is_64_unique_url_safe_characters() -> None:
    assert len(ALPHABET) == 64
    assert len(set(ALPHABET)) == 64
    assert ALPHABET[:10] == "0123456789"


def test_encoding_is_deterministic_and_url_safe() -> None:
    token = encode(MARKUP)

    assert token == encode(MARKUP)
    assert token == MarkupEncoder().encode(MARKUP)
    assert set(token) <= set(ALPHABET)
    assert len(token) % 4 == 0


def test_different_markup_gives_different_tokens() -> None:
    assert encode(MARKUP) != encode(MARKUP.replace("Sub", "Child"))


def test_compress_produces_raw_deflate() -> None:
    compressed = MarkupEncoder().compress(MARKUP)

    assert zlib.decompress(compressed, -zlib.MAX_WBITS).decode("utf-8") == MARKUP
