"""TOON (Token-Oriented Object Notation) codec.

Compact text format optimized for LLM consumption. Uniform object arrays
collapse into a header plus comma-separated rows:

    users[2]{id,name,role}:
      1,Alice,admin
      2,Bob,user

Encoding and decoding are delegated to the ``toon_format`` package; this
module only pins down the contract the pipeline relies on:

- ``encode`` is total for JSON-compatible values. Values it cannot represent
  are a caller bug and the library's error propagates.
- ``decode`` raises ``ToonDecodeError`` for anything that is not valid TOON.
"""

from __future__ import annotations

from typing import Any, Protocol

import toon_format

from toonify.contracts.common import ToonDecodeError


class Codec(Protocol):
    """Bidirectional mapping between values and their TOON text."""

    def encode(self, value: Any) -> str: ...

    def decode(self, text: str) -> Any: ...


class ToonCodec:
    """``Codec`` backed by the ``toon_format`` package."""

    def encode(self, value: Any) -> str:
        return toon_format.encode(value)

    def decode(self, text: str) -> Any:
        try:
            return toon_format.decode(text)
        except Exception as e:
            raise ToonDecodeError(f"Cannot decode TOON: {e}") from e


_default_codec = ToonCodec()


def encode_to_toon(value: Any) -> str:
    """Convert a JSON-compatible value to TOON text."""
    return _default_codec.encode(value)


def decode_from_toon(text: str) -> Any:
    """Parse TOON text back into Python values."""
    return _default_codec.decode(text)
