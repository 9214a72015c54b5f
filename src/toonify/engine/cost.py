"""Token cost estimation for JSON vs. TOON renderings of the same value.

``count_tokens`` is a length heuristic (four characters per token), not a
real tokenizer. It is consistent enough to compare two encodings of one
payload, but its absolute numbers should not be read as model token counts.
"""

from __future__ import annotations

import math
from typing import Any

import orjson

from toonify.codec.toon import Codec, ToonCodec
from toonify.contracts.analysis import TokenMetrics

CHARS_PER_TOKEN = 4


def count_tokens(text: str) -> int:
    """Approximate token count: ceil(len / 4)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def to_json_text(value: Any) -> str:
    """Compact JSON rendering (no whitespace between tokens)."""
    return orjson.dumps(value).decode()


def calculate_token_savings(value: Any, codec: Codec | None = None) -> TokenMetrics:
    """Estimate how many tokens TOON saves over compact JSON for ``value``."""
    codec = codec or ToonCodec()
    original = count_tokens(to_json_text(value))
    toon = count_tokens(codec.encode(value))
    savings = original - toon
    percent_saved = 100 * savings / original if original > 0 else 0.0
    return TokenMetrics(
        original=original,
        toon=toon,
        savings=savings,
        percent_saved=percent_saved,
    )
