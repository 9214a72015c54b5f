"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from toonify.codec.toon import ToonCodec
from toonify.contracts.common import ToonDecodeError


class FailingDecodeCodec(ToonCodec):
    """Real encoder, decoder that always fails."""

    def decode(self, text: str) -> Any:
        raise ToonDecodeError("forced decode failure")


class RecordingCodec(ToonCodec):
    """Real codec that records every call."""

    def __init__(self) -> None:
        self.encoded: list[Any] = []
        self.decoded: list[str] = []

    def encode(self, value: Any) -> str:
        self.encoded.append(value)
        return super().encode(value)

    def decode(self, text: str) -> Any:
        self.decoded.append(text)
        return super().decode(text)


@pytest.fixture()
def users_data() -> dict[str, Any]:
    """Small uniform table: the canonical TOON-friendly payload."""
    return {
        "users": [
            {"id": 1, "name": "Alice", "role": "admin"},
            {"id": 2, "name": "Bob", "role": "user"},
        ]
    }


@pytest.fixture()
def deep_data() -> dict[str, Any]:
    """Deeply nested object without any arrays."""
    return {"level1": {"level2": {"level3": {"level4": {"deep": "value"}}}}}


@pytest.fixture()
def records_data() -> dict[str, Any]:
    """Larger uniform table for savings comparisons."""
    return {
        "records": [
            {"id": i + 1, "name": f"User{i + 1}", "value": i * 100}
            for i in range(10)
        ]
    }


@pytest.fixture()
def failing_codec() -> FailingDecodeCodec:
    return FailingDecodeCodec()


@pytest.fixture()
def recording_codec() -> RecordingCodec:
    return RecordingCodec()
