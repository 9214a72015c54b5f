"""Common Pydantic models: response envelope, errors, warnings, metrics."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ToonifyError(Exception):
    """Base class for toonify errors."""


class ToonDecodeError(ToonifyError, ValueError):
    """Raised when text cannot be decoded as TOON."""


class ConfigError(ToonifyError):
    """Raised when a configuration file cannot be read or validated."""


class WarningDetail(BaseModel):
    """Structured warning."""

    code: str
    message: str


class ErrorDetail(BaseModel):
    """Structured error."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class Metrics(BaseModel):
    """Execution metrics."""

    duration_ms: int = 0


class ResponseEnvelope(BaseModel):
    """Standard response envelope returned by every command."""

    ok: bool = True
    command: str = ""
    result: Any = None
    warnings: list[WarningDetail] = Field(default_factory=list)
    errors: list[ErrorDetail] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)
