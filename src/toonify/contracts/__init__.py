"""Pydantic models for analysis results, pipeline requests and envelopes."""

from toonify.contracts.analysis import (
    EligibilityConfig,
    EligibilityReport,
    StructuralStats,
    TokenMetrics,
    ToonConfig,
)
from toonify.contracts.common import (
    ConfigError,
    ErrorDetail,
    Metrics,
    ResponseEnvelope,
    ToonDecodeError,
    ToonifyError,
    WarningDetail,
)
from toonify.contracts.pipeline import (
    LLMResponse,
    PipelineRequest,
    PostProcessResult,
    ProcessedRequest,
    ResponseFormat,
)

__all__ = [
    "ConfigError",
    "EligibilityConfig",
    "EligibilityReport",
    "ErrorDetail",
    "LLMResponse",
    "Metrics",
    "PipelineRequest",
    "PostProcessResult",
    "ProcessedRequest",
    "ResponseEnvelope",
    "ResponseFormat",
    "StructuralStats",
    "TokenMetrics",
    "ToonConfig",
    "ToonDecodeError",
    "ToonifyError",
    "WarningDetail",
]
