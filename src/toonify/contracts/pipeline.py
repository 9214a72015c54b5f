"""Request/response models exchanged with the pre/post-processing pipeline."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from toonify.contracts.analysis import TokenMetrics

ResponseFormat = Literal["tabular", "json", "none"]


class PipelineRequest(BaseModel):
    """A prompt plus optional structured data bound for a model.

    Extra fields supplied by callers (model name, temperature, ...) are kept
    and passed through untouched.
    """

    model_config = ConfigDict(extra="allow")

    system_prompt: str = ""
    user_message: str = ""
    data: Any = None


class ProcessedRequest(PipelineRequest):
    """A request after pre-processing.

    When ``toon_processed`` is true, ``data`` holds the TOON text and must be
    treated as opaque.
    """

    toon_processed: bool = False
    metrics: TokenMetrics | None = None


class LLMResponse(BaseModel):
    """Raw model output."""

    content: str = ""


class PostProcessResult(BaseModel):
    """Outcome of decoding a model response."""

    parsed: Any = None
    success: bool
    format: ResponseFormat
    error: str | None = None
