"""Pre/post-processing pipeline around a model call.

``pre_process_request`` replaces a request's data with its TOON encoding when
the data is structurally eligible. ``post_process_response`` recognizes TOON
in a model's reply and decodes it, falling back to JSON. Neither raises for
ineligible data or unparseable replies; those outcomes are reported in the
returned models.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import orjson

from toonify.codec.toon import Codec, ToonCodec
from toonify.contracts.analysis import EligibilityConfig, EligibilityReport, ToonConfig
from toonify.contracts.common import ToonDecodeError
from toonify.contracts.pipeline import (
    LLMResponse,
    PipelineRequest,
    PostProcessResult,
    ProcessedRequest,
)
from toonify.engine.cost import calculate_token_savings
from toonify.engine.eligibility import analyze_eligibility
from toonify.observe.events import EventEmitter

_LENGTH_MARKER = re.compile(r"\[\d+\]")
_FIELD_LIST = re.compile(r"\{[^}]+\}")

NO_DATA_REPORT = EligibilityReport(
    percent_tabular=0,
    nested_depth=0,
    uniformity_score=0,
    should_use_toon=False,
    reason="no data",
)

JSON_FALLBACK_ERROR = "TOON decode failed, fell back to JSON"
BOTH_FAILED_ERROR = "Both formats failed"


def is_toon_format(text: str) -> bool:
    """Check for both an array length marker (``[N]``) and a field list (``{a,b}``)."""
    return bool(_LENGTH_MARKER.search(text)) and bool(_FIELD_LIST.search(text))


def _as_request(request: PipelineRequest | Mapping[str, Any]) -> PipelineRequest:
    if isinstance(request, PipelineRequest):
        return request
    return PipelineRequest.model_validate(dict(request))


def _as_content(response: LLMResponse | Mapping[str, Any] | str | None) -> str:
    if response is None:
        return ""
    if isinstance(response, str):
        return response
    if isinstance(response, LLMResponse):
        return response.content
    content = response.get("content")
    return content if isinstance(content, str) else ""


def _passthrough(request: PipelineRequest) -> ProcessedRequest:
    return ProcessedRequest.model_validate({**request.model_dump(), "toon_processed": False, "metrics": None})


def pre_process_request(
    request: PipelineRequest | Mapping[str, Any],
    config: EligibilityConfig | None = None,
    codec: Codec | None = None,
) -> tuple[ProcessedRequest, EligibilityReport]:
    """Encode ``request.data`` as TOON when its structure makes it worthwhile.

    Returns the processed request and the eligibility report. The input
    request is never modified.
    """
    request = _as_request(request)
    if request.data is None:
        return _passthrough(request), NO_DATA_REPORT

    eligibility = analyze_eligibility(request.data, config)
    if not eligibility.should_use_toon:
        return _passthrough(request), eligibility

    codec = codec or ToonCodec()
    metrics = calculate_token_savings(request.data, codec)
    toon_data = codec.encode(request.data)

    processed = ProcessedRequest.model_validate({
        **request.model_dump(exclude={"data"}),
        "data": toon_data,
        "toon_processed": True,
        "metrics": metrics,
    })
    return processed, eligibility


def post_process_response(
    response: LLMResponse | Mapping[str, Any] | str | None,
    codec: Codec | None = None,
) -> PostProcessResult:
    """Decode a model reply: TOON first, then JSON, else report failure."""
    content = _as_content(response)
    if not content:
        return PostProcessResult(success=False, format="none")

    trimmed = content.strip()
    if not is_toon_format(trimmed):
        return PostProcessResult(success=False, format="none")

    codec = codec or ToonCodec()
    try:
        parsed = codec.decode(trimmed)
        return PostProcessResult(parsed=parsed, success=True, format="tabular")
    except ToonDecodeError:
        pass

    try:
        parsed = orjson.loads(content)
    except orjson.JSONDecodeError:
        return PostProcessResult(success=False, format="none", error=BOTH_FAILED_ERROR)
    return PostProcessResult(parsed=parsed, success=True, format="json", error=JSON_FALLBACK_ERROR)


class ToonProcessor:
    """Long-lived pipeline front end holding a ``ToonConfig``.

    The config is read-only while processing; ``update_config`` swaps in a
    new instance rather than mutating the current one.
    """

    def __init__(
        self,
        config: ToonConfig | Mapping[str, Any] | None = None,
        *,
        codec: Codec | None = None,
        emitter: EventEmitter | None = None,
    ) -> None:
        self._config = _merge_config(ToonConfig(), config)
        self._codec = codec or ToonCodec()
        self._emitter = emitter or EventEmitter()

    @property
    def codec(self) -> Codec:
        return self._codec

    def pre_process(
        self, request: PipelineRequest | Mapping[str, Any]
    ) -> tuple[ProcessedRequest, EligibilityReport]:
        processed, eligibility = pre_process_request(
            request, self._config.eligibility, self._codec
        )
        if processed.toon_processed and processed.metrics is not None:
            self._emitter.emit("preprocess.encoded", processed.metrics.model_dump())
        else:
            self._emitter.emit("preprocess.skipped", {"reason": eligibility.reason})
        return processed, eligibility

    def post_process(
        self, response: LLMResponse | Mapping[str, Any] | str | None
    ) -> PostProcessResult:
        result = post_process_response(response, self._codec)
        self._emitter.emit("postprocess.result", {
            "success": result.success,
            "format": result.format,
            "error": result.error,
        })
        return result

    def get_config(self) -> ToonConfig:
        return self._config

    def update_config(self, config: ToonConfig | Mapping[str, Any]) -> ToonConfig:
        """Replace the held config; sections not given are kept."""
        self._config = _merge_config(self._config, config)
        return self._config


def _merge_config(base: ToonConfig, update: ToonConfig | Mapping[str, Any] | None) -> ToonConfig:
    """Shallow-merge top-level config sections into a new, validated config."""
    if update is None:
        return base
    if isinstance(update, ToonConfig):
        return update
    merged = {**base.model_dump(), **dict(update)}
    return ToonConfig.model_validate(merged)
