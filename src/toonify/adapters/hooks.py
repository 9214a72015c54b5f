"""Automatic pre/post-processing around a model call.

Usage::

    auto = AutoToon()
    result = auto.process(
        {"system_prompt": "You are a data analyst",
         "user_message": "Summarize these users",
         "data": {"users": [...]}},
        lambda req: client.complete(req),
    )
    result.parsed_response

Or wrap a client once and keep calling it as before::

    client = AutoToon().wrap(client)
    client.complete({"system_prompt": "...", "user_message": "...", "data": {...}})
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from toonify.contracts.analysis import (
    EligibilityConfig,
    EligibilityReport,
    TokenMetrics,
    ToonConfig,
)
from toonify.contracts.pipeline import LLMResponse, PipelineRequest, ProcessedRequest
from toonify.engine.processor import ToonProcessor
from toonify.observe.events import EventEmitter

TOON_INSTRUCTIONS = """\

## Data Format

Structured data uses TOON (Token-Oriented Object Notation):
```toon
arrayName[N]{field1,field2}:
  value1,value2
  value3,value4
```

- [N] indicates array length
- Values are comma-separated
- Use TOON format for structured responses to save tokens.
"""

ModelReply = LLMResponse | Mapping[str, Any] | str


class HookConfig(BaseModel):
    """Options for automatic processing."""

    add_instructions: bool = True
    min_tabular_percent: float = Field(default=60, ge=0, le=100)
    max_nested_depth: int = Field(default=4, ge=0)
    min_uniformity_score: float = Field(default=0.8, ge=0, le=1)
    log_metrics: bool = True

    def toon_config(self) -> ToonConfig:
        return ToonConfig(
            eligibility=EligibilityConfig(
                min_tabular_percent=self.min_tabular_percent,
                max_nested_depth=self.max_nested_depth,
                min_uniformity_score=self.min_uniformity_score,
            )
        )


class ToonResult(BaseModel):
    """Everything that happened during one processed model call."""

    original_request: PipelineRequest
    toon_request: ProcessedRequest
    eligibility: EligibilityReport
    metrics: TokenMetrics | None = None
    llm_response: Any = None
    parsed_response: Any = None
    token_savings: int = 0


def add_toon_instructions(prompt: str) -> str:
    """Append the TOON format primer to a system prompt."""
    return f"{prompt}\n{TOON_INSTRUCTIONS}"


def _content_of(reply: ModelReply | None) -> str:
    if isinstance(reply, str):
        return reply
    if isinstance(reply, LLMResponse):
        return reply.content
    if isinstance(reply, Mapping):
        content = reply.get("content")
        return content if isinstance(content, str) else ""
    return ""


class AutoToon:
    """Pre-process, call the model, post-process."""

    def __init__(self, config: HookConfig | Mapping[str, Any] | None = None) -> None:
        if config is None:
            config = HookConfig()
        elif not isinstance(config, HookConfig):
            config = HookConfig.model_validate(dict(config))
        self.config = config
        self.processor = ToonProcessor(
            config.toon_config(),
            emitter=EventEmitter(enabled=config.log_metrics),
        )

    def _prepare(
        self, request: PipelineRequest | Mapping[str, Any]
    ) -> tuple[PipelineRequest, ProcessedRequest, EligibilityReport]:
        original = (
            request
            if isinstance(request, PipelineRequest)
            else PipelineRequest.model_validate(dict(request))
        )
        toon_request, eligibility = self.processor.pre_process(original)
        if self.config.add_instructions and toon_request.toon_processed:
            toon_request = toon_request.model_copy(
                update={"system_prompt": add_toon_instructions(toon_request.system_prompt)}
            )
        return original, toon_request, eligibility

    def _finish(
        self,
        original: PipelineRequest,
        toon_request: ProcessedRequest,
        eligibility: EligibilityReport,
        reply: ModelReply,
    ) -> ToonResult:
        content = _content_of(reply)
        post = self.processor.post_process(content)
        metrics = toon_request.metrics
        return ToonResult(
            original_request=original,
            toon_request=toon_request,
            eligibility=eligibility,
            metrics=metrics,
            llm_response=reply,
            parsed_response=post.parsed if post.success else content,
            token_savings=metrics.savings if metrics else 0,
        )

    def process(
        self,
        request: PipelineRequest | Mapping[str, Any],
        llm_call: Callable[[ProcessedRequest], ModelReply],
    ) -> ToonResult:
        """Run one request through the pipeline with a synchronous model call."""
        original, toon_request, eligibility = self._prepare(request)
        reply = llm_call(toon_request)
        return self._finish(original, toon_request, eligibility, reply)

    async def aprocess(
        self,
        request: PipelineRequest | Mapping[str, Any],
        llm_call: Callable[[ProcessedRequest], Awaitable[ModelReply]],
    ) -> ToonResult:
        """Same as ``process`` for an async model call."""
        original, toon_request, eligibility = self._prepare(request)
        reply = await llm_call(toon_request)
        return self._finish(original, toon_request, eligibility, reply)

    def wrap(self, client: Any) -> "WrappedClient":
        """Wrap a client so its ``complete`` method is processed automatically."""
        return WrappedClient(client, self)


class WrappedClient:
    """Proxy that routes ``complete`` through ``AutoToon`` and delegates the rest."""

    def __init__(self, client: Any, auto: AutoToon) -> None:
        self._client = client
        self._auto = auto

    def __getattr__(self, name: str) -> Any:
        if name != "complete":
            return getattr(self._client, name)

        target = self._client.complete
        if inspect.iscoroutinefunction(target):
            async def acomplete(request: Any) -> Any:
                result = await self._auto.aprocess(request, target)
                return result.parsed_response
            return acomplete

        def complete(request: Any) -> Any:
            return self._auto.process(request, target).parsed_response
        return complete


def with_toon(
    fn: Callable[[ProcessedRequest], Any],
    config: HookConfig | Mapping[str, Any] | None = None,
) -> Callable[[PipelineRequest | Mapping[str, Any]], Any]:
    """Turn a model-call function into one that takes a request and returns a ``ToonResult``."""
    auto = AutoToon(config)

    if inspect.iscoroutinefunction(fn):
        @functools.wraps(fn)
        async def async_wrapper(request: PipelineRequest | Mapping[str, Any]) -> ToonResult:
            return await auto.aprocess(request, fn)
        return async_wrapper

    @functools.wraps(fn)
    def wrapper(request: PipelineRequest | Mapping[str, Any]) -> ToonResult:
        return auto.process(request, fn)
    return wrapper


def _has_data(request: Any) -> bool:
    if isinstance(request, PipelineRequest):
        return request.data is not None
    if isinstance(request, Mapping):
        return request.get("data") is not None
    return False


def toon_method(config: HookConfig | Mapping[str, Any] | None = None) -> Callable:
    """Decorate a method whose first argument is a request.

    Requests carrying data go through ``AutoToon`` and the method receives the
    processed request; anything else calls the method unchanged.
    """
    auto = AutoToon(config)

    def decorator(method: Callable) -> Callable:
        if inspect.iscoroutinefunction(method):
            @functools.wraps(method)
            async def async_wrapper(self: Any, request: Any, *args: Any, **kwargs: Any) -> Any:
                if not _has_data(request):
                    return await method(self, request, *args, **kwargs)

                async def call(processed: ProcessedRequest) -> ModelReply:
                    return await method(self, processed, *args, **kwargs)
                return await auto.aprocess(request, call)
            return async_wrapper

        @functools.wraps(method)
        def wrapper(self: Any, request: Any, *args: Any, **kwargs: Any) -> Any:
            if not _has_data(request):
                return method(self, request, *args, **kwargs)
            return auto.process(request, lambda processed: method(self, processed, *args, **kwargs))
        return wrapper

    return decorator
