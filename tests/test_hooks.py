"""Tests for the automatic processing hooks."""

from __future__ import annotations

import asyncio

import pytest

from toonify.adapters.hooks import (
    AutoToon,
    HookConfig,
    ToonResult,
    add_toon_instructions,
    toon_method,
    with_toon,
)
from toonify.contracts.pipeline import LLMResponse, ProcessedRequest

TOON_REPLY = "results[2]{id,score}:\n  1,0.5\n  2,0.75"


def _request(data):
    return {"system_prompt": "You are a data analyst", "user_message": "Score these", "data": data}


def test_add_instructions_appends_primer():
    prompt = add_toon_instructions("Base prompt")
    assert prompt.startswith("Base prompt\n")
    assert "## Data Format" in prompt
    assert "arrayName[N]{field1,field2}:" in prompt


def test_process_encodes_calls_and_decodes(users_data):
    seen: list[ProcessedRequest] = []

    def llm_call(request: ProcessedRequest) -> LLMResponse:
        seen.append(request)
        return LLMResponse(content=TOON_REPLY)

    result = AutoToon(HookConfig(log_metrics=False)).process(_request(users_data), llm_call)

    assert isinstance(result, ToonResult)
    assert seen[0].toon_processed is True
    assert "## Data Format" in seen[0].system_prompt
    assert result.original_request.data == users_data
    assert result.parsed_response == {"results": [{"id": 1, "score": 0.5}, {"id": 2, "score": 0.75}]}
    assert result.metrics is not None
    assert result.token_savings == result.metrics.savings
    assert result.eligibility.should_use_toon is True


def test_process_without_instructions(users_data):
    auto = AutoToon({"add_instructions": False, "log_metrics": False})
    result = auto.process(_request(users_data), lambda req: {"content": TOON_REPLY})
    assert result.toon_request.system_prompt == "You are a data analyst"


def test_process_passthrough_returns_raw_content(deep_data):
    auto = AutoToon(HookConfig(log_metrics=False))
    result = auto.process(_request(deep_data), lambda req: "Just prose.")
    assert result.toon_request.toon_processed is False
    assert result.toon_request.system_prompt == "You are a data analyst"
    assert result.parsed_response == "Just prose."
    assert result.token_savings == 0
    assert result.metrics is None


@pytest.mark.parametrize("reply", [None, {"content": None}, {"content": 7}, {}])
def test_process_missing_reply_content_is_empty(users_data, reply):
    result = AutoToon(HookConfig(log_metrics=False)).process(_request(users_data), lambda req: reply)
    assert result.parsed_response == ""
    assert result.llm_response == reply


def test_hook_thresholds_are_applied(users_data):
    auto = AutoToon(HookConfig(max_nested_depth=1, log_metrics=False))
    result = auto.process(_request(users_data), lambda req: "ok")
    assert result.toon_request.toon_processed is False
    assert auto.processor.get_config().eligibility.max_nested_depth == 1


def test_log_metrics_writes_event(users_data, capsys):
    AutoToon().process(_request(users_data), lambda req: "ok")
    err = capsys.readouterr().err
    assert '"event": "preprocess.encoded"' in err


def test_aprocess_awaits_model_call(users_data):
    async def llm_call(request: ProcessedRequest) -> dict:
        await asyncio.sleep(0)
        return {"content": TOON_REPLY}

    auto = AutoToon(HookConfig(log_metrics=False))
    result = asyncio.run(auto.aprocess(_request(users_data), llm_call))
    assert result.parsed_response["results"][1]["id"] == 2


class FakeClient:
    name = "fake"

    def __init__(self) -> None:
        self.requests: list[ProcessedRequest] = []

    def complete(self, request: ProcessedRequest) -> dict:
        self.requests.append(request)
        return {"content": TOON_REPLY}


class AsyncFakeClient:
    async def complete(self, request: ProcessedRequest) -> dict:
        return {"content": TOON_REPLY}


def test_wrap_intercepts_complete(users_data):
    client = FakeClient()
    wrapped = AutoToon(HookConfig(log_metrics=False)).wrap(client)
    parsed = wrapped.complete(_request(users_data))
    assert parsed["results"][0] == {"id": 1, "score": 0.5}
    assert client.requests[0].toon_processed is True
    assert wrapped.name == "fake"


def test_wrap_async_client(users_data):
    wrapped = AutoToon(HookConfig(log_metrics=False)).wrap(AsyncFakeClient())
    parsed = asyncio.run(wrapped.complete(_request(users_data)))
    assert len(parsed["results"]) == 2


def test_with_toon_wraps_function(users_data):
    calls: list[ProcessedRequest] = []

    def ask(request: ProcessedRequest) -> str:
        calls.append(request)
        return TOON_REPLY

    wrapped = with_toon(ask, {"log_metrics": False})
    result = wrapped(_request(users_data))
    assert calls[0].toon_processed is True
    assert result.parsed_response["results"][0]["score"] == 0.5


def test_with_toon_async_function(users_data):
    async def ask(request: ProcessedRequest) -> str:
        return TOON_REPLY

    wrapped = with_toon(ask, {"log_metrics": False})
    result = asyncio.run(wrapped(_request(users_data)))
    assert result.token_savings > 0


class Service:
    def __init__(self) -> None:
        self.received: list = []

    @toon_method({"log_metrics": False})
    def analyze(self, request):
        self.received.append(request)
        return TOON_REPLY


def test_toon_method_processes_requests_with_data(users_data):
    service = Service()
    result = service.analyze(_request(users_data))
    assert isinstance(result, ToonResult)
    assert isinstance(service.received[0], ProcessedRequest)
    assert service.received[0].toon_processed is True


def test_toon_method_passes_through_without_data():
    service = Service()
    request = {"system_prompt": "s", "user_message": "u"}
    assert service.analyze(request) == TOON_REPLY
    assert service.received[0] is request
