"""Tests for the OpenAI nutrition client."""

import asyncio
import json

import httpx
import openai
import pytest

from foodlens.adapters.openai_nutrition_client import OpenAINutritionClient
from foodlens.domain.ai import ChatTurn
from foodlens.errors import UpstreamUnavailable

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/responses")


def _status_error(status_code: int) -> openai.APIStatusError:
    response = httpx.Response(status_code, request=_REQUEST)
    if status_code == 429:
        return openai.RateLimitError("rate limited", response=response, body=None)
    if status_code >= 500:
        return openai.InternalServerError("server error", response=response, body=None)
    return openai.BadRequestError("bad request", response=response, body=None)


class _FakeResponses:
    def __init__(self, outcomes: list[object]) -> None:
        self.outcomes = outcomes
        self.payloads: list[dict[str, object]] = []

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.payloads.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return type("Resp", (), {"output_text": outcome})()


class _FakeOpenAI:
    def __init__(self, outcomes: list[object]) -> None:
        self.responses = _FakeResponses(outcomes)


def _client(outcomes: list[object]) -> tuple[OpenAINutritionClient, list[float]]:
    delays: list[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    client = OpenAINutritionClient(client=_FakeOpenAI(outcomes), sleep=sleep)
    return client, delays


def _complete_json(client: OpenAINutritionClient) -> dict[str, object]:
    return asyncio.run(
        client.complete_json(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            instructions="Be precise.",
            prompt="Analyze",
            schema={"type": "object"},
            schema_name="food_analysis",
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
        )
    )


def test_complete_json_parses_output_and_builds_payload() -> None:
    client, delays = _client([json.dumps({"name": "Soup"})])

    result = _complete_json(client)

    payload = client.client.responses.payloads[0]
    assert result == {"name": "Soup"}
    assert delays == []
    assert payload["instructions"] == "Be precise."
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["text"]["format"]["name"] == "food_analysis"
    assert payload["text"]["format"]["strict"] is True
    content = payload["input"][0]["content"]
    assert content[1] == {
        "type": "input_image",
        "image_url": "data:image/jpeg;base64,ZmFrZQ==",
    }


def test_complete_text_sends_history_before_prompt() -> None:
    client, _ = _client(["Eat more greens."])

    reply = asyncio.run(
        client.complete_text(
            model="gpt-5.2",
            reasoning_effort=None,
            store=False,
            instructions="Be kind.",
            prompt="Hi",
            history=[
                ChatTurn(role="user", text="Hello"),
                ChatTurn(role="assistant", text="Hi there"),
            ],
        )
    )

    payload = client.client.responses.payloads[0]
    assert reply == "Eat more greens."
    assert "reasoning" not in payload
    assert [message["role"] for message in payload["input"]] == [
        "user",
        "assistant",
        "user",
    ]
    assert payload["input"][-1]["content"] == "Hi"


def test_complete_text_attaches_image_to_prompt() -> None:
    client, _ = _client(["Looks like borscht."])

    asyncio.run(
        client.complete_text(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            instructions="Be kind.",
            prompt="What is this?",
            history=[ChatTurn(role="assistant", text="Hi there")],
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
        )
    )

    payload = client.client.responses.payloads[0]
    assert payload["input"][0] == {"role": "assistant", "content": "Hi there"}
    assert payload["input"][-1] == {
        "role": "user",
        "content": [
            {"type": "input_text", "text": "What is this?"},
            {"type": "input_image", "image_url": "data:image/jpeg;base64,ZmFrZQ=="},
        ],
    }


def test_overloaded_provider_is_retried_with_backoff() -> None:
    client, delays = _client(
        [_status_error(503), _status_error(503), json.dumps({"name": "Soup"})]
    )

    assert _complete_json(client) == {"name": "Soup"}
    assert delays == [2, 4]


def test_retries_are_bounded() -> None:
    client, delays = _client([_status_error(503) for _ in range(4)])

    with pytest.raises(UpstreamUnavailable):
        _complete_json(client)

    assert delays == [2, 4, 6]
    assert len(client.client.responses.payloads) == 4


@pytest.mark.parametrize("status_code", [429, 500, 502])
def test_other_transient_failures_are_not_retried(status_code) -> None:
    client, delays = _client([_status_error(status_code)])

    with pytest.raises(UpstreamUnavailable):
        _complete_json(client)

    assert delays == []


def test_timeouts_surface_as_upstream_unavailable() -> None:
    client, _ = _client([openai.APITimeoutError(request=_REQUEST)])

    with pytest.raises(UpstreamUnavailable):
        _complete_json(client)


def test_client_errors_propagate() -> None:
    client, _ = _client([_status_error(400)])

    with pytest.raises(openai.BadRequestError):
        _complete_json(client)


def test_empty_output_is_an_error() -> None:
    client, _ = _client([""])

    with pytest.raises(RuntimeError):
        _complete_json(client)
