"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest
from openai import APIConnectionError

from nutrition_diary.adapters.fdc_client import HttpxFdcClient
from nutrition_diary.adapters.openai_completion_client import OpenAICompletionClient
from nutrition_diary.domain.errors import OracleResponseError, OracleUnavailableError


class _FakeResponses:
    def __init__(self, output_text: str = "", error: Exception | None = None) -> None:
        self.output_text = output_text
        self.error = error
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if self.error is not None:
            raise self.error
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, responses: _FakeResponses) -> None:
        self.responses = responses


def _complete(client: OpenAICompletionClient) -> dict[str, object]:
    return asyncio.run(
        client.complete(
            model="gpt-5.2",
            reasoning_effort="low",
            store=False,
            schema_name="nutrients_per_100g",
            schema={"type": "object"},
            prompt="Estimate rice",
        )
    )


def test_openai_completion_client_parses_output() -> None:
    responses = _FakeResponses(output_text=json.dumps({"calories": 130}))
    client = OpenAICompletionClient(client=_FakeOpenAI(responses))

    result = _complete(client)

    assert result == {"calories": 130}
    payload = responses.last_payload
    assert payload is not None
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["text"]["format"]["name"] == "nutrients_per_100g"
    assert payload["store"] is False


def test_openai_completion_client_without_key_is_unavailable() -> None:
    client = OpenAICompletionClient.create(api_key=None)

    with pytest.raises(OracleUnavailableError):
        _complete(client)


def test_openai_completion_client_maps_api_errors() -> None:
    error = APIConnectionError(request=httpx.Request("POST", "https://api.test"))
    client = OpenAICompletionClient(
        client=_FakeOpenAI(_FakeResponses(error=error))
    )

    with pytest.raises(OracleUnavailableError):
        _complete(client)


@pytest.mark.parametrize("output_text", ["", "not json"])
def test_openai_completion_client_rejects_bad_output(output_text: str) -> None:
    client = OpenAICompletionClient(
        client=_FakeOpenAI(_FakeResponses(output_text=output_text))
    )

    with pytest.raises(OracleResponseError):
        _complete(client)


def test_fdc_client_search_and_get() -> None:
    seen_bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["api_key"] == "key"
        if request.url.path.endswith("/foods/search"):
            seen_bodies.append(json.loads(request.content.decode()))
            return httpx.Response(200, json={"foods": []})
        return httpx.Response(200, json={"fdcId": 1, "foodNutrients": []})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=async_client,
    )

    search = asyncio.run(client.search_foods("rice", page_size=1))
    food = asyncio.run(client.get_food(1))

    assert search == {"foods": []}
    assert food["fdcId"] == 1
    assert seen_bodies[0]["pageSize"] == 1
    assert "SR Legacy" in seen_bodies[0]["dataType"]


def test_fdc_client_raises_on_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_food(1))
