"""Tests for the chat completions evaluator."""

import json

import httpx
import pytest
from openai import AsyncOpenAI

from ctrlaltvibe.app.config import OpenAIConfig
from ctrlaltvibe.core.errors import AIServiceUnavailableError
from ctrlaltvibe.infra.evaluator import VibeEvaluator, build_user_prompt


def _evaluator(handler, api_key: str | None = "sk-test") -> VibeEvaluator:
    config = OpenAIConfig(api_key=api_key, base_url="https://llm.test/v1")
    evaluator = VibeEvaluator(config)
    evaluator._client = AsyncOpenAI(
        api_key=api_key,
        base_url=config.base_url,
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return evaluator


def _completion(content: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 0,
            "model": "gpt-4o",
            "choices": [
                {
                    "index": 0,
                    "finish_reason": "stop",
                    "message": {"role": "assistant", "content": content},
                }
            ],
        },
    )


class TestBuildUserPrompt:
    def test_without_url(self) -> None:
        assert build_user_prompt("An idea", None) == "Project Description: An idea"

    def test_with_url(self) -> None:
        prompt = build_user_prompt("An idea", "https://x.dev")
        assert prompt.splitlines()[1] == "Website URL: https://x.dev"


class TestVibeEvaluator:
    """VibeEvaluator.evaluate() tests."""

    async def test_no_api_key(self) -> None:
        evaluator = VibeEvaluator(OpenAIConfig(api_key=None))
        with pytest.raises(AIServiceUnavailableError):
            await evaluator.evaluate("An idea for a thing")

    async def test_returns_parsed_json(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return _completion(json.dumps({"fitScore": 77}))

        evaluator = _evaluator(handler)
        try:
            result = await evaluator.evaluate("An idea for a thing", "https://x.dev")
        finally:
            await evaluator.close()

        assert result == {"fitScore": 77}
        assert requests[0].url.path == "/v1/chat/completions"
        body = json.loads(requests[0].content)
        assert body["response_format"] == {"type": "json_object"}
        assert body["model"] == "gpt-4o"
        assert requests[0].headers["authorization"] == "Bearer sk-test"
        assert "Website URL: https://x.dev" in body["messages"][1]["content"]

    @pytest.mark.parametrize("status", [401, 429, 500])
    async def test_api_error(self, status) -> None:
        evaluator = _evaluator(
            lambda request: httpx.Response(status, json={"error": {"message": "nope"}})
        )
        with pytest.raises(AIServiceUnavailableError):
            await evaluator.evaluate("An idea for a thing")
        await evaluator.close()

    async def test_invalid_json(self) -> None:
        evaluator = _evaluator(lambda request: _completion("not json"))
        with pytest.raises(AIServiceUnavailableError):
            await evaluator.evaluate("An idea for a thing")
        await evaluator.close()

    async def test_non_object(self) -> None:
        evaluator = _evaluator(lambda request: _completion("[1, 2]"))
        with pytest.raises(AIServiceUnavailableError):
            await evaluator.evaluate("An idea for a thing")
        await evaluator.close()

    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        evaluator = _evaluator(handler)
        with pytest.raises(AIServiceUnavailableError):
            await evaluator.evaluate("An idea for a thing")
        await evaluator.close()
