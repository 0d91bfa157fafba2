"""Tests for industry classification."""

import json

import httpx
import pytest

from listing_scraper.classify import (
    INDUSTRIES,
    SYSTEM_PROMPT,
    FallbackClassifier,
    OpenAIClassifier,
    get_classifier,
)


def _completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _classifier(handler) -> OpenAIClassifier:
    return OpenAIClassifier("sk-test", transport=httpx.MockTransport(handler))


class TestGetClassifier:
    """Tests for classifier selection."""

    def test_no_key_gives_fallback(self) -> None:
        assert isinstance(get_classifier(api_key=""), FallbackClassifier)

    def test_key_gives_openai(self) -> None:
        assert isinstance(get_classifier(api_key="sk-test"), OpenAIClassifier)


class TestFallbackClassifier:
    @pytest.mark.asyncio
    async def test_fixed_result(self) -> None:
        result = await FallbackClassifier().classify("A bakery in Austin")
        assert result.industry == "Other"
        assert result.confidence == 0.1


class TestOpenAIClassifier:
    """Tests for the OpenAI-backed classifier."""

    @pytest.mark.asyncio
    async def test_request_shape_and_result(self) -> None:
        """Test prompt, auth header and parsed reply."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion('{"industry": "Food & Beverage", "confidence": 0.92}'))

        result = await _classifier(handler).classify("Neighborhood bakery and coffee shop")

        assert result.industry == "Food & Beverage"
        assert result.confidence == 0.92
        assert seen["auth"] == "Bearer sk-test"
        body = seen["body"]
        assert body["temperature"] == 0.1
        assert body["max_tokens"] == 100
        assert body["messages"][0]["content"] == SYSTEM_PROMPT
        assert body["messages"][1]["content"] == 'Classify this business: "Neighborhood bakery and coffee shop"'

    def test_prompt_lists_every_category(self) -> None:
        assert len(INDUSTRIES) == 14
        for industry in INDUSTRIES:
            assert industry in SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_missing_fields_defaulted(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_completion("{}"))

        result = await _classifier(handler).classify("Something")
        assert result.industry == "Other"
        assert result.confidence == 0.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(500, text="upstream error"),
        httpx.Response(429, json={"error": "rate limited"}),
        httpx.Response(200, json=_completion("not json at all")),
        httpx.Response(200, json=_completion(None)),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, text="<html>"),
    ])
    async def test_failures_fall_back(self, response) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return response

        result = await _classifier(handler).classify("Something")
        assert result.industry == "Other"
        assert result.confidence == 0.1

    @pytest.mark.asyncio
    async def test_connection_error_falls_back(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _classifier(handler).classify("Something")
        assert result.industry == "Other"
        assert result.confidence == 0.1
