"""
Unit-тесты HTTP-клиентов: AI-навык перевода и поисковый индекс.

Используют httpx.MockTransport вместо реальной сети.
"""

import json

import httpx
import pytest

from policy_service.core.errors import SearchIndexError
from policy_service.domain.interfaces import SkillContext
from policy_service.infrastructure.ai import LLMTranslationSkill
from policy_service.infrastructure.search import SearchIndexClient, is_retryable_http_error

CONTEXT = SkillContext(
    organization_id="org-1",
    user_id="user-1",
    entity_type="POLICY_VERSION",
    entity_id="version-1",
    permissions=["ai:skills:translate"],
)


def completion(content, model="gpt-test"):
    return {"model": model, "choices": [{"message": {"role": "assistant", "content": content}}]}


class TestLLMTranslationSkill:
    """Тесты LLMTranslationSkill."""

    @pytest.mark.asyncio
    async def test_successful_translation(self):
        captured = {}

        def handler(request: httpx.Request):
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("  <p>Hallo</p> "))

        skill = LLMTranslationSkill(
            api_url="http://llm-proxy:8002/",
            api_key="secret",
            model="gpt-test",
            transport=httpx.MockTransport(handler),
        )

        result = await skill.execute_skill(
            "translate",
            {"content": "<p>Hello</p>", "targetLanguage": "de", "preserveFormatting": True},
            CONTEXT,
        )

        assert result.success is True
        assert result.data == {"translated": "<p>Hallo</p>"}
        assert result.metadata == {"model": "gpt-test"}
        assert captured["url"] == "http://llm-proxy:8002/v1/chat/completions"
        assert captured["headers"]["x-internal-auth"] == "secret"
        assert captured["body"]["model"] == "gpt-test"
        assert captured["body"]["messages"][-1] == {"role": "user", "content": "<p>Hello</p>"}
        assert "German" in captured["body"]["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_unknown_skill(self):
        skill = LLMTranslationSkill("http://llm", "k", "m", transport=httpx.MockTransport(lambda r: httpx.Response(500)))

        result = await skill.execute_skill("summarize", {}, CONTEXT)

        assert result.success is False
        assert "Unknown skill" in result.error

    @pytest.mark.asyncio
    async def test_proxy_error_is_reported_not_raised(self):
        skill = LLMTranslationSkill(
            "http://llm", "k", "m", transport=httpx.MockTransport(lambda r: httpx.Response(503))
        )

        result = await skill.execute_skill("translate", {"content": "x", "targetLanguage": "fr"}, CONTEXT)

        assert result.success is False
        assert result.error == "LLM proxy error 503"

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        skill = LLMTranslationSkill(
            "http://llm", "k", "m", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"choices": []}))
        )

        result = await skill.execute_skill("translate", {"content": "x", "targetLanguage": "fr"}, CONTEXT)

        assert result.success is False
        assert result.error == "Malformed response from LLM proxy"

    @pytest.mark.asyncio
    async def test_empty_translation(self):
        skill = LLMTranslationSkill(
            "http://llm", "k", "m", transport=httpx.MockTransport(lambda r: httpx.Response(200, json=completion("  ")))
        )

        result = await skill.execute_skill("translate", {"content": "x", "targetLanguage": "fr"}, CONTEXT)

        assert result.success is False
        assert result.error == "Empty translation returned"


class TestSearchIndexClient:
    """Тесты SearchIndexClient."""

    @staticmethod
    def make_client(handler, max_attempts=3):
        return SearchIndexClient(
            base_url="http://search:9200/",
            index="policies",
            api_key="secret",
            max_attempts=max_attempts,
            min_wait=0,
            max_wait=0,
            transport=httpx.MockTransport(handler),
        )

    @pytest.mark.asyncio
    async def test_index_document(self):
        requests = []

        def handler(request: httpx.Request):
            requests.append(request)
            return httpx.Response(200, json={"result": "updated"})

        await self.make_client(handler).index_document("policy-1", {"title": "Gifts"})

        assert len(requests) == 1
        assert requests[0].method == "PUT"
        assert str(requests[0].url) == "http://search:9200/indexes/policies/documents/policy-1"
        assert json.loads(requests[0].content) == {"title": "Gifts"}
        assert requests[0].headers["x-internal-auth"] == "secret"

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self):
        responses = iter([httpx.Response(503), httpx.Response(429), httpx.Response(200)])
        calls = []

        def handler(request: httpx.Request):
            calls.append(request)
            return next(responses)

        await self.make_client(handler).index_document("policy-1", {})

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        calls = []

        def handler(request: httpx.Request):
            calls.append(request)
            return httpx.Response(504)

        with pytest.raises(SearchIndexError) as exc_info:
            await self.make_client(handler, max_attempts=2).index_document("policy-1", {})

        assert len(calls) == 2
        assert exc_info.value.details["document_id"] == "policy-1"
        assert "retries exhausted" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        calls = []

        def handler(request: httpx.Request):
            calls.append(request)
            return httpx.Response(400)

        with pytest.raises(SearchIndexError):
            await self.make_client(handler).index_document("policy-1", {})

        assert len(calls) == 1

    def test_is_retryable_http_error(self):
        request = httpx.Request("PUT", "http://search")

        assert is_retryable_http_error(httpx.ConnectError("refused", request=request))
        assert is_retryable_http_error(httpx.ReadTimeout("slow", request=request))
        assert is_retryable_http_error(
            httpx.HTTPStatusError("busy", request=request, response=httpx.Response(503, request=request))
        )
        assert not is_retryable_http_error(
            httpx.HTTPStatusError("bad", request=request, response=httpx.Response(400, request=request))
        )
        assert not is_retryable_http_error(ValueError("nope"))
