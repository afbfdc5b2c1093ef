import json

import httpx
import pytest

from scout.config import Settings
from scout.connectors.gemini import GeminiClient, GeminiError, GeminiUnavailable


def _transport(handler):
    seen: list[httpx.Request] = []

    def _handle(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return httpx.MockTransport(_handle), seen


def _ok(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


class TestGeminiClient:
    def test_requires_api_key(self):
        with pytest.raises(GeminiUnavailable):
            GeminiClient("")

    def test_from_settings_without_key(self):
        with pytest.raises(GeminiUnavailable):
            GeminiClient.from_settings(Settings(gemini_api_key=None))

    @pytest.mark.asyncio
    async def test_search_call_payload(self):
        transport, seen = _transport(lambda r: _ok("  ```json\n[]\n```  "))
        client = GeminiClient("k-123", model="gemini-2.5-flash", transport=transport)

        text = await client.generate("find students")

        assert text == "```json\n[]\n```"
        req = seen[0]
        assert req.url.path.endswith("/models/gemini-2.5-flash:generateContent")
        assert req.headers["x-goog-api-key"] == "k-123"
        body = json.loads(req.content)
        assert body["contents"][0]["parts"][0]["text"] == "find students"
        assert body["tools"] == [{"google_search": {}}]
        assert "generationConfig" not in body

    @pytest.mark.asyncio
    async def test_thinking_budget(self):
        transport, seen = _transport(lambda r: _ok("https://example.com"))
        client = GeminiClient("k", transport=transport)
        await client.generate("url please", thinking_budget=0)
        body = json.loads(seen[0].content)
        assert body["generationConfig"] == {"thinkingConfig": {"thinkingBudget": 0}}

    @pytest.mark.asyncio
    async def test_joins_text_parts(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "[1,"}, {"functionCall": {}}, {"text": " 2]"}]}}]}
        transport, _ = _transport(lambda r: httpx.Response(200, json=payload))
        assert await GeminiClient("k", transport=transport).generate("x") == "[1, 2]"

    @pytest.mark.asyncio
    async def test_http_error(self):
        transport, _ = _transport(lambda r: httpx.Response(503, json={"error": {"message": "overloaded"}}))
        with pytest.raises(GeminiError, match="HTTP 503"):
            await GeminiClient("k", transport=transport).generate("x")

    @pytest.mark.asyncio
    async def test_blocked_prompt(self):
        payload = {"promptFeedback": {"blockReason": "SAFETY"}}
        transport, _ = _transport(lambda r: httpx.Response(200, json=payload))
        with pytest.raises(GeminiError, match="SAFETY"):
            await GeminiClient("k", transport=transport).generate("x")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "candidate,reason",
        [
            ({"finishReason": "SAFETY"}, "SAFETY"),
            ({"finishReason": "MAX_TOKENS", "content": {"parts": []}}, "MAX_TOKENS"),
            ({"content": {"parts": [{"text": "   "}]}}, "empty response"),
        ],
    )
    async def test_candidate_without_text(self, candidate, reason):
        transport, _ = _transport(lambda r: httpx.Response(200, json={"candidates": [candidate]}))
        with pytest.raises(GeminiError, match=f"no text \\({reason}\\)"):
            await GeminiClient("k", transport=transport).generate("x")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def boom(request):
            raise httpx.ConnectError("unreachable", request=request)

        transport, _ = _transport(boom)
        with pytest.raises(GeminiError, match="request failed"):
            await GeminiClient("k", transport=transport).generate("x")
