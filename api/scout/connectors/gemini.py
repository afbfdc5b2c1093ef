from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings


logger = logging.getLogger(__name__)


class GeminiUnavailable(RuntimeError):
    pass


class GeminiError(RuntimeError):
    pass


class GeminiClient:
    """Thin async wrapper over the Gemini ``generateContent`` REST endpoint.

    Every call can ground itself with the ``google_search`` tool; the model then
    cites pages it found, which is where applicant evidence links come from.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float | None = 120,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise GeminiUnavailable("Gemini client not configured; set GEMINI_API_KEY.")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> "GeminiClient":
        return cls(
            settings.gemini_api_key or "",
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.gemini_timeout,
            transport=transport,
        )

    async def generate(self, prompt: str, *, web_search: bool = True, thinking_budget: int | None = None) -> str:
        """Send one prompt and return the first candidate's text."""
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if web_search:
            payload["tools"] = [{"google_search": {}}]
        if thinking_budget is not None:
            payload["generationConfig"] = {"thinkingConfig": {"thinkingBudget": thinking_budget}}

        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(url, headers=headers, json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Gemini HTTP %s: %.300s", exc.response.status_code, exc.response.text)
            raise GeminiError(f"Gemini returned HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise GeminiError(f"Gemini request failed: {exc}") from exc

        return _extract_text(data)


def _extract_text(response: dict[str, Any]) -> str:
    if not isinstance(response, dict):
        raise GeminiError("Gemini returned an unexpected payload")
    candidates = response.get("candidates") or []
    if not candidates:
        feedback = response.get("promptFeedback") or {}
        reason = feedback.get("blockReason") or "no candidates"
        raise GeminiError(f"Gemini returned no content ({reason})")
    first = candidates[0] if isinstance(candidates[0], dict) else {}
    parts = (first.get("content") or {}).get("parts") or []
    texts = [p.get("text") for p in parts if isinstance(p, dict) and p.get("text")]
    text = "".join(texts).strip()
    if not text:
        raise GeminiError(f"Gemini returned no text ({first.get('finishReason') or 'empty response'})")
    return text
