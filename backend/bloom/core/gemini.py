import json
import logging
from typing import Any, Dict, Optional

import httpx

from bloom.core.errors import UpstreamError, redact_key

logger = logging.getLogger(__name__)

# Service endpoint for Gemini API (v1beta)
API_BASE = "https://generativelanguage.googleapis.com/v1beta"

PROVIDER = "gemini"


def _normalize_model(name: str) -> str:
    name = (name or "").strip()
    if not name:
        return ""
    return name if name.startswith("models/") else f"models/{name}"


def _extract_text(data: Dict[str, Any]) -> Optional[str]:
    """
    Concatenate the text parts of the first candidate.
    Returns None when Gemini answered without usable content (safety block, empty parts, ...).
    """
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        logger.warning("Unexpected Gemini response shape; raw=%s", json.dumps(data)[:2000])
        return None

    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    return text or None


class GeminiClient:
    """
    Chat-style wrapper around generateContent.
    No retries: one request per call, bounded by `timeout`.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        timeout: float = 60.0,
        api_base: str = API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = _normalize_model(model)
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")
        self._transport = transport

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 800,
        temperature: float = 0.2,
    ) -> Optional[str]:
        if not self.api_key:
            raise UpstreamError(PROVIDER, "AI request failed: GEMINI_API_KEY is not set")
        if not self.model:
            raise UpstreamError(PROVIDER, "AI request failed: GEMINI_MODEL is not set")

        url = f"{self.api_base}/{self.model}:generateContent"
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "response_mime_type": "application/json",
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.error("Gemini request error: %s: %s", type(e).__name__, redact_key(str(e)))
            raise UpstreamError(PROVIDER, "AI request failed")

        if r.status_code >= 400:
            safe_url = redact_key(str(r.request.url))
            safe_body = redact_key(r.text)[:2000]
            logger.error("Gemini request failed: %s\nURL:\n%s\nBODY:\n%s", r.status_code, safe_url, safe_body)
            raise UpstreamError(PROVIDER, "AI request failed", upstream_status=r.status_code, body=safe_body)

        try:
            data = r.json()
        except ValueError:
            raise UpstreamError(PROVIDER, "AI request failed: non-JSON reply", upstream_status=r.status_code)

        return _extract_text(data)
