import logging
from typing import Any, Dict, Optional

import httpx

from bloom.core.errors import UpstreamError

logger = logging.getLogger(__name__)

PROVIDER = "openai"


def _extract_content(data: Dict[str, Any]) -> Optional[str]:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(content, str):
        return content
    # some OpenAI-compatible providers return a list of content parts
    if isinstance(content, list):
        texts = [p.get("text") for p in content if isinstance(p, dict)]
        return "".join(t for t in texts if isinstance(t, str)) or None
    return None


class OpenAIChatClient:
    """
    OpenAI-compatible /chat/completions client (OpenAI, OpenRouter, ...).
    Bearer auth, one request per call, bounded by `timeout`.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
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
            raise UpstreamError(PROVIDER, "AI request failed: OPENAI_API_KEY is not set")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(f"{self.base_url}/chat/completions", json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Chat completion request error: %s: %s", type(e).__name__, e)
            raise UpstreamError(PROVIDER, "AI request failed")

        if r.status_code >= 400:
            body = r.text[:2000]
            logger.error("Chat completion failed: %s\nBODY:\n%s", r.status_code, body)
            raise UpstreamError(PROVIDER, "AI request failed", upstream_status=r.status_code, body=body)

        try:
            data = r.json()
        except ValueError:
            raise UpstreamError(PROVIDER, "AI request failed: non-JSON reply", upstream_status=r.status_code)

        return _extract_content(data)
