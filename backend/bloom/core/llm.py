from typing import Optional, Protocol, Union

from bloom.core.config import Settings
from bloom.core.gemini import GeminiClient
from bloom.core.openai_chat import OpenAIChatClient


class LLMClient(Protocol):
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 800,
        temperature: float = 0.2,
    ) -> Optional[str]: ...


def build_llm_client(settings: Settings) -> Union[OpenAIChatClient, GeminiClient]:
    provider = (settings.LLM_PROVIDER or "openai").strip().lower()

    if provider == "gemini":
        return GeminiClient(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    if provider in ("openai", "openrouter"):
        return OpenAIChatClient(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            model=settings.OPENAI_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER!r} (expected 'openai' or 'gemini')")
