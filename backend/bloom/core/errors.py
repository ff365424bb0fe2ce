import re
from typing import Any, Dict, Optional

from fastapi import status


def redact_key(s: str) -> str:
    """
    Redact 'key=...' / 'api-key=...' in URLs or text so we never leak API keys in logs/responses.
    """
    if not s:
        return s
    return re.sub(r"((?:api-)?key=)([^&\s]+)", r"\1REDACTED", s)


class BloomError(Exception):
    """
    Base error for the identification backend.
    Every subclass maps to one HTTP status; the API layer renders it as {"error": message, ...}.
    """

    error_code = "BLOOM_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.error_code, **self.details}


class InputValidationError(BloomError):
    error_code = "INVALID_INPUT"

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class UpstreamError(BloomError):
    """
    A provider (PlantNet or the LLM) was unreachable, timed out, or answered non-2xx.
    status_code is the HTTP status we answer with; upstream_status is what the provider said (None on timeout).
    """

    error_code = "UPSTREAM_ERROR"

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        upstream_status: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.provider = provider
        self.upstream_status = upstream_status
        self.body = body
        super().__init__(
            message,
            status_code=status_code,
            details={"provider": provider, "upstream_status": upstream_status},
        )


class NoResultsError(BloomError):
    error_code = "NO_RESULTS"

    def __init__(self, message: str = "No identification results from PlantNet"):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class EmptyAIResponseError(BloomError):
    error_code = "AI_EMPTY_RESPONSE"

    def __init__(self, message: str = "AI did not return a response"):
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY)


class AIParseError(BloomError):
    error_code = "AI_PARSE_ERROR"

    def __init__(self, message: str = "Failed to parse AI JSON response"):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
