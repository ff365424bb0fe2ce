import json
import logging
import re
from typing import Any, Optional

from bloom.core.errors import AIParseError, EmptyAIResponseError

logger = logging.getLogger(__name__)

# Greedy: first "{" through a "}" that is the very last character of the text.
# \Z rather than $ so a trailing newline after the brace is NOT tolerated.
_TRAILING_OBJECT = re.compile(r"\{[\s\S]*\}\Z")


def require_content(text: Optional[str]) -> str:
    """
    The LLM call succeeded at the transport level but may still have produced nothing.
    Whitespace-only text is not "nothing"; it falls through to parse_llm_json and fails there.
    """
    if text is None or text == "":
        raise EmptyAIResponseError()
    return text


def parse_llm_json(text: str) -> Any:
    """
    Two-stage parse of model output:
      1) strict json.loads of the whole text
      2) greedy {...} anchored at end of text (handles "Here is the data:\\n{...}")
    Anything else is a hard AIParseError; never a partially-filled result.
    Non-string input (a client handing back structured content) is also an AIParseError.

    Known blind spots:
      - a stray "{" in the prose before the real JSON swallows the prose into the match
      - JSON followed by any trailing text (including a closing ``` fence) is not recovered
    """
    if not isinstance(text, str):
        logger.warning("Model output is not text: %s", type(text).__name__)
        raise AIParseError()

    try:
        return json.loads(text)
    except ValueError:
        pass

    m = _TRAILING_OBJECT.search(text)
    if not m:
        logger.warning("No trailing JSON object in model output: %r", text[:200])
        raise AIParseError()

    try:
        return json.loads(m.group(0))
    except ValueError:
        logger.warning("Recovered JSON block did not parse: %r", m.group(0)[:200])
        raise AIParseError()
