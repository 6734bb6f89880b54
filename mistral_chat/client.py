# =============================================================================
# mistral_chat/client.py: Upstream chat-completion client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Sends a validated {model, messages} payload to Mistral's chat-completion
#   endpoint and hands back the response as a plain dict.
#
# HOW:
#   Mistral serves an OpenAI-compatible /chat/completions endpoint, so the
#   official openai async SDK is pointed at Mistral's base URL.  The typed
#   SDK response is converted with model_dump() at this boundary; callers
#   only ever see dicts, which keeps the dispatcher testable with a stub
#   that returns canned JSON.
#
#   The SDK's own timeout and retry defaults are the only latency bound.
# =============================================================================

from typing import Any, Optional

from openai import AsyncOpenAI

from mistral_chat.config import DEFAULT_BASE_URL

NO_COMPLETION = "No completion"


class MistralClient:
    """Thin async wrapper around ``chat.completions.create``."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL):
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def complete(self, model: str, messages: list[dict[str, Any]]) -> dict:
        resp = await self._client.chat.completions.create(
            model=model,
            messages=messages,
        )
        return resp.model_dump()


def extract_text(resp: dict) -> str:
    """Return the text of the first choice, or NO_COMPLETION if there is none.

    Handles both a plain string ``content`` and a list of content chunks
    (only the text chunks are kept).  An empty string is returned as-is.

    Raises:
        TypeError / AttributeError / KeyError: if the response is not shaped
            like a chat completion at all.
    """
    choices = resp.get("choices") or []
    if not choices:
        return NO_COMPLETION

    message: Optional[dict] = choices[0].get("message")
    if not message:
        return NO_COMPLETION

    content = message.get("content")
    if content is None:
        return NO_COMPLETION
    if isinstance(content, str):
        return content
    return "".join(
        chunk["text"] for chunk in content if chunk.get("type") == "text"
    )
