# =============================================================================
# mistral_chat/dispatcher.py: Tool advertisement and routing
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Knows which tools exist and what each one does when called:
#
#     list_tools()               → metadata for mistral_chat_text and
#                                  mistral_chat_image (text tool first)
#     call_tool(name, arguments) → validate → upstream call → first text
#
# HOW A CALL FLOWS:
#   1. Look the tool up by name            (UnknownToolError if missing)
#   2. Validate arguments for its family   (RequestValidationError)
#   3. Send {model, messages} upstream     (UpstreamError on failure)
#   4. Extract choices[0].message.content  ("No completion" if absent)
#   5. Return {"content": [{"type": "text", "text": ...}]}
#
#   Steps 1 and 2 never touch the network.  A call either returns exactly
#   one text item or raises; there are no partial results.
#
# STATE:
#   The dispatcher holds only the upstream client it was given.  Tests pass
#   a stub with an async complete(model, messages) method.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import openai
from pydantic import ValidationError

from mistral_chat.client import extract_text
from mistral_chat.errors import (
    RequestValidationError,
    UnknownToolError,
    UpstreamError,
)
from mistral_chat.schema import (
    describe_text_schema,
    describe_vision_schema,
    validate_text_request,
    validate_vision_request,
)

TEXT_TOOL = "mistral_chat_text"
IMAGE_TOOL = "mistral_chat_image"


@dataclass(frozen=True)
class ToolMetadata:
    name: str
    description: str
    input_schema: dict[str, Any] = field(repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True)
class _ToolRoute:
    description: str
    describe: Callable[[], dict[str, Any]]
    validate: Callable[[Any], Any]


# Insertion order is advertisement order.
_ROUTES: dict[str, _ToolRoute] = {
    TEXT_TOOL: _ToolRoute(
        description=(
            "Ask the Mistral AI platform for a completion. Use this tool when "
            "the user specifically asks for Mistral's input, or when the user "
            "suggests you get a second opinion. This tool does not support images."
        ),
        describe=describe_text_schema,
        validate=validate_text_request,
    ),
    IMAGE_TOOL: _ToolRoute(
        description=(
            "Ask the Mistral AI platform for a completion that includes image "
            "URLs. Use this tool when you need Mistral to access an image via "
            "its link."
        ),
        describe=describe_vision_schema,
        validate=validate_vision_request,
    ),
}


class ToolDispatcher:
    def __init__(self, client):
        self._client = client

    def list_tools(self) -> list[ToolMetadata]:
        return [
            ToolMetadata(name=name, description=route.description,
                         input_schema=route.describe())
            for name, route in _ROUTES.items()
        ]

    async def call_tool(
        self, name: str, arguments: Optional[dict[str, Any]]
    ) -> dict[str, Any]:
        """Run one tool invocation end to end.

        Raises:
            UnknownToolError: ``name`` is not an advertised tool.
            RequestValidationError: ``arguments`` do not fit the tool's schema.
            UpstreamError: the completion call failed or its response could
                not be read.
        """
        route = _ROUTES.get(name)
        if route is None:
            raise UnknownToolError(name)

        try:
            request = route.validate(arguments if arguments is not None else {})
        except ValidationError as e:
            raise RequestValidationError(name, e) from e

        payload = request.to_upstream()
        try:
            resp = await self._client.complete(
                model=payload["model"], messages=payload["messages"]
            )
        except openai.APIError as e:
            raise UpstreamError(f"Mistral API request failed: {e}") from e

        try:
            text = extract_text(resp)
        except (AttributeError, KeyError, TypeError) as e:
            raise UpstreamError(f"Malformed completion response: {e!r}") from e

        return {"content": [{"type": "text", "text": text}]}
