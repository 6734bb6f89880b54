# =============================================================================
# mistral_chat/schema.py: Request Models (the "nouns" of the system)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Defines the shape of a valid chat-completion request for the two Mistral
#   model families, and exposes two independent things built from those
#   shapes:
#     - validate_text_request / validate_vision_request
#         raw JSON arguments  →  a validated request (or ValidationError)
#     - describe_text_schema / describe_vision_schema
#         the same shapes as a self-contained JSON Schema for advertising
#         to MCP clients
#
# THE TWO MODEL FAMILIES:
#   Text models (mistral-large-latest, mistral-small-latest) reject image
#   content upstream.  Vision models (pixtral-*) accept text and image
#   chunks.  A request is tied to exactly one family by its "model" enum.
#
# MESSAGE SHAPE:
#   Every message is a tagged union on "role" (system / user / assistant).
#   Content is either a plain string or a NON-EMPTY list of chunks, and
#   each chunk is a tagged union on "type" (text / image_url).
#
#     {"role": "user", "content": "hello"}                     ← always legal
#     {"role": "user", "content": ""}                          ← legal
#     {"role": "user", "content": []}                          ← rejected
#     {"role": "user", "content": [{"type": "image_url",
#                                   "imageUrl": "https://..."}]}
#                                              ← vision models only
#
#   System messages are text-only in both families.
#
# THE TEXT-ONLY RULE:
#   For text models the "no images anywhere" rule is checked over the whole
#   raw request, alongside the structural checks, so every offending chunk
#   is reported at its own path (messages.<i>.content.<j>).  The advertised
#   JSON Schema still shows text models as accepting text chunks only.
# =============================================================================

from typing import Annotated, Any, Literal, Optional, Union, get_args

from pydantic import BaseModel, Field, ValidationError, WithJsonSchema
from pydantic_core import InitErrorDetails, PydanticCustomError


TextModel = Literal["mistral-large-latest", "mistral-small-latest"]
VisionModel = Literal["pixtral-large-latest", "pixtral-12b-2409"]

TEXT_MODELS: tuple[str, ...] = get_args(TextModel)
VISION_MODELS: tuple[str, ...] = get_args(VisionModel)

TEXT_ONLY_MESSAGE = "Text-only models cannot process image content in any message"


# -----------------------------------------------------------------------------
# Content chunks
# -----------------------------------------------------------------------------
class TextChunk(BaseModel):
    type: Literal["text"]
    text: str


class ImageUrl(BaseModel):
    url: str
    detail: Optional[str] = None


class ImageUrlChunk(BaseModel):
    """An image URL to be displayed in the chat. Only valid with vision models: pixtral-large-latest, pixtral-12b-2409"""

    type: Literal["image_url"]
    # Callers send camelCase "imageUrl"; the upstream wire name is image_url.
    image_url: Union[str, ImageUrl] = Field(alias="imageUrl")


ContentChunk = Annotated[Union[TextChunk, ImageUrlChunk], Field(discriminator="type")]

TextOnlyContent = Union[str, Annotated[list[TextChunk], Field(min_length=1)]]

MixedContent = Union[str, Annotated[list[ContentChunk], Field(min_length=1)]]

# Text-model user/assistant content is validated as a mixed chunk list so the
# text-only rule can report image chunks by position, but it is advertised
# as text-only.
_TEXT_CHUNK_LIST_SCHEMA = {
    "type": "array",
    "items": TextChunk.model_json_schema(),
    "minItems": 1,
}

TextModelContent = Union[
    str,
    Annotated[
        list[ContentChunk],
        Field(min_length=1),
        WithJsonSchema(_TEXT_CHUNK_LIST_SCHEMA),
    ],
]


# -----------------------------------------------------------------------------
# Messages
# -----------------------------------------------------------------------------
# The class docstrings double as the "description" of each variant in the
# advertised schema, so they are written for the calling agent.
# -----------------------------------------------------------------------------
class SystemMessage(BaseModel):
    """A system message is an optional message that sets the behavior and context for Mistral in a conversation, such as modifying its personality or providing specific instructions. It is always text-only."""

    role: Literal["system"]
    content: TextOnlyContent


class TextModelUserMessage(BaseModel):
    """User message for text-only models - no image content allowed"""

    role: Literal["user"]
    content: TextModelContent


class TextModelAssistantMessage(BaseModel):
    """Assistant message for text-only models - no image content allowed"""

    role: Literal["assistant"]
    content: TextModelContent


class VisionModelUserMessage(BaseModel):
    """User message for vision models - can include text, images, or both"""

    role: Literal["user"]
    content: MixedContent


class VisionModelAssistantMessage(BaseModel):
    """Assistant message for vision models - can include text, images, or both"""

    role: Literal["assistant"]
    content: MixedContent


TextModelMessage = Annotated[
    Union[SystemMessage, TextModelUserMessage, TextModelAssistantMessage],
    Field(discriminator="role"),
]

VisionModelMessage = Annotated[
    Union[SystemMessage, VisionModelUserMessage, VisionModelAssistantMessage],
    Field(discriminator="role"),
]


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class _ChatCompletionRequest(BaseModel):
    def to_upstream(self) -> dict[str, Any]:
        """Payload for the upstream chat-completion call.

        Uses the upstream field names (image_url, not imageUrl) and leaves
        out optional fields the caller never set.
        """
        return self.model_dump(exclude_unset=True)


class TextModelRequest(_ChatCompletionRequest):
    """Request for text-only models"""

    model: TextModel
    messages: Annotated[list[TextModelMessage], Field(min_length=1)]


class VisionModelRequest(_ChatCompletionRequest):
    """Request for vision-capable models"""

    model: VisionModel
    messages: Annotated[list[VisionModelMessage], Field(min_length=1)]


# =============================================================================
# Validation
# =============================================================================
def validate_text_request(raw: Any) -> TextModelRequest:
    """Validate tool arguments for a text-only model.

    Raises:
        pydantic.ValidationError: listing every violated path.  Structural
            errors come first, followed by one error per image chunk at
            ``messages.<i>.content.<j>``.  Image chunks are reported even
            when other parts of the request are malformed.
    """
    image_errors = _image_chunk_errors(raw)
    try:
        request = TextModelRequest.model_validate(raw)
    except ValidationError as e:
        if not image_errors:
            raise
        raise ValidationError.from_exception_data(
            TextModelRequest.__name__, _line_errors(e) + image_errors
        ) from None

    if image_errors:
        raise ValidationError.from_exception_data(
            TextModelRequest.__name__, image_errors
        )
    return request


def _image_chunk_errors(raw: Any) -> list[InitErrorDetails]:
    """Find image chunks in the raw arguments, whatever else is wrong with them."""
    messages = raw.get("messages") if isinstance(raw, dict) else None
    if not isinstance(messages, list):
        return []

    line_errors: list[InitErrorDetails] = []
    for i, message in enumerate(messages):
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, list):
            continue
        for j, chunk in enumerate(content):
            if isinstance(chunk, dict) and chunk.get("type") == "image_url":
                line_errors.append({
                    "type": PydanticCustomError("text_only_model", TEXT_ONLY_MESSAGE),
                    "loc": ("messages", i, "content", j),
                    "input": chunk,
                })
    return line_errors


def _line_errors(error: ValidationError) -> list[InitErrorDetails]:
    line_errors: list[InitErrorDetails] = []
    for e in error.errors(include_url=False):
        details: InitErrorDetails = {
            "type": e["type"], "loc": e["loc"], "input": e["input"],
        }
        if "ctx" in e:
            details["ctx"] = e["ctx"]
        line_errors.append(details)
    return line_errors


def validate_vision_request(raw: Any) -> VisionModelRequest:
    """Validate tool arguments for a vision model."""
    return VisionModelRequest.model_validate(raw)


# =============================================================================
# Schema descriptors
# =============================================================================
# MCP clients expect a single self-contained JSON Schema per tool, so the
# pydantic output is flattened: every "$ref" is replaced by its definition
# and "$defs" is dropped.  Discriminator mappings point into "$defs" too, so
# only their propertyName survives.
# =============================================================================
def describe_text_schema() -> dict[str, Any]:
    return _inline_refs(TextModelRequest.model_json_schema())


def describe_vision_schema() -> dict[str, Any]:
    return _inline_refs(VisionModelRequest.model_json_schema())


def _inline_refs(schema: dict[str, Any]) -> dict[str, Any]:
    defs = schema.pop("$defs", {})

    def resolve(node: Any) -> Any:
        if isinstance(node, list):
            return [resolve(item) for item in node]
        if not isinstance(node, dict):
            return node
        if "$ref" in node:
            name = node["$ref"].rsplit("/", 1)[-1]
            siblings = {k: v for k, v in node.items() if k != "$ref"}
            return resolve({**defs[name], **siblings})
        resolved = {}
        for key, value in node.items():
            if key == "discriminator" and isinstance(value, dict):
                resolved[key] = {"propertyName": value["propertyName"]}
            else:
                resolved[key] = resolve(value)
        return resolved

    return resolve(schema)
