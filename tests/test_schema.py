"""Tests for request validation and schema descriptors.

These tests cover:
- Text vs vision model families and their allowed content
- Non-empty messages / non-empty chunk lists
- Error paths reported for invalid requests
- The advertised JSON Schema (self-contained, no $ref)
"""
import json

import pytest
from pydantic import ValidationError

from mistral_chat.schema import (
    TEXT_MODELS,
    TEXT_ONLY_MESSAGE,
    VISION_MODELS,
    ImageUrl,
    ImageUrlChunk,
    TextChunk,
    describe_text_schema,
    describe_vision_schema,
    validate_text_request,
    validate_vision_request,
)


def _image(url="https://x/y.png"):
    return {"type": "image_url", "imageUrl": url}


def _text(text="hello"):
    return {"type": "text", "text": text}


class TestTextRequests:
    """Validation for text-only models."""

    @pytest.mark.parametrize("model", TEXT_MODELS)
    def test_accepts_both_text_models(self, model):
        request = validate_text_request(
            {"model": model, "messages": [{"role": "user", "content": "hi"}]}
        )
        assert request.model == model

    def test_round_trips_original_values(self):
        raw = {
            "model": "mistral-large-latest",
            "messages": [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": [_text("one"), _text("two")]},
                {"role": "assistant", "content": [_text("ok")]},
                {"role": "user", "content": "and?"},
            ],
        }
        request = validate_text_request(raw)
        assert request.model_dump(by_alias=True, exclude_unset=True) == raw

    def test_rejects_vision_model(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_text_request(
                {"model": "pixtral-12b-2409",
                 "messages": [{"role": "user", "content": "hi"}]}
            )
        assert [e["loc"] for e in exc_info.value.errors()] == [("model",)]

    def test_rejects_image_chunk_at_its_location(self):
        raw = {
            "model": "mistral-small-latest",
            "messages": [
                {"role": "user", "content": "first"},
                {"role": "user", "content": [_text("look"), _image()]},
            ],
        }
        with pytest.raises(ValidationError) as exc_info:
            validate_text_request(raw)

        errors = exc_info.value.errors()
        assert len(errors) == 1
        assert errors[0]["loc"] == ("messages", 1, "content", 1)
        assert errors[0]["type"] == "text_only_model"
        assert errors[0]["msg"] == TEXT_ONLY_MESSAGE

    def test_reports_every_image_chunk(self):
        raw = {
            "model": "mistral-small-latest",
            "messages": [
                {"role": "user", "content": [_image()]},
                {"role": "assistant", "content": [_text(), _image("https://a/b.png")]},
            ],
        }
        with pytest.raises(ValidationError) as exc_info:
            validate_text_request(raw)

        locs = [e["loc"] for e in exc_info.value.errors()]
        assert locs == [("messages", 0, "content", 0), ("messages", 1, "content", 1)]

    def test_system_message_rejects_image_chunk(self):
        raw = {
            "model": "mistral-small-latest",
            "messages": [{"role": "system", "content": [_image()]}],
        }
        with pytest.raises(ValidationError) as exc_info:
            validate_text_request(raw)

        errors = exc_info.value.errors()
        structural = [e for e in errors if e["type"] != "text_only_model"]
        assert structural
        for error in structural:
            assert error["loc"][:4] == ("messages", 0, "system", "content")
        assert errors[-1]["loc"] == ("messages", 0, "content", 0)
        assert errors[-1]["type"] == "text_only_model"

    def test_image_chunk_reported_alongside_structural_errors(self):
        raw = {
            "model": "mistral-small-latest",
            "messages": [
                {"role": "user", "content": []},
                {"role": "user", "content": [_image("https://x")]},
            ],
        }
        with pytest.raises(ValidationError) as exc_info:
            validate_text_request(raw)

        errors = exc_info.value.errors()
        assert any(e["loc"][:4] == ("messages", 0, "user", "content") for e in errors)
        assert errors[-1]["loc"] == ("messages", 1, "content", 0)
        assert errors[-1]["type"] == "text_only_model"
        assert errors[-1]["input"] == _image("https://x")

    def test_image_chunk_reported_with_invalid_model(self):
        raw = {
            "model": "gpt-4o",
            "messages": [{"role": "assistant", "content": [_text(), _image()]}],
        }
        with pytest.raises(ValidationError) as exc_info:
            validate_text_request(raw)

        locs = [e["loc"] for e in exc_info.value.errors()]
        assert locs == [("model",), ("messages", 0, "content", 1)]

    def test_rejects_unknown_role(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_text_request(
                {"model": "mistral-small-latest",
                 "messages": [{"role": "tool", "content": "hi"}]}
            )
        errors = exc_info.value.errors()
        assert errors[0]["loc"] == ("messages", 0)
        assert errors[0]["type"] == "union_tag_invalid"

    def test_rejects_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_text_request({})
        locs = {e["loc"] for e in exc_info.value.errors()}
        assert locs == {("model",), ("messages",)}


class TestVisionRequests:
    """Validation for vision-capable models."""

    @pytest.mark.parametrize("model", VISION_MODELS)
    def test_accepts_both_vision_models(self, model):
        request = validate_vision_request(
            {"model": model, "messages": [{"role": "user", "content": [_image()]}]}
        )
        assert request.model == model

    def test_rejects_text_model(self):
        with pytest.raises(ValidationError):
            validate_vision_request(
                {"model": "mistral-small-latest",
                 "messages": [{"role": "user", "content": "hi"}]}
            )

    def test_accepts_mixed_chunks(self):
        request = validate_vision_request({
            "model": "pixtral-large-latest",
            "messages": [
                {"role": "user", "content": [_text("what is this?"), _image()]},
                {"role": "assistant", "content": [_image(), _text("a cat")]},
            ],
        })
        user_chunks = request.messages[0].content
        assert isinstance(user_chunks[0], TextChunk)
        assert isinstance(user_chunks[1], ImageUrlChunk)
        assert user_chunks[1].image_url == "https://x/y.png"

    def test_image_url_object_with_detail(self):
        raw = {
            "model": "pixtral-12b-2409",
            "messages": [{
                "role": "user",
                "content": [
                    _image({"url": "https://x/y.png", "detail": "high"}),
                    _image({"url": "https://x/z.png", "detail": None}),
                    _image({"url": "https://x/w.png"}),
                ],
            }],
        }
        request = validate_vision_request(raw)
        chunks = request.messages[0].content
        assert chunks[0].image_url == ImageUrl(url="https://x/y.png", detail="high")
        assert chunks[1].image_url.detail is None
        assert request.model_dump(by_alias=True, exclude_unset=True) == raw

    def test_image_url_object_requires_url(self):
        with pytest.raises(ValidationError):
            validate_vision_request({
                "model": "pixtral-12b-2409",
                "messages": [{"role": "user", "content": [_image({"detail": "low"})]}],
            })

    def test_system_message_is_text_only(self):
        with pytest.raises(ValidationError):
            validate_vision_request({
                "model": "pixtral-12b-2409",
                "messages": [{"role": "system", "content": [_image()]}],
            })

    def test_rejects_unknown_chunk_type(self):
        with pytest.raises(ValidationError):
            validate_vision_request({
                "model": "pixtral-12b-2409",
                "messages": [{"role": "user",
                              "content": [{"type": "audio", "data": "..."}]}],
            })

    def test_to_upstream_uses_wire_field_names(self):
        request = validate_vision_request({
            "model": "pixtral-12b-2409",
            "messages": [{"role": "user", "content": [
                _text("describe"), _image({"url": "https://x/y.png"}),
            ]}],
        })
        assert request.to_upstream() == {
            "model": "pixtral-12b-2409",
            "messages": [{"role": "user", "content": [
                {"type": "text", "text": "describe"},
                {"type": "image_url", "image_url": {"url": "https://x/y.png"}},
            ]}],
        }


class TestEmptyContent:
    """Empty sequences are rejected; empty strings are not."""

    @pytest.mark.parametrize("validate,model", [
        (validate_text_request, "mistral-small-latest"),
        (validate_vision_request, "pixtral-12b-2409"),
    ])
    def test_empty_messages_rejected(self, validate, model):
        with pytest.raises(ValidationError) as exc_info:
            validate({"model": model, "messages": []})
        errors = exc_info.value.errors()
        assert errors[0]["loc"] == ("messages",)
        assert errors[0]["type"] == "too_short"

    @pytest.mark.parametrize("validate,model", [
        (validate_text_request, "mistral-small-latest"),
        (validate_vision_request, "pixtral-12b-2409"),
    ])
    def test_empty_chunk_list_rejected_but_empty_string_accepted(self, validate, model):
        with pytest.raises(ValidationError) as exc_info:
            validate({"model": model,
                      "messages": [{"role": "user", "content": []}]})
        assert any(e["type"] == "too_short" for e in exc_info.value.errors())

        request = validate({"model": model,
                            "messages": [{"role": "user", "content": ""}]})
        assert request.messages[0].content == ""


class TestSchemaDescriptors:
    """The JSON Schemas advertised to MCP clients."""

    @pytest.mark.parametrize("describe", [describe_text_schema, describe_vision_schema])
    def test_schema_is_self_contained(self, describe):
        schema = describe()
        dumped = json.dumps(schema)
        assert "$ref" not in dumped
        assert "$defs" not in dumped
        assert schema["type"] == "object"
        assert set(schema["required"]) == {"model", "messages"}

    def test_model_enums(self):
        assert describe_text_schema()["properties"]["model"]["enum"] == list(TEXT_MODELS)
        assert describe_vision_schema()["properties"]["model"]["enum"] == list(VISION_MODELS)

    def test_messages_are_a_role_union(self):
        messages = describe_vision_schema()["properties"]["messages"]
        assert messages["type"] == "array"
        assert messages["minItems"] == 1
        assert messages["items"]["discriminator"] == {"propertyName": "role"}
        roles = [
            variant["properties"]["role"]["const"]
            for variant in messages["items"]["oneOf"]
        ]
        assert sorted(roles) == ["assistant", "system", "user"]

    def test_text_schema_advertises_no_image_chunks(self):
        assert "image_url" not in json.dumps(describe_text_schema())
        assert "imageUrl" in json.dumps(describe_vision_schema())

    def test_descriptors_are_stable(self):
        assert describe_text_schema() == describe_text_schema()
        assert describe_vision_schema() == describe_vision_schema()
