"""Shared fixtures: a stub upstream client and sample requests."""
from unittest.mock import AsyncMock, Mock

import pytest

from mistral_chat.dispatcher import ToolDispatcher


@pytest.fixture
def stub_client():
    """Stand-in for MistralClient whose complete() returns canned JSON."""
    client = Mock()
    client.complete = AsyncMock(
        return_value={"choices": [{"message": {"content": "hi there"}}]}
    )
    return client


@pytest.fixture
def dispatcher(stub_client):
    return ToolDispatcher(stub_client)


@pytest.fixture
def text_request():
    return {
        "model": "mistral-small-latest",
        "messages": [{"role": "user", "content": "hello"}],
    }


@pytest.fixture
def vision_request():
    return {
        "model": "pixtral-12b-2409",
        "messages": [
            {
                "role": "user",
                "content": [{"type": "image_url", "imageUrl": "https://x/y.png"}],
            }
        ],
    }
