"""AI module: payload/response contracts and remote model clients."""

from gamelens.ai.schema import (
    ContentPart,
    InputImage,
    InputText,
    ModelCallPayload,
    ModelResponse,
    extract_text,
)
from gamelens.ai.client_base import BaseModelClient, MockModelClient
from gamelens.ai.factory import get_model_client

__all__ = [
    "BaseModelClient",
    "ContentPart",
    "InputImage",
    "InputText",
    "MockModelClient",
    "ModelCallPayload",
    "ModelResponse",
    "extract_text",
    "get_model_client",
]
