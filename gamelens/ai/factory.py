"""Factory for model clients. Imports are lazy so the mock path never loads requests."""

from gamelens.ai.client_base import BaseModelClient
from gamelens.core.config import Settings


def get_model_client(settings: Settings) -> BaseModelClient:
    """Return the model client named by settings.client."""
    name = settings.client
    if name == "mock":
        from gamelens.ai.client_base import MockModelClient

        return MockModelClient()
    if name == "ark":
        from gamelens.ai.ark_client import ArkClient

        return ArkClient.from_settings(settings)
    raise ValueError(f"Unknown model client: {name}")
