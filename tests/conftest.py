"""Pytest fixtures: test settings, a recording model client, and an API TestClient wired to both."""

import threading
import time
from typing import Any, Callable, Sequence

import pytest
from fastapi.testclient import TestClient

from gamelens.ai.client_base import BaseModelClient
from gamelens.ai.schema import ContentPart, InputImage, InputText
from gamelens.core.config import Settings


class RecordingClient(BaseModelClient):
    """
    Fake model client. Records every call and the start/end order of calls.

    responder(step, model, content) returns the JSON body for a call; it may raise
    to simulate upstream failures. The default answers with output_text.
    """

    def __init__(
        self,
        responder: Callable[[str, str, list[ContentPart]], Any] | None = None,
        delay: Callable[[str], float] | None = None,
    ) -> None:
        self._responder = responder or self._default_response
        self._delay = delay
        self._lock = threading.Lock()
        self.calls: list[tuple[str, str, list[ContentPart]]] = []
        self.events: list[str] = []
        self.active = 0
        self.max_active = 0

    @staticmethod
    def _default_response(step: str, model: str, content: list[ContentPart]) -> Any:
        if step == "thinking":
            return {"output_text": "final analysis"}
        return {"output_text": f"described {step}"}

    def post(self, model: str, content: Sequence[ContentPart], *, step: str) -> Any:
        with self._lock:
            self.calls.append((step, model, list(content)))
            self.events.append(f"start:{step}")
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self._delay is not None:
                time.sleep(self._delay(step))
            return self._responder(step, model, list(content))
        finally:
            with self._lock:
                self.active -= 1
                self.events.append(f"end:{step}")

    def steps(self) -> list[str]:
        return [c[0] for c in self.calls]

    def vision_calls(self) -> list[tuple[str, str, list[ContentPart]]]:
        return [c for c in self.calls if c[0] != "thinking"]

    def thinking_calls(self) -> list[tuple[str, str, list[ContentPart]]]:
        return [c for c in self.calls if c[0] == "thinking"]


def images_of(content: list[ContentPart]) -> list[str]:
    return [p.image_url for p in content if isinstance(p, InputImage)]


def texts_of(content: list[ContentPart]) -> list[str]:
    return [p.text for p in content if isinstance(p, InputText)]


def make_images(n: int) -> list[str]:
    return [f"data:image/png;base64,IMG{i}" for i in range(1, n + 1)]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_key="test-key",
        vision_model="vision-m",
        thinking_model="think-m",
        client="mock",
        min_images=2,
        max_images=9,
    )


@pytest.fixture
def recording_client() -> RecordingClient:
    return RecordingClient()


@pytest.fixture
def api_client(settings, recording_client):
    """
    TestClient for the gateway with settings and model client overridden.
    Tests may replace app.dependency_overrides entries; they are cleared on exit.
    """
    from gamelens.api.main import _get_model_client, _get_settings, app

    app.dependency_overrides[_get_settings] = lambda: settings
    app.dependency_overrides[_get_model_client] = lambda: recording_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(_get_settings, None)
        app.dependency_overrides.pop(_get_model_client, None)
