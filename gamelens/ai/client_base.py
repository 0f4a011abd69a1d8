"""Abstract base and mock implementation for remote model clients."""

import threading
from abc import ABC, abstractmethod
from typing import Any, Sequence

from gamelens.ai.schema import ContentPart, InputImage, InputText, ModelResponse


class BaseModelClient(ABC):
    """One call per invocation: send an ordered content list to a model, return parsed JSON."""

    @abstractmethod
    def post(self, model: str, content: Sequence[ContentPart], *, step: str) -> Any:
        """Issue one request; return the decoded JSON body or raise an UpstreamError."""
        ...

    def generate(self, model: str, content: Sequence[ContentPart], *, step: str) -> ModelResponse:
        """post() and classify the response shape."""
        return ModelResponse.from_json(self.post(model, content, step=step))

    def generate_text(self, model: str, content: Sequence[ContentPart], *, step: str) -> str:
        return self.generate(model, content, step=step).text()


class MockModelClient(BaseModelClient):
    """Placeholder client for development: answers in output_text without touching the network."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.calls: list[tuple[str, str, list[ContentPart]]] = []

    def post(self, model: str, content: Sequence[ContentPart], *, step: str) -> Any:
        with self._lock:
            self.calls.append((step, model, list(content)))
        images = sum(1 for part in content if isinstance(part, InputImage))
        texts = [part.text for part in content if isinstance(part, InputText)]
        if images:
            return {"output_text": f"mock description of {images} image(s) for {step}"}
        return {"output_text": f"mock analysis ({len(texts[0]) if texts else 0} chars of input)"}
