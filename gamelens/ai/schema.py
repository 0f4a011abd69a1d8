"""Pydantic data contracts for model calls and the tagged union of model response shapes."""

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class InputImage(BaseModel):
    """Image reference: an inline data URI or a URL."""

    type: Literal["input_image"] = "input_image"
    image_url: str


class InputText(BaseModel):
    type: Literal["input_text"] = "input_text"
    text: str


ContentPart = Annotated[Union[InputImage, InputText], Field(discriminator="type")]


class ModelCallPayload(BaseModel):
    """Request body for the responses endpoint: one user turn with ordered content parts."""

    model: str
    content: list[ContentPart] = Field(default_factory=list)

    def to_request_body(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "input": [
                {
                    "role": "user",
                    "content": [part.model_dump() for part in self.content],
                }
            ],
        }


class DirectText(BaseModel):
    """Top-level output_text field."""

    kind: Literal["direct_text"] = "direct_text"
    text: str


class StructuredOutput(BaseModel):
    """Texts found under output[].content[].text."""

    kind: Literal["structured_output"] = "structured_output"
    texts: list[str]


class ChatChoices(BaseModel):
    """Texts found under choices[].message.content."""

    kind: Literal["chat_choices"] = "chat_choices"
    contents: list[str]


ResponseShape = Annotated[Union[DirectText, StructuredOutput, ChatChoices], Field(discriminator="kind")]


def _fragment(value: Any) -> str | None:
    """Text fragment for a truthy string or JSON scalar (rendered as JSON, e.g. true, 42); else None."""
    if not value:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    return None


def _chat_content_fragments(content: Any) -> list[str]:
    # Chat content may be a plain string or a list of {"type": "text", "text": ...} parts.
    if isinstance(content, list):
        out = []
        for part in content:
            text = _fragment(part.get("text")) if isinstance(part, dict) else _fragment(part)
            if text is not None:
                out.append(text)
        return out
    text = _fragment(content)
    return [text] if text is not None else []


class ModelResponse(BaseModel):
    """
    Parsed model response. shapes lists every recognized shape in extraction order;
    an empty list is the "none matched" variant.
    """

    shapes: list[ResponseShape] = Field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "ModelResponse":
        """Classify any JSON value. Unknown or malformed parts are skipped, never raised."""
        if not isinstance(data, dict):
            return cls()
        shapes: list[DirectText | StructuredOutput | ChatChoices] = []

        direct = _fragment(data.get("output_text"))
        if direct is not None:
            shapes.append(DirectText(text=direct))

        output = data.get("output")
        if isinstance(output, list):
            texts: list[str] = []
            for item in output:
                content = item.get("content") if isinstance(item, dict) else None
                if not isinstance(content, list):
                    continue
                for part in content:
                    text = _fragment(part.get("text")) if isinstance(part, dict) else None
                    if text is not None:
                        texts.append(text)
            if texts:
                shapes.append(StructuredOutput(texts=texts))

        choices = data.get("choices")
        if isinstance(choices, list):
            contents: list[str] = []
            for choice in choices:
                message = choice.get("message") if isinstance(choice, dict) else None
                if isinstance(message, dict):
                    contents.extend(_chat_content_fragments(message.get("content")))
            if contents:
                shapes.append(ChatChoices(contents=contents))

        return cls(shapes=shapes)

    def fragments(self) -> list[str]:
        out: list[str] = []
        for shape in self.shapes:
            if isinstance(shape, DirectText):
                out.append(shape.text)
            elif isinstance(shape, StructuredOutput):
                out.extend(shape.texts)
            else:
                out.extend(shape.contents)
        return out

    def text(self) -> str:
        return "\n".join(self.fragments()).strip()


def extract_text(data: Any) -> str:
    """Concatenate output_text, output[].content[].text and choices[].message.content; "" if none."""
    return ModelResponse.from_json(data).text()
