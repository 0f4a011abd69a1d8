"""Two-stage screenshot analysis: Vision stage per image (or batched), then one Reasoning call."""

import logging
import random
import string
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Literal, Sequence

from gamelens.ai.client_base import BaseModelClient
from gamelens.ai.schema import InputImage, InputText
from gamelens.core import prompts
from gamelens.core.config import Settings
from gamelens.core.errors import AnalysisError, ConfigurationError, ValidationError

_log = logging.getLogger(__name__)

Policy = Literal["sequential", "batched"]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_request_id() -> str:
    """Correlation id for log lines only: req_<epoch-ms>_<6 base36 chars>."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"req_{int(time.time() * 1000)}_{suffix}"


@dataclass(frozen=True)
class AnalysisInput:
    """One analysis request. Blank prompts and models fall back to configured defaults."""

    images: Sequence[str]
    vision_prompt: str | None = None
    thinking_prompt: str | None = None
    vision_model: str | None = None
    thinking_model: str | None = None
    policy: Policy | None = None


@dataclass
class AnalysisResult:
    result_text: str
    vision_summary: str
    request_id: str
    vision_calls: int = 0
    vision_blocks: list[str] = field(default_factory=list)


def _pick(override: str | None, default: str) -> str:
    value = (override or "").strip()
    return value or default.strip()


class AnalysisPipeline:
    """
    Orchestrates the Vision and Reasoning stages for one request at a time.

    Settings are read-only; one pipeline may serve many concurrent requests.
    The Reasoning call is only issued after every Vision call returned successfully.
    """

    def __init__(self, settings: Settings, client: BaseModelClient) -> None:
        self._settings = settings
        self._client = client

    @property
    def settings(self) -> Settings:
        return self._settings

    def check_configured(self) -> None:
        """Raise ConfigurationError when the API key is missing."""
        if not self._settings.api_key:
            raise ConfigurationError("ARK_API_KEY is not configured")

    def validate_images(self, images: Sequence[str]) -> None:
        lo, hi = self._settings.min_images, self._settings.max_images
        if len(images) < lo or len(images) > hi:
            raise ValidationError(f"Please upload {lo}-{hi} screenshots")
        for i, image in enumerate(images, start=1):
            if not isinstance(image, str) or not image.strip():
                raise ValidationError(f"Screenshot {i} is empty")

    def run(self, request: AnalysisInput, request_id: str | None = None) -> AnalysisResult:
        request_id = request_id or new_request_id()
        settings = self._settings
        self.check_configured()

        vision_model = _pick(request.vision_model, settings.vision_model)
        thinking_model = _pick(request.thinking_model, settings.thinking_model) or vision_model
        policy: Policy = request.policy or settings.policy
        images = list(request.images)

        _log.info("Analysis started id=%s images=%s policy=%s", request_id, len(images), policy)
        _log.info("Model config id=%s vision=%s thinking=%s", request_id, vision_model, thinking_model)

        if not vision_model or not thinking_model:
            raise ConfigurationError(
                "Model id is not configured (ARK_MODEL / ARK_VISION_MODEL)"
            )
        self.validate_images(images)

        vision_prompt = _pick(request.vision_prompt, settings.vision_prompt)
        thinking_prompt = _pick(request.thinking_prompt, settings.thinking_prompt)

        try:
            if policy == "batched":
                blocks = [self._vision_batched(request_id, vision_model, vision_prompt, images)]
                vision_calls = 1
                summary = blocks[0]
            else:
                blocks = self._vision_sequential(request_id, vision_model, vision_prompt, images)
                vision_calls = len(images)
                summary = "\n\n".join(blocks)

            _log.info("Reasoning started id=%s blocks=%s", request_id, len(blocks))
            result_text = self._client.generate_text(
                thinking_model,
                [InputText(text=prompts.reasoning_input(thinking_prompt, summary))],
                step="thinking",
            )
        except AnalysisError as e:
            _log.error("Analysis failed id=%s kind=%s: %s", request_id, e.kind.value, e.message)
            raise

        result_text = result_text or prompts.NO_REASONING_RESULT
        _log.info("Analysis finished id=%s resultLength=%s", request_id, len(result_text))
        return AnalysisResult(
            result_text=result_text,
            vision_summary=summary,
            request_id=request_id,
            vision_calls=vision_calls,
            vision_blocks=blocks,
        )

    def _describe_one(
        self, request_id: str, model: str, prompt: str, image: str, index: int, total: int
    ) -> str:
        _log.info("Vision started id=%s index=%s/%s", request_id, index, total)
        text = self._client.generate_text(
            model,
            [InputImage(image_url=image), InputText(text=prompts.indexed_vision_prompt(prompt, index))],
            step=f"vision_{index}",
        )
        return f"{prompts.screenshot_label(index)}\n{text or prompts.NO_VISION_RESULT}"

    def _vision_sequential(
        self, request_id: str, model: str, prompt: str, images: list[str]
    ) -> list[str]:
        """One Vision call per image. Blocks come back in input order regardless of concurrency."""
        total = len(images)
        workers = min(self._settings.max_concurrency, total)
        if workers <= 1:
            return [
                self._describe_one(request_id, model, prompt, image, i, total)
                for i, image in enumerate(images, start=1)
            ]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._describe_one, request_id, model, prompt, image, i, total)
                for i, image in enumerate(images, start=1)
            ]
            try:
                return [f.result() for f in futures]
            except BaseException:
                for f in futures:
                    f.cancel()
                raise

    def _vision_batched(self, request_id: str, model: str, prompt: str, images: list[str]) -> str:
        """One Vision call carrying every image, asking the model to label each in order."""
        _log.info("Vision started id=%s batched images=%s", request_id, len(images))
        content: list[InputImage | InputText] = [InputImage(image_url=image) for image in images]
        content.append(InputText(text=prompts.batched_vision_prompt(prompt)))
        text = self._client.generate_text(model, content, step="vision_batched")
        return text or prompts.NO_BATCHED_VISION_RESULT
