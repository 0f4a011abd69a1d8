"""Application configuration (Pydantic v2). Load from gamelens.yml with env and key-file overrides."""

import os
import re
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, field_validator, model_validator

from gamelens.core.prompts import DEFAULT_THINKING_PROMPT, DEFAULT_VISION_PROMPT

DEFAULT_ENDPOINT = "https://ark.cn-beijing.volces.com/api/v3/responses"
DEFAULT_CONFIG_ENV_VAR = "GAMELENS_CONFIG"
DEFAULT_CONFIG_FILENAME = "gamelens.yml"
DEFAULT_API_KEY_FILE = "API key.txt"
DEFAULT_TIMEOUT_MS = 180_000
DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024

# Environment variable -> settings field. Earlier entries lose to later ones for the same field.
ENV_OVERRIDES: tuple[tuple[str, str], ...] = (
    ("ARK_API_KEY", "api_key"),
    ("ARK_API_KEY_FILE", "api_key_file"),
    ("ARK_ENDPOINT", "endpoint"),
    ("ARK_MODEL", "vision_model"),
    ("ARK_VISION_MODEL", "vision_model"),
    ("ARK_THINKING_MODEL", "thinking_model"),
    ("ARK_TIMEOUT_MS", "timeout_ms"),
    ("ARK_VISION_PROMPT", "vision_prompt"),
    ("ARK_THINKING_PROMPT", "thinking_prompt"),
    ("GAMELENS_POLICY", "policy"),
    ("GAMELENS_MIN_IMAGES", "min_images"),
    ("GAMELENS_MAX_IMAGES", "max_images"),
    ("GAMELENS_MAX_CONCURRENCY", "max_concurrency"),
    ("GAMELENS_CLIENT", "client"),
    ("GAMELENS_STATIC_ROOT", "static_root"),
    ("LOG_LEVEL", "log_level"),
    ("HOST", "host"),
    ("PORT", "port"),
)

_KEY_ASSIGNMENT_RE = re.compile(r'ARK_API_KEY="([^"]+)"')
_BEARER_RE = re.compile(r"Bearer\s+([A-Za-z0-9\-_.]+)")
_MODEL_RE = re.compile(r'"model"\s*:\s*"([^"]+)"')


class Settings(BaseModel):
    """
    Process-wide configuration, read-only after startup.

    thinking_model falls back to vision_model when unset (see effective_thinking_model).
    """

    model_config = {"extra": "ignore", "frozen": True}

    api_key: str = ""
    api_key_file: str = DEFAULT_API_KEY_FILE
    endpoint: str = DEFAULT_ENDPOINT
    vision_model: str = ""
    thinking_model: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    vision_prompt: str = DEFAULT_VISION_PROMPT
    thinking_prompt: str = DEFAULT_THINKING_PROMPT
    policy: Literal["sequential", "batched"] = "sequential"
    min_images: int = 2
    max_images: int = 9
    max_concurrency: int = 1
    client: str = "ark"
    static_root: str = ""
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8787

    @field_validator(
        "api_key", "vision_model", "thinking_model", "endpoint", "client", "log_level", mode="before"
    )
    @classmethod
    def strip_strings(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("timeout_ms", "max_concurrency", "min_images", "max_body_bytes")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @model_validator(mode="after")
    def check_image_bounds(self) -> "Settings":
        if self.max_images < self.min_images:
            raise ValueError(
                f"max_images ({self.max_images}) must be >= min_images ({self.min_images})"
            )
        return self

    @property
    def effective_thinking_model(self) -> str:
        return self.thinking_model or self.vision_model


def read_api_key_file(path: Path) -> tuple[str, str]:
    """
    Parse a legacy key file; return (api_key, model), either possibly empty.

    Accepts ARK_API_KEY="..." or a pasted "Authorization: Bearer <token>" line,
    plus an optional "model": "..." fragment from a sample request body.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError:
        return "", ""
    api_key = ""
    match = _KEY_ASSIGNMENT_RE.search(content) or _BEARER_RE.search(content)
    if match:
        api_key = match.group(1).strip()
    model_match = _MODEL_RE.search(content)
    model = model_match.group(1).strip() if model_match else ""
    return api_key, model


_config: Settings | None = None


class ConfigLoader:
    """
    Helper responsible for loading Settings from YAML, environment and the legacy key file.

    - load_from_yaml(path, apply_env_override): read a YAML file and optionally apply env overrides.
    - load_default(): resolve the default config path from GAMELENS_CONFIG / gamelens.yml and
      apply environment overrides when present.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _apply_env(self, data: dict[str, Any]) -> dict[str, Any]:
        for env_name, field in ENV_OVERRIDES:
            value = self._env.get(env_name)
            if value is not None and value.strip() != "":
                data[field] = value.strip()
        return data

    def _apply_key_file(self, settings: Settings) -> Settings:
        if settings.api_key and settings.vision_model:
            return settings
        api_key, model = read_api_key_file(Path(settings.api_key_file))
        update: dict[str, Any] = {}
        if not settings.api_key and api_key:
            update["api_key"] = api_key
        if not settings.vision_model and model:
            update["vision_model"] = model
        if not update:
            return settings
        return settings.model_copy(update=update)

    def load_from_yaml(self, path: Path, apply_env_override: bool) -> Settings:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f)
        if not data:
            data = {}
        if apply_env_override:
            data = self._apply_env(data)
        settings = Settings.model_validate(data)
        return self._apply_key_file(settings)

    def load_default(self) -> Settings:
        """
        Load the default Settings, using GAMELENS_CONFIG or gamelens.yml.

        Environment variables override YAML values; the key file only fills in
        an API key or vision model that is still empty afterwards.
        """
        path_str = self._env.get(DEFAULT_CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILENAME
        path = Path(path_str)
        if path.exists():
            return self.load_from_yaml(path, apply_env_override=True)
        settings = Settings.model_validate(self._apply_env({}))
        return self._apply_key_file(settings)


_loader = ConfigLoader()


def get_config(config_path: str | Path | None = None) -> Settings:
    """
    Return singleton config.

    - If config_path is given, load from it (without env overrides) and update the cache.
    - Otherwise, return the cached config if available, or load via ConfigLoader.load_default().
    """
    global _config
    if config_path is not None:
        _config = _loader.load_from_yaml(Path(config_path), apply_env_override=False)
        return _config
    if _config is not None:
        return _config
    _config = _loader.load_default()
    return _config


def reset_config() -> None:
    """Clear cached config (for tests)."""
    global _config
    _config = None
