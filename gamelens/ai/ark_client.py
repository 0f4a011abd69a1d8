"""Client for the hosted multimodal responses endpoint (Volcengine Ark by default).

Uses a persistent requests.Session with connection pooling so concurrent analyses
share sockets. One POST per call; no retries. Failures are classified into
status, parse, timeout and transport errors so callers never match on message text.
"""

import json
import logging
import time
from typing import Any, Sequence

import requests

from gamelens.ai.client_base import BaseModelClient
from gamelens.ai.schema import ContentPart, ModelCallPayload
from gamelens.core.config import Settings
from gamelens.core.errors import (
    UpstreamParseError,
    UpstreamStatusError,
    UpstreamTimeoutError,
    UpstreamTransportError,
)

_log = logging.getLogger(__name__)


class ArkClient(BaseModelClient):
    """Posts {model, input: [{role: "user", content}]} with a bearer token and parses the JSON reply."""

    def __init__(self, api_key: str, endpoint: str, timeout_ms: int) -> None:
        self._api_key = api_key
        self._endpoint = endpoint
        self._timeout_ms = timeout_ms
        self._session = requests.Session()
        adapter = requests.adapters.HTTPAdapter(pool_connections=10, pool_maxsize=20)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ArkClient":
        return cls(settings.api_key, settings.endpoint, settings.timeout_ms)

    def post(self, model: str, content: Sequence[ContentPart], *, step: str) -> Any:
        payload = ModelCallPayload(model=model, content=list(content))
        body = json.dumps(payload.to_request_body(), ensure_ascii=False).encode("utf-8")
        started = time.monotonic()
        try:
            resp = self._session.post(
                self._endpoint,
                data=body,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout_ms / 1000.0,
            )
        except requests.Timeout as e:
            _log.error("Ark request timed out step=%s after %sms", step, self._timeout_ms)
            raise UpstreamTimeoutError(self._timeout_ms) from e
        except requests.RequestException as e:
            _log.error("Ark request failed step=%s: %s", step, e)
            raise UpstreamTransportError(f"Model request failed: {e}") from e

        took_ms = int((time.monotonic() - started) * 1000)
        _log.info("Ark response step=%s status=%s cost=%sms", step, resp.status_code, took_ms)
        if resp.status_code < 200 or resp.status_code >= 300:
            raise UpstreamStatusError(resp.status_code, resp.text)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamParseError() from e
