"""Error taxonomy for analysis requests. Every failure carries a kind and an HTTP status."""

from enum import Enum


class ErrorKind(str, Enum):
    configuration = "configuration"
    validation = "validation"
    upstream_status = "upstream_status"
    upstream_parse = "upstream_parse"
    upstream_timeout = "upstream_timeout"
    upstream_transport = "upstream_transport"


class AnalysisError(Exception):
    """Base class; message is human-readable and returned to the caller as-is."""

    kind: ErrorKind = ErrorKind.configuration
    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind.value}


class ConfigurationError(AnalysisError):
    """Missing credential or model identifier; raised before any network call."""

    kind = ErrorKind.configuration


class ValidationError(AnalysisError):
    kind = ErrorKind.validation
    http_status = 400


class UpstreamError(AnalysisError):
    """Failure talking to the remote model endpoint."""

    kind = ErrorKind.upstream_transport


class UpstreamStatusError(UpstreamError):
    """Remote endpoint answered outside [200, 300). Carries the status and raw body."""

    kind = ErrorKind.upstream_status

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Model request failed: {status_code} {body}")
        self.status_code = status_code
        self.body = body


class UpstreamParseError(UpstreamError):
    kind = ErrorKind.upstream_parse

    def __init__(self, message: str = "Model returned a non-JSON response") -> None:
        super().__init__(message)


class UpstreamTimeoutError(UpstreamError):
    kind = ErrorKind.upstream_timeout

    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"Model request timed out after {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class UpstreamTransportError(UpstreamError):
    kind = ErrorKind.upstream_transport
