"""Gateway API: screenshot analysis, health check and static assets."""

import json
import logging
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from gamelens.ai.client_base import BaseModelClient
from gamelens.ai.factory import get_model_client
from gamelens.core.config import Settings, get_config
from gamelens.core.content_types import content_type_for
from gamelens.core.errors import AnalysisError, ValidationError
from gamelens.core.static_files import ForbiddenPath, resolve_static_path
from gamelens.pipeline.analysis import AnalysisInput, AnalysisPipeline, new_request_id

_log = logging.getLogger(__name__)

# Bundled front end (index.html, app.js, styles.css), shipped as package data
DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


@lru_cache(maxsize=1)
def _get_settings() -> Settings:
    return get_config()


@lru_cache(maxsize=1)
def _get_model_client() -> BaseModelClient:
    return get_model_client(_get_settings())


def _get_pipeline(
    settings: Settings = Depends(_get_settings),
    client: BaseModelClient = Depends(_get_model_client),
) -> AnalysisPipeline:
    return AnalysisPipeline(settings, client)


def _static_root(settings: Settings) -> Path:
    return Path(settings.static_root) if settings.static_root else DEFAULT_STATIC_DIR


class PromptsIn(BaseModel):
    vision: str | None = None
    thinking: str | None = None


class AnalyzeIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    images: list[str] = []
    prompts: PromptsIn | None = None
    vision_model: str | None = Field(default=None, alias="visionModel")
    thinking_model: str | None = Field(default=None, alias="thinkingModel")


class AnalyzeOut(BaseModel):
    resultText: str


app = FastAPI(title="gamelens")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(AnalysisError)
async def _analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    _log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, str(exc) or "Model call failed")


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


def _describe_validation_errors(errors) -> str:
    if not errors:
        return "Invalid request body"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


async def _read_json_body(request: Request, max_bytes: int) -> dict:
    """Read and decode the JSON body. Empty bodies decode to {}."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise ValidationError("Request body too large")
    # Chunked uploads carry no Content-Length; stop reading once the cap is passed.
    chunks: list[bytes] = []
    total = 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > max_bytes:
            raise ValidationError("Request body too large")
        chunks.append(chunk)
    raw = b"".join(chunks)
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise ValidationError("Request body is not valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@app.post("/api/analyze", response_model=AnalyzeOut)
async def api_analyze(
    request: Request,
    pipeline: AnalysisPipeline = Depends(_get_pipeline),
) -> AnalyzeOut:
    request_id = new_request_id()
    # Credentials are checked before the body is read.
    pipeline.check_configured()
    data = await _read_json_body(request, pipeline.settings.max_body_bytes)
    try:
        body = AnalyzeIn.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_describe_validation_errors(e.errors()))

    prompts = body.prompts or PromptsIn()
    analysis_input = AnalysisInput(
        images=body.images,
        vision_prompt=prompts.vision,
        thinking_prompt=prompts.thinking,
        vision_model=body.vision_model,
        thinking_model=body.thinking_model,
    )
    result = await run_in_threadpool(pipeline.run, analysis_input, request_id)
    return AnalyzeOut(resultText=result.result_text)


@app.get("/api/health")
def api_health() -> dict:
    return {"ok": True}


@app.get("/{path:path}")
def static_file(path: str, settings: Settings = Depends(_get_settings)):
    try:
        file_path = resolve_static_path(_static_root(settings), path)
    except ForbiddenPath:
        return PlainTextResponse("Forbidden", status_code=403)
    if file_path is None:
        return PlainTextResponse("Not Found", status_code=404)
    return FileResponse(file_path, media_type=content_type_for(file_path))
