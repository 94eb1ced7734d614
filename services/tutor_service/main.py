"""
Tutor Service -- HTTP front for the AI tutor's generation calls.

Routes:
1. GET  /health                         -- provider configuration and limits
2. GET  /metrics                        -- Prometheus exposition
3. POST /api/generate-content           -- raw text passthrough
4. POST /api/resolve-doubt              -- explanation, examples, check question
5. POST /api/generate-teaching-content  -- structured lesson (topic or prompt)
6. POST /api/generate-quiz              -- five multiple-choice questions
7. POST /api/classify-chat              -- general vs subject_specific, never fails

Input errors become 400 with their literal message. Anything else becomes
500 with a per-route message; the underlying detail is only added when
APP_ENV=development.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, TypeVar

import uvicorn
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.contracts.tutor import (
    ClassifyChatRequest,
    GenerateContentRequest,
    GenerateQuizRequest,
    GenerateTeachingContentRequest,
    ResolveDoubtRequest,
)
from shared.llm_adapter import (
    InputValidationError,
    LLMProvider,
    ModelType,
    build_providers,
    close_providers,
)
from shared.logging.logger import log_extra, setup_logging
from shared.observability.metrics import metrics_response, tutor_requests
from services.tutor_service.ai_service import AIService
from services.tutor_service.config import TutorConfig
from services.tutor_service.cors import cors_headers
from services.tutor_service.validation import MAX_PROMPT_LENGTH

SERVICE_NAME = "tutor_service"
VERSION = "1.0.0"

logger = logging.getLogger(SERVICE_NAME)

RequestT = TypeVar("RequestT", bound=BaseModel)


def _model_type(value: str | None) -> ModelType | None:
    """None keeps the service default; any other value is mistral-or-llama."""
    return ModelType.from_value(value) if value is not None else None


async def _read_body(request: Request, model: type[RequestT]) -> RequestT:
    """Missing or non-object bodies read as {}; wrong field types raise ValidationError."""
    try:
        data = await request.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return model.model_validate(data)


def _bad_request(route: str, message: str) -> JSONResponse:
    tutor_requests.labels(route=route, outcome="rejected").inc()
    return JSONResponse(content={"error": message}, status_code=400)


def _failure(cfg: TutorConfig, route: str, exc: Exception, message: str, t0: float) -> JSONResponse:
    """Map an exception raised while serving route to its HTTP response."""
    latency_ms = (time.perf_counter() - t0) * 1000
    if isinstance(exc, InputValidationError):
        logger.info("[%s] Rejected (%.0fms): %s", route, latency_ms, exc)
        return _bad_request(route, str(exc))
    if isinstance(exc, ValidationError):
        logger.info("[%s] Rejected malformed body (%.0fms)", route, latency_ms)
        return _bad_request(route, "Invalid request body")

    logger.exception("[%s] Error (%.0fms)", route, latency_ms)
    tutor_requests.labels(route=route, outcome="error").inc()
    content: dict[str, Any] = {"error": message}
    if cfg.expose_error_detail:
        content["message"] = str(exc)
    return JSONResponse(content=content, status_code=500)


def _success(route: str, model: ModelType | None, t0: float) -> None:
    latency_ms = round((time.perf_counter() - t0) * 1000)
    model_name = model.value if model else "default"
    logger.info(
        "[%s] Success (%dms) - Model: %s",
        route, latency_ms, model_name,
        extra=log_extra(route=route, model=model_name, latency_ms=latency_ms),
    )
    tutor_requests.labels(route=route, outcome="ok").inc()


router = APIRouter()


@router.get("/health")
async def health(request: Request):
    try:
        ai: AIService = request.app.state.ai
        cfg: TutorConfig = request.app.state.cfg
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "provider": cfg.providers.ai_provider,
            "models": ai.available_models(),
            "limits": {"maxPromptLength": MAX_PROMPT_LENGTH},
            "version": VERSION,
        }
    except Exception:
        logger.exception("Health check error")
        return JSONResponse(
            content={"status": "error", "error": "Health check failed"}, status_code=500
        )


@router.get("/metrics")
async def metrics():
    return metrics_response()


@router.post("/api/generate-content")
async def generate_content(request: Request):
    route, t0 = "generate-content", time.perf_counter()
    ai: AIService = request.app.state.ai
    cfg: TutorConfig = request.app.state.cfg
    try:
        body = await _read_body(request, GenerateContentRequest)
        if body.prompt is None:
            return _bad_request(route, "Prompt is required")
        if len(body.prompt) > MAX_PROMPT_LENGTH:
            return _bad_request(
                route, f"Prompt exceeds maximum length ({MAX_PROMPT_LENGTH} characters)"
            )
        model = _model_type(body.model)
        result = await ai.generate_content(body.prompt, model)
        _success(route, model, t0)
        return result.model_dump(by_alias=True)
    except Exception as exc:
        return _failure(cfg, route, exc, "Failed to generate content", t0)


@router.post("/api/resolve-doubt")
async def resolve_doubt(request: Request):
    route, t0 = "resolve-doubt", time.perf_counter()
    ai: AIService = request.app.state.ai
    cfg: TutorConfig = request.app.state.cfg
    try:
        body = await _read_body(request, ResolveDoubtRequest)
        if body.question is None:
            return _bad_request(route, "Question is required")
        if len(body.question) > MAX_PROMPT_LENGTH:
            return _bad_request(
                route, f"Question exceeds maximum length ({MAX_PROMPT_LENGTH} characters)"
            )
        model = _model_type(body.model)
        result = await ai.resolve_doubt(
            body.question, body.context, body.curriculum_context, model
        )
        _success(route, model, t0)
        return result.model_dump(by_alias=True)
    except Exception as exc:
        return _failure(cfg, route, exc, "Failed to resolve doubt", t0)


@router.post("/api/generate-teaching-content")
async def generate_teaching_content(request: Request):
    route, t0 = "generate-teaching-content", time.perf_counter()
    ai: AIService = request.app.state.ai
    cfg: TutorConfig = request.app.state.cfg
    try:
        body = await _read_body(request, GenerateTeachingContentRequest)
        model = _model_type(body.model)
        # blank prompt falls through to topic mode
        prompt = (body.prompt or "").strip()
        topic = (body.topic or "").strip()
        if prompt:
            result = await ai.generate_teaching_content_from_prompt(body.prompt, model)
        elif topic:
            result = await ai.generate_teaching_content(topic, body.curriculum_context, model)
        else:
            return _bad_request(route, "Topic is required")
        _success(route, model, t0)
        return result.model_dump(by_alias=True)
    except Exception as exc:
        return _failure(cfg, route, exc, "Failed to generate teaching content", t0)


@router.post("/api/generate-quiz")
async def generate_quiz(request: Request):
    route, t0 = "generate-quiz", time.perf_counter()
    ai: AIService = request.app.state.ai
    cfg: TutorConfig = request.app.state.cfg
    try:
        body = await _read_body(request, GenerateQuizRequest)
        topic = (body.topic or "").strip()
        if not topic:
            return _bad_request(route, "Topic is required")
        model = _model_type(body.model)
        result = await ai.generate_quiz(
            topic, body.context, body.curriculum_context, model
        )
        _success(route, model, t0)
        return result.model_dump(by_alias=True)
    except Exception as exc:
        return _failure(cfg, route, exc, "Failed to generate quiz", t0)


@router.post("/api/classify-chat")
async def classify_chat(request: Request):
    """Degrades to {"mode": "general"} on any failure, including bad bodies."""
    route, t0 = "classify-chat", time.perf_counter()
    ai: AIService = request.app.state.ai
    try:
        body = await _read_body(request, ClassifyChatRequest)
        model = _model_type(body.model)
        result = await ai.classify_chat_message(
            body.message or "", body.topic_name, body.subject_name, model
        )
        _success(route, model, t0)
        return result.model_dump(by_alias=True)
    except Exception:
        logger.warning("[%s] Classification failed, defaulting to general", route, exc_info=True)
        tutor_requests.labels(route=route, outcome="degraded").inc()
        return {"mode": "general"}


def create_app(
    cfg: TutorConfig | None = None,
    providers: dict[ModelType, LLMProvider] | None = None,
) -> FastAPI:
    """
    Build the tutor app.

    Config is read from the environment at startup unless given. Providers
    passed in are owned by the caller and are not closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        config = cfg or TutorConfig.from_env()
        log = setup_logging(SERVICE_NAME, config.log_level)
        owned = providers is None
        slots = build_providers(config.providers) if owned else providers

        application.state.cfg = config
        application.state.ai = AIService(slots, config)
        log.info(
            "Tutor Service ready -- provider=%s models=%s",
            config.providers.ai_provider, application.state.ai.available_models(),
        )
        yield

        log.info("Shutting down")
        if owned:
            await close_providers(slots)

    application = FastAPI(
        title="AI Tutor - Tutor Service",
        version=VERSION,
        description="Provider dispatch, retry and response normalisation for the AI tutor",
        lifespan=lifespan,
    )

    @application.middleware("http")
    async def cors(request: Request, call_next):
        headers = cors_headers(
            request.headers.get("origin"), request.app.state.cfg.allowed_origins
        )
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response

    @application.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse(content={"error": "Method not allowed"}, status_code=405)
        if exc.status_code == 404:
            return JSONResponse(
                content={"error": "Endpoint not found", "path": request.url.path},
                status_code=404,
            )
        return JSONResponse(content={"error": exc.detail}, status_code=exc.status_code)

    application.include_router(router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "services.tutor_service.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "8000")),
        log_level="info",
    )
