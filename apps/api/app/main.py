from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.public import ask as ask_api
from app.core.config import get_settings
from app.core.logging import get_logger, setup_logging
from app.services.error_policy import (
    build_http_error_payload,
    build_unexpected_error_payload,
    build_validation_error_payload,
)


settings = get_settings()
logger = get_logger(__name__)

INDEX_TEXT = (
    "Ask API - demo question answering service\n"
    "\n"
    "Available endpoints:\n"
    "  GET  /         this page\n"
    "  GET  /health   service status\n"
    "  POST /ask      ask a question: {\"question\": \"What is Rust?\"}\n"
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging(settings)
    logger.info("Starting %s v%s (env=%s)", settings.app_name, settings.app_version, settings.env)

    service = ask_api._get_ai_service()
    logger.info(
        "AI service selected: %s (ai_enabled=%s, model=%s, system_prompt_applied=%s)",
        service.name(),
        settings.ai_enabled,
        settings.ai_model,
        service.system_prompt_applied(),
    )
    if settings.ai_enabled and settings.ai_api_key is None:
        logger.warning("ai_enabled is set but no API key was found; answering with the mock service")

    yield
    logger.info("Shutting down %s", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Question answering API backed by an AI provider or an offline mock",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _trace_id(request: Request) -> str:
    return request.headers.get("x-trace-id") or uuid4().hex


@app.get("/", response_class=PlainTextResponse)
def index() -> str:
    return INDEX_TEXT


@app.get("/health")
def health_check() -> dict[str, Any]:
    service = ask_api._require_ai_service()
    return {
        "status": "ok",
        "version": settings.app_version,
        "env": settings.env,
        "ai_enabled": settings.ai_enabled,
        "ai_service": service.name(),
    }


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    payload = build_http_error_payload(exc, _trace_id(request))
    return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    status_code, payload = build_validation_error_payload(exc, _trace_id(request))
    return JSONResponse(status_code=status_code, content=payload)


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    payload = build_unexpected_error_payload(_trace_id(request))
    return JSONResponse(status_code=500, content=payload)


app.include_router(ask_api.router)


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
