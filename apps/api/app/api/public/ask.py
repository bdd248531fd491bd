from functools import lru_cache
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from app.core.config import get_settings
from app.domain.ai import AIService, AIServiceError, InternalError, build_ai_service
from app.services.error_policy import (
    ai_error_detail,
    build_structured_error_detail,
    classify_service_error,
    default_error_message,
    format_failure_detail,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["public"])
settings = get_settings()


class AskRequest(BaseModel):
    question: str


class AskResponse(BaseModel):
    answer: str
    source: str
    system_prompt_applied: bool


@lru_cache(maxsize=1)
def _get_ai_service() -> AIService:
    return build_ai_service(settings)


def _require_ai_service() -> AIService:
    try:
        return _get_ai_service()
    except Exception as exc:
        logger.error("ai service init failed: %s", ai_error_detail(exc))
        message = default_error_message("config_error")
        raise HTTPException(
            status_code=503,
            detail=build_structured_error_detail(
                error_code="config_error",
                message=message,
                retryable=False,
                detail=f"ai_service_init_failed:config_error:{message}",
            ),
        ) from exc


@router.post("/ask")
async def ask(payload: AskRequest) -> AskResponse:
    question = payload.question
    if not question.strip():
        raise HTTPException(
            status_code=400,
            detail=build_structured_error_detail(
                error_code="invalid_request",
                message="question must not be empty",
                retryable=False,
                detail="ask_failed:invalid_request:question_empty",
            ),
        )

    ai_service = _require_ai_service()

    try:
        answer = await ai_service.ask(question)
    except AIServiceError as exc:
        reason = ai_error_detail(exc)
        code, status_code, retryable = classify_service_error(exc)
        if isinstance(exc, InternalError):
            logger.exception("ask failed in %s: %s", ai_service.name(), reason)
        else:
            logger.warning("ask failed in %s: %s", ai_service.name(), reason)
        # Provider and worker messages stay in the log; clients get the generic text.
        message = default_error_message(code)
        raise HTTPException(
            status_code=status_code,
            detail=build_structured_error_detail(
                error_code=code,
                message=message,
                retryable=retryable,
                detail=format_failure_detail("ask", code, message),
            ),
        ) from exc

    logger.info(
        "answered question (%d chars) via %s",
        len(question),
        ai_service.name(),
    )
    return AskResponse(
        answer=answer,
        source=ai_service.name(),
        system_prompt_applied=ai_service.system_prompt_applied(),
    )
