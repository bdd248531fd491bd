from typing import Any

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.domain.ai.errors import AIServiceError, ApiError, ConfigurationError, InternalError


KNOWN_ERROR_CODES = {
    "invalid_request",
    "invalid_json",
    "not_found",
    "method_not_allowed",
    "config_error",
    "provider_error",
    "timeout",
    "internal_error",
    "unknown",
}

RETRYABLE_ERROR_CODES = {
    "timeout",
}

_STATUS_ERROR_CODES = {
    400: "invalid_request",
    404: "not_found",
    405: "method_not_allowed",
    422: "invalid_request",
    500: "internal_error",
    502: "provider_error",
    503: "config_error",
    504: "timeout",
}


def normalize_error_code(value: Any) -> str:
    raw = str(value or "").strip().lower()
    if raw in KNOWN_ERROR_CODES:
        return raw
    return "unknown"


def ai_error_detail(exc: Exception) -> str:
    message = str(exc).strip()
    if not message:
        return "ai_provider_failed"
    return message[:300]


def format_failure_detail(stage: str, code: str, reason: str) -> str:
    reason_text = " ".join(str(reason or "").split())[:260] or "ai_provider_failed"
    return f"{stage}_failed:{code}:{reason_text}"


def classify_service_error(exc: Exception) -> tuple[str, int, bool]:
    if isinstance(exc, ConfigurationError):
        return ("config_error", 503, False)
    if isinstance(exc, ApiError):
        if exc.timed_out:
            return ("timeout", 504, True)
        return ("provider_error", 502, False)
    if isinstance(exc, InternalError):
        return ("internal_error", 500, False)
    if isinstance(exc, AIServiceError):
        return (normalize_error_code(exc.code), 500, False)
    return ("unknown", 500, False)


def build_structured_error_detail(
    *,
    error_code: str,
    message: str | None = None,
    retryable: bool | None = None,
    detail: Any = None,
) -> dict[str, Any]:
    code = normalize_error_code(error_code)
    message_text = " ".join(str(message or "").split()).strip()
    if not message_text:
        message_text = _build_message(code, str(detail or ""))
    if retryable is None:
        retryable = code in RETRYABLE_ERROR_CODES

    detail_text = " ".join(str(detail or "").split()).strip()
    if not detail_text:
        detail_text = message_text

    return {
        "error_code": code,
        "message": message_text[:260],
        "retryable": bool(retryable),
        "detail": detail_text,
    }


def _build_message(code: str, reason: str) -> str:
    message = " ".join(str(reason or "").split()).strip()
    if message:
        return message[:260]
    defaults = {
        "invalid_request": "Request validation failed",
        "invalid_json": "Request body is not valid JSON",
        "not_found": "Resource not found",
        "method_not_allowed": "Method not allowed",
        "config_error": "AI service configuration error",
        "provider_error": "AI provider request failed",
        "timeout": "AI request timed out",
        "internal_error": "AI service internal error",
        "unknown": "Request failed",
    }
    return defaults.get(code, "Request failed")


def default_error_message(code: str) -> str:
    return _build_message(normalize_error_code(code), "")


def _payload_from_detail_dict(detail: dict[str, Any], status_code: int) -> tuple[str, str, bool, str]:
    code = normalize_error_code(detail.get("error_code"))
    if code == "unknown":
        code = _STATUS_ERROR_CODES.get(status_code, "unknown")
    message = " ".join(str(detail.get("message") or "").split()).strip()
    if not message:
        message = _build_message(code, detail.get("detail") or "")
    retryable = bool(detail.get("retryable")) if "retryable" in detail else code in RETRYABLE_ERROR_CODES
    detail_text = str(detail.get("detail") or "").strip() or message
    return code, message[:260], retryable, detail_text


def build_http_error_payload(exc: StarletteHTTPException, trace_id: str) -> dict[str, Any]:
    detail = exc.detail

    if isinstance(detail, dict):
        code, message, retryable, detail_text = _payload_from_detail_dict(detail, exc.status_code)
    else:
        # Framework-raised errors (404, 405) carry a plain string detail.
        code = _STATUS_ERROR_CODES.get(exc.status_code, "unknown")
        message = _build_message(code, str(detail or ""))
        retryable = code in RETRYABLE_ERROR_CODES
        detail_text = " ".join(str(detail or "").split()) or message

    return {
        "error_code": code,
        "message": message,
        "retryable": retryable,
        "trace_id": trace_id,
        "detail": detail_text,
    }


def build_validation_error_payload(exc: RequestValidationError, trace_id: str) -> tuple[int, dict[str, Any]]:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        status_code, code = 400, "invalid_json"
    else:
        status_code, code = 422, "invalid_request"

    reasons = []
    for error in errors[:5]:
        location = ".".join(str(part) for part in error.get("loc", ()))
        reasons.append(f"{location}:{error.get('msg', '')}")

    return status_code, {
        "error_code": code,
        "message": _build_message(code, ""),
        "retryable": False,
        "trace_id": trace_id,
        "detail": "; ".join(reasons) or code,
    }


def build_unexpected_error_payload(trace_id: str) -> dict[str, Any]:
    return {
        "error_code": "unknown",
        "message": "Unexpected server error",
        "retryable": False,
        "trace_id": trace_id,
        "detail": "unexpected_server_error",
    }
