import logging
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from healthtrack.middleware.tracing import TRACE_ID_CTX_VAR, TRACE_ID_HEADER

logger = logging.getLogger("healthtrack")


def status_to_code(status_code: int) -> str:
    mapping = {
        400: "BAD_REQUEST",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        413: "PAYLOAD_TOO_LARGE",
        415: "UNSUPPORTED_MEDIA_TYPE",
        422: "UNPROCESSABLE_ENTITY",
        500: "INTERNAL_SERVER_ERROR",
    }
    return mapping.get(status_code, f"HTTP_{status_code}")


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or TRACE_ID_CTX_VAR.get()


async def handle_http_exception(request: Request, exc: HTTPException):
    trace_id = _trace_id(request)
    detail: Any = exc.detail
    message = detail if isinstance(detail, str) else "HTTP error"
    body = {"code": status_to_code(exc.status_code), "message": message, "trace_id": trace_id}
    if detail is not None:
        body["details"] = detail
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers={TRACE_ID_HEADER: trace_id} if trace_id else None,
    )


async def handle_unhandled_exception(request: Request, exc: Exception):
    trace_id = _trace_id(request)
    logger.exception({"function": "handle_unhandled_exception", "path": request.url.path, "trace_id": trace_id})
    body = {
        "code": "INTERNAL_SERVER_ERROR",
        "message": "An unexpected error occurred",
        "details": str(exc),
        "trace_id": trace_id,
    }
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body,
        headers={TRACE_ID_HEADER: trace_id} if trace_id else None,
    )
