"""FastAPI middleware for request tracing, error handling, and CORS.

Middleware stack (applied bottom-up):
    1. RequestIDMiddleware: injects X-Request-ID into every request/response
    2. ErrorHandlerMiddleware: catches domain exceptions -> structured JSON errors
    3. CORSMiddleware
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from atomic_exchange.domain.enums import ErrorCode
from atomic_exchange.domain.exceptions import (
    AtomicExchangeError,
    ConcurrentModificationError,
    HeightRegressionError,
    InvalidStateTransitionError,
    ProtocolError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

logger = structlog.get_logger(__name__)

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.SWAP_NOT_FOUND: 404,
    ErrorCode.MIXER_NOT_FOUND: 404,
    ErrorCode.UNAUTHORIZED: 403,
    ErrorCode.ALREADY_CLAIMED: 409,
    ErrorCode.INVALID_REFUND: 409,
}


def _error_response(status_code: int, exc: AtomicExchangeError) -> JSONResponse:
    numeric = int(exc.error_code) if exc.error_code is not None else None
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "code": numeric, "message": exc.message},
    )


# ---------------------------------------------------------------------------
# 1. Request ID Middleware
# ---------------------------------------------------------------------------
class RequestIDMiddleware(BaseHTTPMiddleware):
    """Inject a unique X-Request-ID into every request for log correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


# ---------------------------------------------------------------------------
# 2. Error Handler Middleware
# ---------------------------------------------------------------------------
class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catch domain exceptions and return structured JSON error responses.

    Body shape: ``{"error": <code name>, "code": <numeric code|null>, "message": ...}``.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except ProtocolError as exc:
            status_code = _STATUS_BY_CODE.get(exc.error_code, 400)
            logger.warning(
                "protocol.rejected",
                error=exc.code,
                code=int(exc.error_code),
                status=status_code,
                path=request.url.path,
            )
            return _error_response(status_code, exc)
        except (ConcurrentModificationError, HeightRegressionError) as exc:
            logger.warning("ledger.conflict", error=exc.code, message=exc.message)
            return _error_response(409, exc)
        except InvalidStateTransitionError as exc:
            logger.warning(
                "state_machine.invalid_transition",
                current=exc.current_state,
                attempted=exc.attempted_event,
            )
            return _error_response(409, exc)
        except AtomicExchangeError as exc:
            logger.error("domain.error", error=exc.message, code=exc.code)
            return _error_response(400, exc)
        except ValueError as exc:
            logger.warning("request.invalid_value", error=str(exc))
            return JSONResponse(
                status_code=400,
                content={"error": "INVALID_ARGUMENT", "code": None, "message": str(exc)},
            )
        except Exception as exc:
            logger.exception("unhandled.error", error=str(exc))
            return JSONResponse(
                status_code=500,
                content={
                    "error": "INTERNAL_ERROR",
                    "code": None,
                    "message": "An unexpected error occurred",
                },
            )


# ---------------------------------------------------------------------------
# Setup function
# ---------------------------------------------------------------------------
def setup_middleware(app: FastAPI, cors_origins: list[str] | None = None) -> None:
    """Register all middleware on the FastAPI application.

    Middleware is applied bottom-up, so the last added runs first.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIDMiddleware)
