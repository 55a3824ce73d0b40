"""
Per-request tracing for the TaskDesk API.

Each request gets a short id, returned as X-Request-ID, and the caller's
user id and role are copied from the bearer token into the logging context.
The token is only peeked at here; `routes.deps.get_current_user` still does
the real authentication.
"""

import time
import uuid
from typing import Tuple
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from logging_config import get_logger, request_id_var, user_id_var, role_var
from jose import jwt, JWTError
from config import config

logger = get_logger("middleware")

ANONYMOUS = ("-", "-")


def _caller_from_token(request: Request) -> Tuple[str, str]:
    """(user_id, role) from the bearer token, or placeholders when absent or invalid."""
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme != "Bearer" or not token:
        return ANONYMOUS
    try:
        claims = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        return ANONYMOUS
    return claims.get("sub", "-"), claims.get("role", "-")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


class RequestLifecycleMiddleware(BaseHTTPMiddleware):
    """Sets the logging context and logs every request's start, outcome and duration."""

    async def dispatch(self, request: Request, call_next) -> Response:
        req_id = uuid.uuid4().hex[:8]
        user_id, role = _caller_from_token(request)
        request_id_var.set(req_id)
        user_id_var.set(user_id)
        role_var.set(role)

        method, path = request.method, request.url.path
        started = time.perf_counter()
        logger.info(
            f"→ {method} {path}",
            extra={"data": {"query": str(request.query_params) or None}}
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = _elapsed_ms(started)
            logger.error(
                f"✖ {method} {path} unhandled after {duration_ms}ms: {exc}",
                exc_info=True,
                extra={"data": {"duration_ms": duration_ms}}
            )
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "request_id": req_id},
                headers={"X-Request-ID": req_id}
            )

        duration_ms = _elapsed_ms(started)
        log_fn = logger.warning if response.status_code >= 400 else logger.info
        log_fn(
            f"← {method} {path} {response.status_code} ({duration_ms}ms)",
            extra={"data": {"status": response.status_code, "duration_ms": duration_ms}}
        )
        response.headers["X-Request-ID"] = req_id
        return response
