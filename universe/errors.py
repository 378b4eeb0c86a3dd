from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Domain-level exception normalized by the global error handler."""

    def __init__(
        self,
        detail: str,
        *,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        code: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.code = code


def error_response(
    message: str,
    code: str,
    *,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    **extra: Any,
) -> JSONResponse:
    return JSONResponse({"error": message, "code": code, **extra}, status_code=status_code)


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return error_response(
        exc.detail,
        exc.code or "DOMAIN_ERROR",
        status_code=exc.status_code,
    )


def _http_error_handler(api_prefix: str):
    async def handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        path = request.url.path
        if exc.status_code == status.HTTP_404_NOT_FOUND and path.startswith(api_prefix):
            return JSONResponse(
                {
                    "error": "API endpoint not found",
                    "path": path,
                    "method": request.method,
                },
                status_code=exc.status_code,
                headers=getattr(exc, "headers", None),
            )
        return JSONResponse(
            {"error": str(exc.detail), "code": "HTTP_ERROR"},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    return handler


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_error",
        path=request.url.path,
        method=request.method,
    )
    return error_response(
        "Internal server error",
        "INTERNAL_ERROR",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def install_error_handlers(app: FastAPI, *, api_prefix: str = "/api/") -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler(api_prefix))
    app.add_exception_handler(Exception, _unhandled_error_handler)


class ValidationNormalizeMiddleware:
    """Normalize FastAPI 422 validation responses into 400 with a short error body."""

    def __init__(self, app: Any) -> None:
        self.app = app

    async def __call__(self, scope: Dict[str, Any], receive: Any, send: Any) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        status_code = 500
        headers: List[Tuple[bytes, bytes]] = []
        body_chunks: List[bytes] = []

        async def send_wrapper(message: Dict[str, Any]) -> None:
            nonlocal status_code, headers
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = list(message.get("headers", []))
                return
            if message["type"] == "http.response.body":
                body = message.get("body", b"") or b""
                body_chunks.append(body)
                if message.get("more_body"):
                    return

            if status_code == 422:
                payload = json.dumps({"error": "Invalid input."}).encode("utf-8")
                filtered = [
                    (key, value)
                    for key, value in headers
                    if key.lower() not in {b"content-length", b"content-type"}
                ]
                filtered.append((b"content-type", b"application/json"))
                filtered.append((b"content-length", str(len(payload)).encode("latin-1")))
                await send(
                    {
                        "type": "http.response.start",
                        "status": 400,
                        "headers": filtered,
                    }
                )
                await send({"type": "http.response.body", "body": payload})
                return

            await send(
                {
                    "type": "http.response.start",
                    "status": status_code,
                    "headers": headers,
                }
            )
            await send(
                {
                    "type": "http.response.body",
                    "body": b"".join(body_chunks),
                }
            )

        await self.app(scope, receive, send_wrapper)


__all__ = [
    "DomainError",
    "ValidationNormalizeMiddleware",
    "error_response",
    "install_error_handlers",
]
