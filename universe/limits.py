from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Iterable, Tuple


_SKIP_PATH_PARTS = {
    "docs",
    "openapi.json",
    "favicon.ico",
}


def _header_value(headers: Iterable[Tuple[bytes, bytes]], key: bytes) -> str | None:
    for header_key, header_value in headers:
        if header_key.lower() == key:
            return header_value.decode("latin-1")
    return None


def _should_skip(path: str) -> bool:
    parts = [part for part in path.split("/") if part]
    return any(part in _SKIP_PATH_PARTS for part in parts)


async def _send_json(send: Any, status_code: int, message: str, code: str) -> None:
    body = json.dumps({"error": message, "code": code}).encode("utf-8")
    await send(
        {
            "type": "http.response.start",
            "status": status_code,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(body)).encode("latin-1")),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})


class _RequestTooLarge(Exception):
    pass


class RequestLimitsMiddleware:
    """Reject oversized request bodies (413) and requests that run too long (504)."""

    def __init__(
        self,
        app: Any,
        *,
        max_body: int | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.app = app
        self.max_body = max_body if max_body and max_body > 0 else None
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds and timeout_seconds > 0 else None
        )

    async def __call__(self, scope: Dict[str, Any], receive: Any, send: Any) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if _should_skip(path):
            await self.app(scope, receive, send)
            return

        max_body = self.max_body
        timeout_seconds = self.timeout_seconds

        if max_body is None and timeout_seconds is None:
            await self.app(scope, receive, send)
            return

        headers = scope.get("headers", [])
        content_length = _header_value(headers, b"content-length")
        if max_body is not None and content_length and content_length.isdigit():
            if int(content_length) > max_body:
                await _send_json(send, 413, "Payload too large", "PAYLOAD_TOO_LARGE")
                return

        response_started = False
        body_bytes = 0

        async def receive_wrapper() -> Dict[str, Any]:
            nonlocal body_bytes
            message = await receive()
            if message.get("type") == "http.request":
                body = message.get("body", b"")
                if body:
                    body_bytes += len(body)
                    if max_body is not None and body_bytes > max_body:
                        raise _RequestTooLarge()
            return message

        async def send_wrapper(message: Dict[str, Any]) -> None:
            nonlocal response_started
            if message.get("type") == "http.response.start":
                response_started = True
            await send(message)

        try:
            if timeout_seconds is not None:
                await asyncio.wait_for(
                    self.app(scope, receive_wrapper, send_wrapper),
                    timeout=timeout_seconds,
                )
            else:
                await self.app(scope, receive_wrapper, send_wrapper)
        except _RequestTooLarge:
            if not response_started:
                await _send_json(send, 413, "Payload too large", "PAYLOAD_TOO_LARGE")
        except asyncio.TimeoutError:
            if not response_started:
                await _send_json(send, 504, "Request timed out", "REQUEST_TIMEOUT")
