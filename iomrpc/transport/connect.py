"""Connect unary JSON transport over httpx.

Both the browser-compatible and the native transport speak the same unary
protocol: ``POST {base}/{service}/{Method}`` with a JSON body, caller headers as
HTTP headers, and ``{"code", "message"}`` error bodies on non-2xx responses.
"""

from __future__ import annotations

from typing import Any, Mapping

import httpx
from loguru import logger
from pydantic import BaseModel

from iomrpc.utils.exceptions import RpcTransportError, sanitize_error_message

CONNECT_PROTOCOL_VERSION = "1"
DEFAULT_HTTP_TIMEOUT_S = 20.0

RETRYABLE_CODES = frozenset({"unavailable", "resource_exhausted", "aborted", "deadline_exceeded"})

# Connect code inferred from the HTTP status when the error body has none.
_HTTP_STATUS_CODES: dict[int, str] = {
    400: "internal",
    401: "unauthenticated",
    403: "permission_denied",
    404: "unimplemented",
    408: "deadline_exceeded",
    429: "unavailable",
    502: "unavailable",
    503: "unavailable",
    504: "unavailable",
}


def encode_request(request: Any) -> dict[str, Any]:
    """Coerce a request value into a JSON object."""
    if request is None:
        return {}
    if isinstance(request, BaseModel):
        return request.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(request, Mapping):
        return dict(request)
    raise TypeError(f"unsupported request type: {type(request).__name__}")


def _extract_error(body: Any, status_code: int, fallback_text: str) -> tuple[str, str]:
    code = _HTTP_STATUS_CODES.get(status_code, "unknown")
    message = ""
    if isinstance(body, dict):
        raw_code = body.get("code")
        if isinstance(raw_code, str) and raw_code.strip():
            code = raw_code.strip()
        raw_message = body.get("message")
        if isinstance(raw_message, str):
            message = raw_message.strip()
    if not message:
        message = (fallback_text or "").strip()[:200] or "request failed"
    return code, message


class ConnectTransport:
    """Unary JSON calls over a pooled httpx.AsyncClient."""

    def __init__(self, http_client: httpx.AsyncClient):
        self._http = http_client

    @property
    def base_url(self) -> str:
        return str(self._http.base_url)

    async def unary(
        self,
        service: str,
        method: str,
        request: Any,
        *,
        headers: Mapping[str, str],
        timeout_ms: int | None = None,
    ) -> Any:
        path = f"/{service}/{method}"
        outgoing = dict(headers)
        outgoing["Content-Type"] = "application/json"
        outgoing["Connect-Protocol-Version"] = CONNECT_PROTOCOL_VERSION
        timeout: httpx.Timeout | None = None
        if timeout_ms:
            outgoing["Connect-Timeout-Ms"] = str(int(timeout_ms))
            timeout = httpx.Timeout(timeout_ms / 1000.0)

        try:
            if timeout is None:
                resp = await self._http.post(path, json=encode_request(request), headers=outgoing)
            else:
                resp = await self._http.post(path, json=encode_request(request), headers=outgoing, timeout=timeout)
        except httpx.TimeoutException as exc:
            logger.warning("rpc timeout: {} after {}ms", path, timeout_ms)
            raise RpcTransportError(
                f"rpc timeout: {path}",
                code="deadline_exceeded",
                retryable=True,
                method=path,
            ) from exc
        except httpx.RequestError as exc:
            detail = sanitize_error_message(str(exc))
            logger.warning("rpc network error: {}: {}", path, detail)
            raise RpcTransportError(
                f"rpc network error: {path}: {detail}",
                code="unavailable",
                retryable=True,
                method=path,
            ) from exc

        if resp.status_code >= 400:
            try:
                body: Any = resp.json()
            except ValueError:
                body = None
            code, message = _extract_error(body, resp.status_code, resp.text)
            logger.warning("rpc error {} ({}): {}", path, code, sanitize_error_message(message))
            raise RpcTransportError(
                message,
                code=code,
                status_code=resp.status_code,
                retryable=code in RETRYABLE_CODES,
                method=path,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise RpcTransportError(
                f"rpc bad response: non-json body for {path}",
                code="bad_response",
                status_code=resp.status_code,
                method=path,
            ) from exc

    async def aclose(self) -> None:
        await self._http.aclose()
