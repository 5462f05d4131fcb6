"""
Exception hierarchy and error helpers for iomrpc.

Provides:
- Custom exception classes with error codes
- Error categorization (dispatch, application, configuration, transport, ...)
- Safe error message formatting (no credential leak into logs)
"""

from __future__ import annotations

import asyncio
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    DISPATCH = "dispatch"
    APPLICATION = "application"
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    SESSION = "session"
    INTERNAL = "internal"


class IomRpcError(Exception):
    """Base exception for all iomrpc errors."""

    def __init__(
        self,
        message: str,
        code: str | int | None = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.INTERNAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"[{self.code}] {self.message}"


class MethodNotFoundError(IomRpcError, AttributeError):
    """Method name is registered on neither the operator nor the listener service."""

    def __init__(self, method: str):
        super().__init__(
            f"Method '{method}' not found on MaliceRPC or ListenerRPC",
            code="METHOD_NOT_FOUND",
            category=ErrorCategory.DISPATCH,
            details={"method": method},
        )
        self.method = method


class TransportConfigError(IomRpcError):
    """Required transport configuration is missing at client construction."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            code="TRANSPORT_CONFIG_ERROR",
            category=ErrorCategory.CONFIGURATION,
            details=details,
        )


class ConfigError(IomRpcError):
    """Config or auth file is unreadable or invalid."""

    def __init__(self, message: str, path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(
            message,
            code="CONFIG_ERROR",
            category=ErrorCategory.CONFIGURATION,
            details=details,
        )


class RpcTransportError(IomRpcError):
    """A unary call failed below the application layer."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "unknown",
        status_code: int | None = None,
        retryable: bool = False,
        method: str | None = None,
    ):
        category = ErrorCategory.TIMEOUT if code == "deadline_exceeded" else ErrorCategory.TRANSPORT
        super().__init__(
            message,
            code=code,
            category=category,
            details={"status_code": status_code, "retryable": retryable, "method": method},
        )
        self.status_code = status_code
        self.retryable = retryable
        self.method = method


class SessionScopeError(IomRpcError):
    """Session scope used without a bound client."""

    def __init__(self, session_id: str, message: str | None = None):
        super().__init__(
            message or f"Session '{session_id}' has no client bound; manager is not fully constructed",
            code="SESSION_SCOPE_ERROR",
            category=ErrorCategory.SESSION,
            details={"session_id": session_id},
        )
        self.session_id = session_id


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"-----BEGIN [A-Z ]+-----[\s\S]*?-----END [A-Z ]+-----"),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove credentials and key material from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, retryable).

    Returns:
        Tuple of (error_code, category, retryable)
    """
    if isinstance(exc, RpcTransportError):
        return str(exc.code), exc.category, exc.retryable

    if isinstance(exc, IomRpcError):
        return str(exc.code), exc.category, False

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.TRANSPORT, True

    if isinstance(exc, (ValueError, TypeError, KeyError)):
        return "INVALID_VALUE", ErrorCategory.INTERNAL, False

    return "INTERNAL_ERROR", ErrorCategory.INTERNAL, False
