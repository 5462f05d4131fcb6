"""Utility functions for iomrpc."""

from iomrpc.utils.exceptions import (
    ConfigError,
    ErrorCategory,
    IomRpcError,
    MethodNotFoundError,
    RpcTransportError,
    SessionScopeError,
    TransportConfigError,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "IomRpcError",
    "MethodNotFoundError",
    "RpcTransportError",
    "SessionScopeError",
    "TransportConfigError",
    "classify_exception",
    "sanitize_error_message",
]
