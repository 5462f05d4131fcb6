"""Transports for the operator and listener services."""

from __future__ import annotations

import httpx

from iomrpc.config.schema import ClientConfig
from iomrpc.transport.base import Transport
from iomrpc.transport.connect import ConnectTransport, encode_request
from iomrpc.transport.native import NativeTransport, build_ssl_context
from iomrpc.transport.web import WebTransport


def create_transport(
    config: ClientConfig,
    *,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> ConnectTransport:
    """Create the single active transport for a client config; fails fast on missing settings."""
    if config.transport == "grpc":
        return NativeTransport(config.auth, transport=http_transport)
    return WebTransport(config.base_url, transport=http_transport)


__all__ = [
    "ConnectTransport",
    "NativeTransport",
    "Transport",
    "WebTransport",
    "build_ssl_context",
    "create_transport",
    "encode_request",
]
