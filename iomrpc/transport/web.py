"""Browser-compatible transport bound to a base URL."""

from __future__ import annotations

import httpx

from iomrpc.transport.connect import DEFAULT_HTTP_TIMEOUT_S, ConnectTransport
from iomrpc.utils.exceptions import TransportConfigError


class WebTransport(ConnectTransport):
    """HTTP/1.1 transport for gateways reachable at a plain base URL."""

    kind = "grpc-web"

    def __init__(
        self,
        base_url: str | None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url or not base_url.strip():
            raise TransportConfigError("baseUrl is required for gRPC-Web transport", field="base_url")
        http_client = httpx.AsyncClient(
            base_url=base_url.strip().rstrip("/"),
            timeout=DEFAULT_HTTP_TIMEOUT_S,
            transport=transport,
        )
        super().__init__(http_client)
