"""Unified RPC client over the operator and listener services.

One object reaches every registered remote method: ``await client.get_sessions({})``
is routed through an explicit name -> handler table built once at construction
(operator methods first, then listener methods; first registration wins).
"""

from __future__ import annotations

import functools
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

import httpx
from loguru import logger

from iomrpc.config.loader import parse_auth_file
from iomrpc.config.schema import ClientConfig
from iomrpc.rpc.options import CallOptions, merge_headers
from iomrpc.rpc.services import (
    LISTENER,
    LISTENER_SERVICE,
    OPERATOR,
    OPERATOR_SERVICE,
    CapabilitySet,
    RpcMethod,
    build_capability_set,
)
from iomrpc.transport import create_transport
from iomrpc.transport.base import Transport
from iomrpc.utils.exceptions import MethodNotFoundError

LogHook = Callable[[str], None]

SERVICE_LABELS = {OPERATOR: "MaliceRPC", LISTENER: "ListenerRPC"}


class RpcClient:
    """Dispatches method calls to whichever service defines them."""

    def __init__(
        self,
        operator: Mapping[str, RpcMethod],
        listener: Mapping[str, RpcMethod],
        *,
        default_headers: Mapping[str, str] | None = None,
        timeout_ms: int | None = None,
        on_log: LogHook | None = None,
        transport: Transport | None = None,
    ):
        self._operator = operator if isinstance(operator, CapabilitySet) else CapabilitySet(OPERATOR, operator)
        self._listener = listener if isinstance(listener, CapabilitySet) else CapabilitySet(LISTENER, listener)
        self._default_headers = dict(default_headers or {})
        self._timeout_ms = timeout_ms
        self._on_log = on_log
        self._transport = transport

        routes: dict[str, tuple[str, RpcMethod]] = {}
        for capability in (self._operator, self._listener):
            for name, handler in capability.items():
                routes.setdefault(name, (capability.name, handler))
        self._routes = MappingProxyType(routes)
        self._log(f"RpcClient initialized with transport: {getattr(transport, 'kind', 'custom')}")

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        on_log: LogHook | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RpcClient":
        """Build the transport and both capability sets from a config. Fails fast on missing transport settings."""
        transport = create_transport(config, http_transport=http_transport)
        return cls(
            build_capability_set(OPERATOR_SERVICE.extended(config.methods.operator), transport),
            build_capability_set(LISTENER_SERVICE.extended(config.methods.listener), transport),
            default_headers=config.default_headers,
            timeout_ms=config.timeout_ms,
            on_log=on_log,
            transport=transport,
        )

    @classmethod
    def from_auth_file(
        cls,
        auth_file_path: str | Path,
        *,
        on_log: LogHook | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
        **overrides: Any,
    ) -> "RpcClient":
        """Native mutual-TLS client from an operator auth file; ``overrides`` are ClientConfig fields."""
        config = ClientConfig(transport="grpc", auth=parse_auth_file(auth_file_path), **overrides)
        return cls.from_config(config, on_log=on_log, http_transport=http_transport)

    @property
    def operator(self) -> CapabilitySet:
        """Operator (MaliceRPC) capability set, for advanced usage."""
        return self._operator

    @property
    def listener(self) -> CapabilitySet:
        """Listener (ListenerRPC) capability set, for advanced usage."""
        return self._listener

    @property
    def default_headers(self) -> dict[str, str]:
        return dict(self._default_headers)

    @property
    def timeout_ms(self) -> int | None:
        return self._timeout_ms

    def has(self, method: str) -> bool:
        return method in self._routes

    def route(self, method: str) -> str | None:
        """Name of the capability set that serves ``method``, or None."""
        entry = self._routes.get(method)
        return entry[0] if entry else None

    def methods(self) -> list[str]:
        return list(self._routes)

    async def call(
        self,
        method: str,
        request: Any = None,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Invoke a remote method by name.

        Args:
            method: snake_case method name.
            request: Request object (mapping or pydantic model).
            options: Per-call headers and timeout.

        Returns:
            The decoded response.

        Raises:
            MethodNotFoundError: If neither service defines ``method``.
        """
        entry = self._routes.get(method)
        if entry is None:
            raise MethodNotFoundError(method)
        service, handler = entry
        self._log(f"Forwarding {method} to {SERVICE_LABELS.get(service, service)}")
        return await handler(request, self.merged_options(options))

    def create_call_options(self, overrides: CallOptions | Mapping[str, Any] | None = None) -> CallOptions:
        """Create call options with default headers and timeout."""
        return self.merged_options(overrides)

    def merged_options(self, options: CallOptions | Mapping[str, Any] | None = None) -> CallOptions:
        """Layer default headers, caller headers and pinned headers; apply the default timeout when unset."""
        opts = CallOptions.coerce(options)
        headers = merge_headers(self._default_headers, opts.headers, opts.pinned_headers)
        self._log(f"Outgoing headers: {sorted(headers)}")
        timeout_ms = opts.timeout_ms
        if not timeout_ms and self._timeout_ms:
            timeout_ms = self._timeout_ms
        return CallOptions(headers=headers, timeout_ms=timeout_ms, pinned_headers=dict(opts.pinned_headers))

    async def close(self) -> None:
        if self._transport is not None:
            await self._transport.aclose()

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        if name not in self._routes:
            raise MethodNotFoundError(name)
        return functools.partial(self.call, name)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._routes))

    def _log(self, message: str) -> None:
        logger.debug("[RpcClient] {}", message)
        if self._on_log is None:
            return
        try:
            self._on_log(message)
        except Exception:
            logger.opt(exception=True).debug("on_log hook failed")
