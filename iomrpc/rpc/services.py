"""Service descriptors and capability sets for the operator and listener services."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable

from iomrpc.rpc.options import CallOptions
from iomrpc.transport.base import Transport

RpcMethod = Callable[[Any, CallOptions | None], Awaitable[Any]]

OPERATOR = "operator"
LISTENER = "listener"

WAIT_TASK_FINISH = "wait_task_finish"

# Built-in catalogs. Further names come from ServiceMethodsConfig.
OPERATOR_METHODS: tuple[str, ...] = (
    "get_basic",
    "get_clients",
    "login_client",
    "get_events",
    "get_sessions",
    "get_session",
    "get_alive_sessions",
    "get_session_count",
    "get_session_history",
    "set_session_note",
    "set_session_group",
    "get_tasks",
    "get_task_content",
    "wait_task_content",
    "wait_task_finish",
    "get_task_files",
    "cancel_task",
    "list_jobs",
    "get_listeners",
    "get_pipelines",
    "get_audit",
)

LISTENER_METHODS: tuple[str, ...] = (
    "register_listener",
    "listener_checkin",
    "register_pipeline",
    "start_pipeline",
    "stop_pipeline",
    "delete_pipeline",
    "list_pipelines",
    "register_website",
    "start_website",
    "stop_website",
    "list_websites",
)


def to_rpc_name(method: str) -> str:
    """Map a snake_case method name to its wire name (``wait_task_finish`` -> ``WaitTaskFinish``)."""
    return "".join(part[:1].upper() + part[1:] for part in method.split("_") if part)


@dataclass(slots=True, frozen=True)
class ServiceDescriptor:
    """Static description of one remote service group."""

    name: str
    service: str
    methods: tuple[str, ...]

    def extended(self, extra: Iterable[str]) -> "ServiceDescriptor":
        """Return a descriptor with extra method names appended (duplicates dropped, order kept)."""
        merged = list(self.methods)
        for raw in extra:
            method = str(raw or "").strip()
            if method and method not in merged:
                merged.append(method)
        return ServiceDescriptor(name=self.name, service=self.service, methods=tuple(merged))


OPERATOR_SERVICE = ServiceDescriptor(name=OPERATOR, service="clientrpc.MaliceRPC", methods=OPERATOR_METHODS)
LISTENER_SERVICE = ServiceDescriptor(name=LISTENER, service="listenerrpc.ListenerRPC", methods=LISTENER_METHODS)


class CapabilitySet(Mapping[str, RpcMethod]):
    """Immutable mapping of method name to async callable ``(request, options) -> response``."""

    def __init__(self, name: str, methods: Mapping[str, RpcMethod]):
        self.name = name
        self._methods = MappingProxyType(dict(methods))

    def __getitem__(self, method: str) -> RpcMethod:
        return self._methods[method]

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __repr__(self) -> str:
        return f"CapabilitySet(name={self.name!r}, methods={len(self)})"


def _bind_method(transport: Transport, service: str, rpc_name: str) -> RpcMethod:
    async def invoke(request: Any = None, options: CallOptions | None = None) -> Any:
        opts = options or CallOptions()
        headers = {**opts.headers, **opts.pinned_headers}
        return await transport.unary(
            service,
            rpc_name,
            request,
            headers=headers,
            timeout_ms=opts.timeout_ms,
        )

    invoke.__name__ = rpc_name
    invoke.__qualname__ = f"{service}.{rpc_name}"
    return invoke


def build_capability_set(descriptor: ServiceDescriptor, transport: Transport) -> CapabilitySet:
    """Bind every method of a descriptor to a transport."""
    return CapabilitySet(
        descriptor.name,
        {method: _bind_method(transport, descriptor.service, to_rpc_name(method)) for method in descriptor.methods},
    )
