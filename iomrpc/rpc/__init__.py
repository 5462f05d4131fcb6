"""Unified dispatch over the operator and listener services."""

from iomrpc.rpc.client import RpcClient
from iomrpc.rpc.options import CallOptions, merge_headers
from iomrpc.rpc.services import (
    LISTENER_METHODS,
    LISTENER_SERVICE,
    OPERATOR_METHODS,
    OPERATOR_SERVICE,
    CapabilitySet,
    ServiceDescriptor,
    build_capability_set,
    to_rpc_name,
)

__all__ = [
    "CallOptions",
    "CapabilitySet",
    "LISTENER_METHODS",
    "LISTENER_SERVICE",
    "OPERATOR_METHODS",
    "OPERATOR_SERVICE",
    "RpcClient",
    "ServiceDescriptor",
    "build_capability_set",
    "merge_headers",
    "to_rpc_name",
]
