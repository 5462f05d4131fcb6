"""
iomrpc - client access layer for the operator and listener RPC services.
"""

__version__ = "0.1.0"

from iomrpc.config.schema import AuthConfig, ClientConfig
from iomrpc.manager import Manager
from iomrpc.rpc.client import RpcClient
from iomrpc.rpc.options import CallOptions, merge_headers
from iomrpc.session.registry import SessionRegistry
from iomrpc.session.scope import SessionInfo, SessionScope
from iomrpc.spite.handler import SpiteError, parse_task_context
from iomrpc.utils.exceptions import IomRpcError, MethodNotFoundError

__all__ = [
    "AuthConfig",
    "CallOptions",
    "ClientConfig",
    "IomRpcError",
    "Manager",
    "MethodNotFoundError",
    "RpcClient",
    "SessionInfo",
    "SessionRegistry",
    "SessionScope",
    "SpiteError",
    "__version__",
    "parse_task_context",
    "merge_headers",
]
