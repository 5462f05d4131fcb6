"""Session scoping and the session registry."""

from iomrpc.session.registry import SessionRegistry
from iomrpc.session.scope import (
    SESSION_HEADER,
    SYNC_PREFIX,
    SYNC_WAIT_TIMEOUT_MS,
    SessionInfo,
    SessionScope,
    TaskPhase,
)

__all__ = [
    "SESSION_HEADER",
    "SYNC_PREFIX",
    "SYNC_WAIT_TIMEOUT_MS",
    "SessionInfo",
    "SessionRegistry",
    "SessionScope",
    "TaskPhase",
]
