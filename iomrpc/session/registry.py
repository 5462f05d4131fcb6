"""Session registry: cached session metadata and session scopes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from loguru import logger

from iomrpc.session.scope import SessionInfo, SessionScope

if TYPE_CHECKING:
    from iomrpc.rpc.client import RpcClient


class SessionRegistry:
    """
    Keyed cache of SessionInfo and SessionScope instances.

    Scopes are created on first access. Refreshed metadata replaces the cached
    entry wholesale; eviction is explicit through remove_session/clear_sessions.
    """

    def __init__(self, client: "RpcClient | None"):
        self._client = client
        self._infos: dict[str, SessionInfo] = {}
        self._scopes: dict[str, SessionScope] = {}

    def update_sessions(self, sessions: Iterable[SessionInfo | Mapping[str, Any]]) -> None:
        """Replace cached metadata for each session; cached scopes are rebuilt around the new info."""
        for raw in sessions:
            info = SessionInfo.coerce(raw)
            self._infos[info.session_id] = info
            if info.session_id in self._scopes:
                self._scopes[info.session_id] = SessionScope(self._client, info)
        logger.debug("Session registry holds {} sessions", len(self._infos))

    def get_session(self, session_id: str) -> SessionScope:
        """Get or create the scope for a session."""
        scope = self._scopes.get(session_id)
        if scope is None:
            info = self._infos.get(session_id) or SessionInfo(session_id=session_id)
            scope = SessionScope(self._client, info)
            self._scopes[session_id] = scope
        return scope

    def get_session_info(self, session_id: str) -> SessionInfo | None:
        return self._infos.get(session_id)

    def remove_session(self, session_id: str) -> bool:
        """Evict a session. Returns True if anything was cached for it."""
        removed_scope = self._scopes.pop(session_id, None)
        removed_info = self._infos.pop(session_id, None)
        return removed_scope is not None or removed_info is not None

    def clear_sessions(self) -> None:
        self._scopes.clear()
        self._infos.clear()

    def all_session_infos(self) -> list[SessionInfo]:
        return list(self._infos.values())

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._infos or session_id in self._scopes

    def __len__(self) -> int:
        return len(self._infos.keys() | self._scopes.keys())
