"""Manager facade: a client plus its session registry."""

from __future__ import annotations

from typing import Any

from iomrpc.rpc.client import RpcClient
from iomrpc.session.registry import SessionRegistry
from iomrpc.session.scope import SessionInfo, SessionScope
from iomrpc.utils.exceptions import ErrorCategory, IomRpcError


class Manager:
    """Owns the session registry for one client."""

    def __init__(self, client: RpcClient | None):
        self.client = client
        self.sessions = SessionRegistry(client)

    def session(self, session_id: str) -> SessionScope:
        return self.sessions.get_session(session_id)

    async def refresh_sessions(self, request: Any = None) -> list[SessionInfo]:
        """Fetch sessions from the server and replace the cached metadata."""
        if self.client is None:
            raise IomRpcError("Manager has no client", code="NO_CLIENT", category=ErrorCategory.SESSION)
        response = await self.client.get_sessions(request or {})
        raw = response.get("sessions", []) if isinstance(response, dict) else getattr(response, "sessions", [])
        self.sessions.update_sessions(raw or [])
        return self.sessions.all_session_infos()

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
