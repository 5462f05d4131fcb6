"""Session-scoped calls and the ``sync_`` submit-then-wait convention."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from iomrpc.rpc.options import CallOptions
from iomrpc.rpc.services import WAIT_TASK_FINISH
from iomrpc.utils.exceptions import MethodNotFoundError, SessionScopeError

if TYPE_CHECKING:
    from iomrpc.rpc.client import RpcClient

SESSION_HEADER = "session_id"
SYNC_PREFIX = "sync_"
SYNC_WAIT_TIMEOUT_MS = 60_000

_TASK_ID_KEYS = ("taskId", "task_id")
_SESSION_ID_KEYS = ("sessionId", "session_id")

ScopedMethod = Callable[..., Awaitable[Any]]


class SessionInfo(BaseModel):
    """Cached session metadata. Only ``session_id`` is identity; the rest is advisory."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    session_id: str = Field(alias="sessionId", min_length=1)
    name: str | None = None
    type: str | None = None

    @classmethod
    def coerce(cls, value: "SessionInfo | Mapping[str, Any] | str") -> "SessionInfo":
        if isinstance(value, SessionInfo):
            return value
        if isinstance(value, str):
            return cls(session_id=value)
        if isinstance(value, Mapping):
            return cls.model_validate(dict(value))
        raise TypeError(f"unsupported session descriptor type: {type(value).__name__}")


class TaskPhase(str, Enum):
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    FAILED = "failed"


def _field(result: Any, keys: tuple[str, ...]) -> tuple[bool, Any]:
    """Return (present, value) for the first key present on a mapping or object."""
    if isinstance(result, Mapping):
        for key in keys:
            if key in result:
                return True, result[key]
        return False, None
    if result is None or isinstance(result, (str, bytes, int, float, bool, list, tuple)):
        return False, None
    for key in keys:
        if hasattr(result, key):
            return True, getattr(result, key)
    return False, None


class SessionScope:
    """
    A dispatcher bound to one remote session.

    Every forwarded call carries ``session_id`` in its headers, written after
    the caller's headers so it cannot be overridden. Methods named
    ``sync_<method>`` submit through ``<method>`` and then wait for the task.
    Unknown names resolve to ``None`` so callers can check for optional methods.
    """

    def __init__(self, client: "RpcClient | None", session: SessionInfo | Mapping[str, Any] | str):
        self._client = client
        self._info = SessionInfo.coerce(session)

    @property
    def session_id(self) -> str:
        return self._info.session_id

    def get_session_id(self) -> str:
        return self._info.session_id

    @property
    def session_info(self) -> SessionInfo:
        return self._info

    @property
    def client(self) -> "RpcClient | None":
        return self._client

    def resolve(self, name: str) -> ScopedMethod | None:
        """Bound async callable for ``name``, or None if the dispatcher has no such method."""
        client = self._require_client()
        if client.has(name):
            return self._forwarder(client, name)
        if name.startswith(SYNC_PREFIX):
            target = name[len(SYNC_PREFIX):]
            if target and client.has(target):
                return self._sync_forwarder(client, target)
        return None

    async def call(
        self,
        name: str,
        request: Any = None,
        options: CallOptions | Mapping[str, Any] | None = None,
    ) -> Any:
        method = self.resolve(name)
        if method is None:
            raise MethodNotFoundError(name)
        return await method(request, options)

    def __getattr__(self, name: str) -> ScopedMethod | None:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.resolve(name)

    def __repr__(self) -> str:
        return f"SessionScope(session_id={self.session_id!r})"

    def _require_client(self) -> "RpcClient":
        if self._client is None:
            raise SessionScopeError(self.session_id)
        return self._client

    def _scoped_options(self, options: CallOptions | Mapping[str, Any] | None) -> CallOptions:
        return CallOptions.coerce(options).with_pinned(**{SESSION_HEADER: self.session_id})

    def _forwarder(self, client: "RpcClient", name: str) -> ScopedMethod:
        async def forward(request: Any = None, options: CallOptions | Mapping[str, Any] | None = None) -> Any:
            return await client.call(name, request, self._scoped_options(options))

        forward.__name__ = name
        return forward

    def _sync_forwarder(self, client: "RpcClient", target: str) -> ScopedMethod:
        async def submit_and_wait(
            request: Any = None,
            options: CallOptions | Mapping[str, Any] | None = None,
        ) -> Any:
            return await self._run_sync(client, target, request, self._scoped_options(options))

        submit_and_wait.__name__ = SYNC_PREFIX + target
        return submit_and_wait

    async def _run_sync(self, client: "RpcClient", target: str, request: Any, options: CallOptions) -> Any:
        phase = TaskPhase.SUBMITTED
        logger.debug("sync {} [{}]: {}", target, self.session_id, phase.value)
        try:
            handle = await client.call(target, request, options)
            has_task, task_id = _field(handle, _TASK_ID_KEYS)
            if not has_task:
                phase = TaskPhase.COMPLETED
                logger.debug("sync {} [{}]: {} without task id", target, self.session_id, phase.value)
                return handle
            if not client.has(WAIT_TASK_FINISH):
                logger.warning(
                    "sync {} [{}]: {} unavailable, returning task handle",
                    target,
                    self.session_id,
                    WAIT_TASK_FINISH,
                )
                return handle

            _, handle_session = _field(handle, _SESSION_ID_KEYS)
            wait_request = {"taskId": task_id, "sessionId": handle_session or self.session_id}
            result = await client.call(
                WAIT_TASK_FINISH,
                wait_request,
                options.with_timeout(options.timeout_ms or SYNC_WAIT_TIMEOUT_MS),
            )
        except Exception as e:
            phase = TaskPhase.FAILED
            logger.debug("sync {} [{}]: {} ({})", target, self.session_id, phase.value, type(e).__name__)
            raise
        phase = TaskPhase.COMPLETED
        logger.debug("sync {} [{}]: {} task {}", target, self.session_id, phase.value, task_id)
        return result
