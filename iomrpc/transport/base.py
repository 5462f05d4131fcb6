"""Transport contract consumed by capability sets."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """One unary request/response exchange against a named service method."""

    async def unary(
        self,
        service: str,
        method: str,
        request: Any,
        *,
        headers: Mapping[str, str],
        timeout_ms: int | None = None,
    ) -> Any: ...

    async def aclose(self) -> None: ...
