"""Per-call options and header layering."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class CallOptions:
    """
    Options for one remote call.

    Attributes:
        headers: Caller headers; override client defaults.
        timeout_ms: Deadline for this call; ``None`` or ``0`` means unset.
        pinned_headers: Written after every other layer and never overridden.
    """

    headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: int | None = None
    pinned_headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def coerce(cls, value: "CallOptions | Mapping[str, Any] | None") -> "CallOptions":
        """Accept CallOptions, a plain mapping (``headers``, ``timeout_ms``/``timeoutMs``), or None."""
        if value is None:
            return cls()
        if isinstance(value, CallOptions):
            return value
        if isinstance(value, Mapping):
            raw_headers = value.get("headers") or {}
            timeout = value.get("timeout_ms", value.get("timeoutMs"))
            return cls(
                headers={str(k): str(v) for k, v in dict(raw_headers).items()},
                timeout_ms=int(timeout) if timeout is not None else None,
                pinned_headers={str(k): str(v) for k, v in dict(value.get("pinned_headers") or {}).items()},
            )
        raise TypeError(f"unsupported call options type: {type(value).__name__}")

    def with_timeout(self, timeout_ms: int | None) -> "CallOptions":
        return replace(self, timeout_ms=timeout_ms)

    def with_pinned(self, **pinned: str) -> "CallOptions":
        return replace(self, pinned_headers={**self.pinned_headers, **pinned})


def merge_headers(
    defaults: Mapping[str, str] | None,
    overrides: Mapping[str, Any] | None,
    pinned: Mapping[str, Any] | None = None,
) -> dict[str, str]:
    """Layer defaults, then caller overrides, then pinned headers. Keys match case-sensitively."""
    merged: dict[str, str] = {}
    for layer in (defaults, overrides, pinned):
        if not layer:
            continue
        for key, value in layer.items():
            merged[str(key)] = str(value)
    return merged
