"""
Decode task contexts and spite envelopes.

Classification order: outer malefic error code first, then (for TASK_ERROR)
the inner task status, then payload extraction from the ``response`` body.
Nothing here performs I/O; decoding the same input twice gives the same result.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from iomrpc.spite.codes import MALEFIC_ERROR_MESSAGES, MaleficError, TaskStatusCode
from iomrpc.spite.models import ModuleResponse, Spite, SpiteStatus, TaskContext
from iomrpc.utils.exceptions import ErrorCategory, IomRpcError

SpiteInput = Spite | Mapping[str, Any] | None
TaskContextInput = TaskContext | Mapping[str, Any] | None

ModelT = TypeVar("ModelT", bound=BaseModel)


class SpiteError(IomRpcError):
    """A remote task reported failure. ``code`` is the numeric taxonomy code, when known."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message, code=code, category=ErrorCategory.APPLICATION)


@dataclass(slots=True)
class ParsedTaskContext:
    output: str
    error: str
    response: ModuleResponse | None


def _validate(model: type[ModelT], data: Any, what: str) -> ModelT:
    try:
        return model.model_validate(dict(data) if isinstance(data, Mapping) else data)
    except ValidationError as e:
        raise SpiteError(f"invalid {what}: {e}") from e


def _as_spite(spite: SpiteInput) -> Spite | None:
    if spite is None or isinstance(spite, Spite):
        return spite
    return _validate(Spite, spite, "spite")


def _as_status(status: SpiteStatus | Mapping[str, Any] | None) -> SpiteStatus | None:
    if status is None or isinstance(status, SpiteStatus):
        return status
    return _validate(SpiteStatus, status, "task status")


def _as_task_context(ctx: TaskContextInput) -> TaskContext | None:
    if ctx is None or isinstance(ctx, TaskContext):
        return ctx
    return _validate(TaskContext, ctx, "task context")


def handle_malefic_error(spite: SpiteInput) -> SpiteError | None:
    """Return the error a spite's outer code (and inner status) describes, or None on success."""
    parsed = _as_spite(spite)
    if parsed is None:
        return SpiteError("nil spite")

    code = parsed.error
    if code == MaleficError.NONE:
        return None
    if code == MaleficError.TASK_ERROR:
        return handle_task_error(parsed.status)
    try:
        return SpiteError(MALEFIC_ERROR_MESSAGES[MaleficError(code)], code)
    except (KeyError, ValueError):
        return SpiteError(f"unknown malefic error: {code}", code)


def handle_task_error(status: SpiteStatus | Mapping[str, Any] | None) -> SpiteError | None:
    parsed = _as_status(status)
    if parsed is None:
        return SpiteError("nil status or unknown error")

    code = parsed.status
    if code == TaskStatusCode.NONE:
        return None
    try:
        TaskStatusCode(code)
    except ValueError:
        return SpiteError(f"unknown task status: {json.dumps(parsed.model_dump(by_alias=True))}", code)
    return SpiteError(f"task error: {parsed.error or 'unknown error'}", code)


def extract_response(spite: SpiteInput) -> ModuleResponse | None:
    parsed = _as_spite(spite)
    if parsed is None:
        return None
    return parsed.response


def extract_response_from_task_context(ctx: TaskContextInput) -> ModuleResponse | None:
    """
    Response payload of a task context.

    Returns None when the context or its spite is missing.

    Raises:
        SpiteError: If the spite carries a failure code.
    """
    parsed = _as_task_context(ctx)
    if parsed is None or parsed.spite is None:
        return None
    error = handle_malefic_error(parsed.spite)
    if error is not None:
        raise error
    return extract_response(parsed.spite)


def extract_output(response: ModuleResponse | Mapping[str, Any] | None) -> str:
    if response is None:
        return ""
    if isinstance(response, Mapping):
        return str(response.get("output") or "")
    return response.output or ""


def extract_error(response: ModuleResponse | Mapping[str, Any] | None) -> str:
    if response is None:
        return ""
    if isinstance(response, Mapping):
        return str(response.get("error") or "")
    return response.error or ""


def get_output_from_task_context(ctx: TaskContextInput) -> str:
    return extract_output(extract_response_from_task_context(ctx))


def parse_task_context(ctx: TaskContextInput) -> ParsedTaskContext:
    """
    Validate a task context and pull out its output.

    Raises:
        SpiteError: "nil task context", "nil spite in task context", "invalid
            task context" for malformed input, or the taxonomy error the spite
            carries.
    """
    parsed = _as_task_context(ctx)
    if parsed is None:
        raise SpiteError("nil task context")
    if parsed.spite is None:
        raise SpiteError("nil spite in task context")

    error = handle_malefic_error(parsed.spite)
    if error is not None:
        raise error

    response = extract_response(parsed.spite)
    return ParsedTaskContext(
        output=extract_output(response),
        error=extract_error(response),
        response=response,
    )
