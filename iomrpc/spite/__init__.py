"""Spite envelope models, error taxonomies and decoding helpers."""

from iomrpc.spite.codes import MaleficError, TaskStatusCode
from iomrpc.spite.handler import (
    ParsedTaskContext,
    SpiteError,
    extract_error,
    extract_output,
    extract_response,
    extract_response_from_task_context,
    get_output_from_task_context,
    handle_malefic_error,
    handle_task_error,
    parse_task_context,
)
from iomrpc.spite.models import ModuleResponse, Spite, SpiteBody, SpiteStatus, TaskContext

__all__ = [
    "MaleficError",
    "ModuleResponse",
    "ParsedTaskContext",
    "Spite",
    "SpiteBody",
    "SpiteError",
    "SpiteStatus",
    "TaskContext",
    "TaskStatusCode",
    "extract_error",
    "extract_output",
    "extract_response",
    "extract_response_from_task_context",
    "get_output_from_task_context",
    "handle_malefic_error",
    "handle_task_error",
    "parse_task_context",
]
