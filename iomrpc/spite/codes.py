"""Numeric error taxonomies carried by a spite envelope."""

from __future__ import annotations

from enum import IntEnum


class MaleficError(IntEnum):
    """Outer application error code (``spite.error``)."""

    NONE = 0
    PANIC = 1
    UNPACK_ERROR = 2
    MISSING_BODY = 3
    MODULE_ERROR = 4
    MODULE_NOT_FOUND = 5
    TASK_ERROR = 6
    TASK_NOT_FOUND = 7
    TASK_OPERATOR_NOT_FOUND = 8
    EXTENSION_NOT_FOUND = 9
    UNEXPECTED_BODY = 10


class TaskStatusCode(IntEnum):
    """Inner task status code (``spite.status.status``), meaningful when the outer code is TASK_ERROR."""

    NONE = 0
    OPERATOR_ERROR = 1
    NOT_EXPECT_BODY = 2
    FIELD_REQUIRED = 3
    FIELD_LENGTH_MISMATCH = 4
    FIELD_INVALID = 5
    TASK_ERROR = 6


MALEFIC_ERROR_MESSAGES: dict[MaleficError, str] = {
    MaleficError.PANIC: "module panic",
    MaleficError.UNPACK_ERROR: "module unpack error",
    MaleficError.MISSING_BODY: "module miss body",
    MaleficError.MODULE_ERROR: "module error",
    MaleficError.MODULE_NOT_FOUND: "module not found",
    MaleficError.TASK_NOT_FOUND: "task not found",
    MaleficError.TASK_OPERATOR_NOT_FOUND: "task operator not found",
    MaleficError.EXTENSION_NOT_FOUND: "extension not found",
    MaleficError.UNEXPECTED_BODY: "unexpected body",
}
