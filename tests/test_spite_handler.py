"""Tests for task context and spite decoding."""

from __future__ import annotations

import pytest

from iomrpc.spite.codes import MaleficError, TaskStatusCode
from iomrpc.spite.handler import (
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
from iomrpc.spite.models import ModuleResponse, Spite, TaskContext
from iomrpc.utils.exceptions import ErrorCategory


def _ctx(spite):
    return {"task": {"taskId": 1}, "session": {"sessionId": "s-1"}, "spite": spite}


class TestHandleMaleficError:
    def test_success_is_none(self) -> None:
        assert handle_malefic_error({"error": 0}) is None

    def test_nil_spite(self) -> None:
        err = handle_malefic_error(None)
        assert isinstance(err, SpiteError)
        assert err.message == "nil spite"

    @pytest.mark.parametrize(
        "code,message",
        [
            (MaleficError.PANIC, "module panic"),
            (MaleficError.UNPACK_ERROR, "module unpack error"),
            (MaleficError.MISSING_BODY, "module miss body"),
            (MaleficError.MODULE_ERROR, "module error"),
            (MaleficError.MODULE_NOT_FOUND, "module not found"),
            (MaleficError.TASK_NOT_FOUND, "task not found"),
            (MaleficError.TASK_OPERATOR_NOT_FOUND, "task operator not found"),
            (MaleficError.EXTENSION_NOT_FOUND, "extension not found"),
            (MaleficError.UNEXPECTED_BODY, "unexpected body"),
        ],
    )
    def test_known_codes(self, code, message) -> None:
        err = handle_malefic_error({"error": int(code)})
        assert err is not None
        assert err.message == message
        assert err.code == code
        assert err.category == ErrorCategory.APPLICATION

    def test_unknown_code(self) -> None:
        err = handle_malefic_error({"error": 99})
        assert err is not None
        assert err.message == "unknown malefic error: 99"
        assert err.code == 99

    def test_task_error_delegates_to_status(self) -> None:
        err = handle_malefic_error(
            {"error": MaleficError.TASK_ERROR, "status": {"status": TaskStatusCode.FIELD_REQUIRED, "error": "path required"}}
        )
        assert err is not None
        assert "path required" in err.message
        assert err.code == TaskStatusCode.FIELD_REQUIRED

    def test_task_error_without_status(self) -> None:
        err = handle_malefic_error({"error": MaleficError.TASK_ERROR})
        assert err is not None
        assert "nil status" in err.message

    def test_task_error_with_ok_status_is_success(self) -> None:
        assert handle_malefic_error({"error": MaleficError.TASK_ERROR, "status": {"status": 0}}) is None


class TestHandleTaskError:
    def test_message_fallback(self) -> None:
        err = handle_task_error({"status": TaskStatusCode.OPERATOR_ERROR})
        assert err is not None
        assert err.message == "task error: unknown error"

    def test_unknown_status_code(self) -> None:
        err = handle_task_error({"status": 42, "error": "weird"})
        assert err is not None
        assert err.message.startswith("unknown task status: ")
        assert '"weird"' in err.message
        assert err.code == 42

    def test_none_status(self) -> None:
        err = handle_task_error(None)
        assert err is not None
        assert err.message == "nil status or unknown error"


class TestExtraction:
    def test_extract_response_from_proto_json(self) -> None:
        response = extract_response({"error": 0, "response": {"output": "ok", "error": ""}})
        assert isinstance(response, ModuleResponse)
        assert response.output == "ok"

    def test_extract_response_from_tagged_body(self) -> None:
        spite = Spite.model_validate({"body": {"case": "response", "value": {"output": "hi"}}})
        assert extract_response(spite).output == "hi"

    def test_other_body_variant_has_no_response(self) -> None:
        assert extract_response({"error": 0, "empty": {}}) is None
        assert extract_response(None) is None

    def test_extract_output_and_error_defaults(self) -> None:
        assert extract_output(None) == ""
        assert extract_error(None) == ""
        assert extract_output({"output": "x"}) == "x"
        assert extract_error(ModuleResponse(error="boom")) == "boom"

    def test_context_without_spite_yields_none(self) -> None:
        assert extract_response_from_task_context(None) is None
        assert extract_response_from_task_context({"task": {}}) is None

    def test_context_failure_raises(self) -> None:
        with pytest.raises(SpiteError) as exc_info:
            extract_response_from_task_context(_ctx({"error": MaleficError.MODULE_NOT_FOUND}))
        assert exc_info.value.message == "module not found"

    def test_get_output_from_task_context(self) -> None:
        assert get_output_from_task_context(_ctx({"response": {"output": "done"}})) == "done"


class TestParseTaskContext:
    def test_success_output(self) -> None:
        parsed = parse_task_context(_ctx({"error": 0, "response": {"output": "ok", "error": ""}}))
        assert parsed.output == "ok"
        assert parsed.error == ""
        assert parsed.response is not None

    def test_application_error_is_returned_not_raised(self) -> None:
        parsed = parse_task_context(_ctx({"error": 0, "response": {"output": "", "error": "file missing"}}))
        assert parsed.error == "file missing"

    def test_field_required(self) -> None:
        ctx = _ctx({"error": MaleficError.TASK_ERROR, "status": {"status": TaskStatusCode.FIELD_REQUIRED, "error": "path required"}})
        with pytest.raises(SpiteError) as exc_info:
            parse_task_context(ctx)
        assert "path required" in str(exc_info.value)
        assert exc_info.value.code == TaskStatusCode.FIELD_REQUIRED

    def test_nil_status(self) -> None:
        with pytest.raises(SpiteError, match="nil status"):
            parse_task_context(_ctx({"error": MaleficError.TASK_ERROR}))

    def test_nil_task_context(self) -> None:
        with pytest.raises(SpiteError, match="nil task context"):
            parse_task_context(None)

    def test_nil_spite_in_task_context(self) -> None:
        with pytest.raises(SpiteError, match="nil spite in task context"):
            parse_task_context({"task": {"taskId": 1}})

    def test_accepts_model_instances(self) -> None:
        ctx = TaskContext(spite=Spite(error=0, body={"case": "response", "value": {"output": "m"}}))
        assert parse_task_context(ctx).output == "m"

    def test_decoding_is_idempotent(self) -> None:
        ctx = _ctx({"error": 0, "response": {"output": "ok", "error": "warn", "kv": {"k": "v"}}})
        first = parse_task_context(ctx)
        second = parse_task_context(ctx)
        assert first == second
        assert ctx["spite"]["response"]["output"] == "ok"

    def test_null_fields_decode_as_unset(self) -> None:
        parsed = parse_task_context(_ctx({"error": None, "status": None, "response": {"output": "ok", "error": None}}))
        assert parsed.output == "ok"
        assert parsed.error == ""

    def test_malformed_spite_raises_spite_error(self) -> None:
        with pytest.raises(SpiteError, match="invalid task context") as exc_info:
            parse_task_context(_ctx({"error": "abc"}))
        assert exc_info.value.category == ErrorCategory.APPLICATION

    def test_non_object_context_raises_spite_error(self) -> None:
        with pytest.raises(SpiteError, match="invalid task context"):
            parse_task_context(["not", "a", "context"])


class TestNullCodes:
    def test_null_malefic_code_is_success(self) -> None:
        assert handle_malefic_error({"error": None}) is None

    def test_null_task_status_is_success(self) -> None:
        assert handle_task_error({"status": None, "error": None}) is None

    def test_malformed_status_raises_spite_error(self) -> None:
        with pytest.raises(SpiteError, match="invalid task status"):
            handle_task_error({"status": "bad"})
