"""Tests for session-scoped calls and the sync_ convention."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from iomrpc.rpc.client import RpcClient
from iomrpc.rpc.options import CallOptions
from iomrpc.rpc.services import LISTENER, OPERATOR
from iomrpc.session.scope import SYNC_WAIT_TIMEOUT_MS, SessionScope
from iomrpc.utils.exceptions import MethodNotFoundError, RpcTransportError, SessionScopeError


@dataclass
class TaskHandle:
    task_id: int
    session_id: str


@pytest.fixture
def scope(fake_client) -> SessionScope:
    return SessionScope(fake_client, "sess-1")


class TestScopeAccessors:
    def test_reserved_accessors_are_local(self, scope, fake_service) -> None:
        assert scope.session_id == "sess-1"
        assert scope.get_session_id() == "sess-1"
        assert scope.session_info.session_id == "sess-1"
        assert fake_service.calls == []

    def test_descriptor_input_keeps_extra_metadata(self, fake_client) -> None:
        scope = SessionScope(fake_client, {"sessionId": "sess-2", "name": "web01", "os": "linux"})
        assert scope.session_id == "sess-2"
        assert scope.session_info.name == "web01"
        assert scope.session_info.model_extra == {"os": "linux"}

    def test_unknown_method_resolves_to_none(self, scope) -> None:
        assert scope.get_nothing is None
        assert scope.resolve("sync_get_nothing") is None
        assert scope.resolve("sync_") is None

    def test_private_names_raise_attribute_error(self, scope) -> None:
        with pytest.raises(AttributeError):
            scope._whatever

    def test_missing_client_raises_named_error(self) -> None:
        scope = SessionScope(None, "sess-9")
        with pytest.raises(SessionScopeError) as exc_info:
            scope.resolve("get_basic")
        assert "sess-9" in str(exc_info.value)


class TestScopedForwarding:
    @pytest.mark.asyncio
    async def test_session_header_is_pinned_over_caller_header(self, scope, fake_service) -> None:
        await scope.get_basic({}, {"headers": {"session_id": "spoofed", "session-id": "kept"}})
        sent = fake_service.calls[0][3]
        assert sent.headers["session_id"] == "sess-1"
        assert sent.headers["session-id"] == "kept"
        assert sent.headers["x-client"] == "iomrpc-tests"

    @pytest.mark.asyncio
    async def test_call_raises_for_unknown_method(self, scope) -> None:
        with pytest.raises(MethodNotFoundError):
            await scope.call("get_nothing", {})

    @pytest.mark.asyncio
    async def test_plain_call_returns_result(self, scope, fake_service) -> None:
        fake_service.responses["list_pipelines"] = {"pipelines": []}
        assert await scope.call("list_pipelines", {}) == {"pipelines": []}
        assert fake_service.calls[0][0] == LISTENER


class TestSyncConvention:
    @pytest.mark.asyncio
    async def test_no_task_id_skips_wait(self, scope, fake_service) -> None:
        handle = {"status": "accepted"}
        fake_service.responses["submit_job"] = handle
        result = await scope.sync_submit_job({"name": "x"})
        assert result is handle
        assert len(fake_service.calls) == 1
        assert fake_service.calls_to("wait_task_finish") == []

    @pytest.mark.asyncio
    async def test_task_id_triggers_exactly_one_wait(self, scope, fake_service) -> None:
        fake_service.responses["submit_job"] = {"taskId": 42}
        fake_service.responses["wait_task_finish"] = {"spite": {"error": 0}}

        result = await scope.sync_submit_job({"name": "x"})

        assert result == {"spite": {"error": 0}}
        waits = fake_service.calls_to("wait_task_finish")
        assert len(waits) == 1
        _, _, request, options = waits[0]
        assert request == {"taskId": 42, "sessionId": "sess-1"}
        assert options.headers["session_id"] == "sess-1"
        assert options.timeout_ms == SYNC_WAIT_TIMEOUT_MS

    @pytest.mark.asyncio
    async def test_task_id_zero_still_counts_as_present(self, scope, fake_service) -> None:
        fake_service.responses["submit_job"] = {"task_id": 0, "session_id": "other"}
        await scope.sync_submit_job({})
        waits = fake_service.calls_to("wait_task_finish")
        assert waits[0][2] == {"taskId": 0, "sessionId": "other"}

    @pytest.mark.asyncio
    async def test_caller_timeout_used_for_both_phases(self, scope, fake_service) -> None:
        fake_service.responses["submit_job"] = {"taskId": 1}
        await scope.call("sync_submit_job", {}, CallOptions(timeout_ms=1234))
        submit, wait = fake_service.calls
        assert submit[3].timeout_ms == 1234
        assert wait[3].timeout_ms == 1234

    @pytest.mark.asyncio
    async def test_phase_one_failure_propagates(self, scope, fake_service) -> None:
        fake_service.responses["submit_job"] = RpcTransportError("down", code="unavailable", retryable=True)
        with pytest.raises(RpcTransportError):
            await scope.sync_submit_job({})
        assert fake_service.calls_to("wait_task_finish") == []

    @pytest.mark.asyncio
    async def test_phase_two_failure_propagates(self, scope, fake_service) -> None:
        fake_service.responses["submit_job"] = {"taskId": 5}
        fake_service.responses["wait_task_finish"] = RpcTransportError("slow", code="deadline_exceeded")
        with pytest.raises(RpcTransportError) as exc_info:
            await scope.sync_submit_job({})
        assert exc_info.value.code == "deadline_exceeded"

    @pytest.mark.asyncio
    async def test_missing_wait_operation_returns_handle(self, fake_service) -> None:
        client = RpcClient(
            fake_service.capability(OPERATOR, ["submit_job"]),
            fake_service.capability(LISTENER, []),
        )
        fake_service.responses["submit_job"] = {"taskId": 3}
        result = await SessionScope(client, "sess-1").sync_submit_job({})
        assert result == {"taskId": 3}

    @pytest.mark.asyncio
    async def test_object_handle_with_task_id(self, scope, fake_service) -> None:
        fake_service.responses["submit_job"] = TaskHandle(task_id=8, session_id="from-handle")
        await scope.sync_submit_job({})
        waits = fake_service.calls_to("wait_task_finish")
        assert waits[0][2] == {"taskId": 8, "sessionId": "from-handle"}

    @pytest.mark.asyncio
    async def test_concurrent_sync_calls_are_independent(self, scope, fake_service) -> None:
        import asyncio

        fake_service.responses["submit_job"] = {"taskId": 1}
        await asyncio.gather(scope.sync_submit_job({}), scope.sync_submit_job({}))
        assert len(fake_service.calls_to("submit_job")) == 2
        assert len(fake_service.calls_to("wait_task_finish")) == 2
