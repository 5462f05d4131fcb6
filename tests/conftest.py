"""Pytest hooks and fixtures."""

import os
from typing import Any

import pytest

from iomrpc.rpc.client import RpcClient
from iomrpc.rpc.services import LISTENER, OPERATOR, CapabilitySet


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "requires_server: needs a reachable operator server (skipped unless IOMRPC_TEST_SERVER is set)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip requires_server tests when no test server is configured."""
    if os.environ.get("IOMRPC_TEST_SERVER"):
        return
    skip = pytest.mark.skip(reason="Requires operator server (set IOMRPC_TEST_SERVER)")
    for item in items:
        if "requires_server" in item.keywords:
            item.add_marker(skip)


class FakeService:
    """Capability sets backed by canned responses; every call is recorded."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Any, Any]] = []
        self.responses: dict[str, Any] = {}

    def capability(self, set_name: str, methods: list[str]) -> CapabilitySet:
        return CapabilitySet(set_name, {name: self._handler(set_name, name) for name in methods})

    def calls_to(self, method: str) -> list[tuple[str, str, Any, Any]]:
        return [call for call in self.calls if call[1] == method]

    def _handler(self, set_name: str, method: str):
        async def handler(request: Any = None, options: Any = None) -> Any:
            self.calls.append((set_name, method, request, options))
            value = self.responses.get(method)
            if isinstance(value, BaseException):
                raise value
            if callable(value):
                return value(request)
            return value

        return handler


OPERATOR_TEST_METHODS = ["get_sessions", "get_basic", "submit_job", "wait_task_finish", "shared_name"]
LISTENER_TEST_METHODS = ["list_pipelines", "start_pipeline", "shared_name"]


@pytest.fixture
def fake_service() -> FakeService:
    return FakeService()


@pytest.fixture
def fake_client(fake_service: FakeService) -> RpcClient:
    return RpcClient(
        fake_service.capability(OPERATOR, OPERATOR_TEST_METHODS),
        fake_service.capability(LISTENER, LISTENER_TEST_METHODS),
        default_headers={"x-client": "iomrpc-tests"},
    )
