"""Tests for the HTTP app: health routes and the mounted MCP endpoint."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from specialists_bridge.app import create_app
from specialists_bridge.tools import SpecialistService

from helpers import FakeAssistantsApi, make_config

MCP_HEADERS = {"accept": "application/json, text/event-stream", "content-type": "application/json"}


@pytest.fixture
def service(fake_api: FakeAssistantsApi, tmp_path: Path) -> SpecialistService:
    config = make_config()
    return SpecialistService(config, client=fake_api.client(config), root=tmp_path)


@pytest.fixture
def client(service: SpecialistService):
    with TestClient(create_app(service), base_url="http://127.0.0.1:8010") as test_client:
        yield test_client


def _rpc(client: TestClient, method: str, params=None, request_id: int = 1):
    response = client.post(
        "/mcp/",
        json={"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or {}},
        headers=MCP_HEADERS,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == request_id
    return body["result"]


def test_root_and_healthz(client: TestClient) -> None:
    root = client.get("/").json()
    assert root["status"] == "ok"
    assert root["mcp"] == "/mcp/"
    assert client.get("/healthz").json()["status"] == "ok"


def test_tools_list_over_http(client: TestClient) -> None:
    result = _rpc(client, "tools/list")

    names = [tool["name"] for tool in result["tools"]]
    assert len(names) == 9
    assert "ux_consultant_review" in names
    assert "check_openai_connection" in names


def test_tools_call_over_http(client: TestClient, fake_api: FakeAssistantsApi) -> None:
    result = _rpc(client, "tools/call", {"name": "personas_and_journeys", "arguments": {"prompt": "draft personas"}})

    assert not result.get("isError")
    assert result["content"][0]["text"] == "assistant reply"
    (run,) = fake_api.calls("POST", r"/threads/[^/]+/runs")
    assert fake_api.json_body(run)["assistant_id"] == "asst_personas"


def test_tool_failure_over_http_is_a_tool_error(client: TestClient, fake_api: FakeAssistantsApi) -> None:
    fake_api.run_statuses = ["failed"]

    result = _rpc(client, "tools/call", {"name": "ui_critique", "arguments": {"prompt": "x"}})

    assert result["isError"] is True
    assert "run_failed: " in result["content"][0]["text"]


def test_app_shutdown_closes_service(fake_api: FakeAssistantsApi, service: SpecialistService) -> None:
    app = create_app(service)
    with TestClient(app, base_url="http://127.0.0.1:8010") as client:
        assert client.get("/healthz").json()["status"] == "ok"

    assert service.client.closed
    assert not service.accepting
