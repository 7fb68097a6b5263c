"""Test helpers: config factory and a scripted fake of the Assistants API."""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from assistants_client.config.settings import ASSISTANT_ENV_BY_TOOL, BridgeConfig
from assistants_client.remote.api_client import AssistantsApiClient

BASE_URL = "https://api.test/v1"


def make_config(**overrides: Any) -> BridgeConfig:
    values: Dict[str, Any] = {
        "api_key": "sk-test",
        "base_url": BASE_URL,
        "poll_timeout_ms": 50,
        "poll_interval_ms": 1,
        "max_retries": 3,
        "max_cache_size": 100,
        "retry_initial_delay_ms": 0,
        "retry_max_delay_ms": 0,
        "assistant_ids": {key: f"asst_{key.rsplit('_', 1)[-1].lower()}" for key in ASSISTANT_ENV_BY_TOOL.values()},
    }
    values.update(overrides)
    return BridgeConfig(**values)


class FakeAssistantsApi:
    """In-memory stand-in for the remote service, served via httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.run_statuses: List[str] = ["completed"]
        self.run_last_error: Optional[Dict[str, Any]] = None
        self.reply_text = "assistant reply"
        self.reply_content: Optional[List[Dict[str, Any]]] = None
        self.attach_status = 200
        self.models_status = 200
        # (method, path) -> status codes returned before the normal response
        self.failures: Dict[Tuple[str, str], List[int]] = {}
        # (method, path regex) -> number of requests that must be in flight together
        self.concurrency_gates: Dict[Tuple[str, str], int] = {}
        self.gate_timeout_s = 2.0
        self._gate_arrivals: Dict[Tuple[str, str], int] = {}
        self._gate_events: Dict[Tuple[str, str], asyncio.Event] = {}
        self._ids: Dict[str, int] = {}
        self._run_polls = 0

    def _next_id(self, prefix: str) -> str:
        self._ids[prefix] = self._ids.get(prefix, 0) + 1
        return f"{prefix}_{self._ids[prefix]}"

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.dispatch)

    def client(self, config: Optional[BridgeConfig] = None) -> AssistantsApiClient:
        return AssistantsApiClient(config or make_config(), transport=self.transport)

    def calls(self, method: str, pattern: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and re.fullmatch(pattern, self._path(r))
        ]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/v1"):] if path.startswith("/v1") else path

    @staticmethod
    def json_body(request: httpx.Request) -> Any:
        return json.loads(request.content)

    async def _wait_at_gate(self, gate: Tuple[str, str], needed: int) -> None:
        event = self._gate_events.setdefault(gate, asyncio.Event())
        self._gate_arrivals[gate] = self._gate_arrivals.get(gate, 0) + 1
        if self._gate_arrivals[gate] >= needed:
            event.set()
        # a caller that sends these requests one at a time never opens the gate
        await asyncio.wait_for(event.wait(), timeout=self.gate_timeout_s)

    async def dispatch(self, request: httpx.Request) -> httpx.Response:
        for (method, pattern), needed in self.concurrency_gates.items():
            if request.method == method and re.fullmatch(pattern, self._path(request)):
                await self._wait_at_gate((method, pattern), needed)
        return self.handler(request)

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        method, path = request.method, self._path(request)

        pending = self.failures.get((method, path))
        if pending:
            status = pending.pop(0)
            return httpx.Response(status, json={"error": {"message": f"scripted {status}"}})

        if method == "POST" and path == "/threads":
            return httpx.Response(200, json={"id": self._next_id("thread"), "object": "thread"})

        m = re.fullmatch(r"/threads/([^/]+)/messages", path)
        if m and method == "POST":
            return httpx.Response(200, json={"id": self._next_id("msg"), "thread_id": m.group(1)})
        if m and method == "GET":
            content = self.reply_content
            if content is None:
                content = [{"type": "text", "text": {"value": self.reply_text, "annotations": []}}]
            return httpx.Response(200, json={
                "object": "list",
                "data": [{"id": "msg_reply", "role": "assistant", "content": content}],
                "has_more": False,
            })

        m = re.fullmatch(r"/threads/([^/]+)/runs", path)
        if m and method == "POST":
            body = self.json_body(request)
            return httpx.Response(200, json={
                "id": "run_1",
                "thread_id": m.group(1),
                "assistant_id": body["assistant_id"],
                "status": "queued",
            })

        m = re.fullmatch(r"/threads/([^/]+)/runs/([^/]+)", path)
        if m and method == "GET":
            status = self.run_statuses[min(self._run_polls, len(self.run_statuses) - 1)]
            self._run_polls += 1
            payload: Dict[str, Any] = {"id": m.group(2), "thread_id": m.group(1), "status": status}
            if status == "failed" and self.run_last_error:
                payload["last_error"] = self.run_last_error
            if status == "completed":
                payload["usage"] = {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
            return httpx.Response(200, json=payload)

        if method == "POST" and path == "/vector_stores":
            body = self.json_body(request)
            return httpx.Response(200, json={"id": self._next_id("vs"), "name": body.get("name")})

        m = re.fullmatch(r"/vector_stores/([^/]+)/files", path)
        if m and method == "POST":
            if self.attach_status != 200:
                return httpx.Response(self.attach_status, json={"error": {"message": "attach failed"}})
            body = self.json_body(request)
            return httpx.Response(200, json={"id": body["file_id"], "vector_store_id": m.group(1)})

        if method == "POST" and path == "/files":
            purpose = "vision" if b'name="purpose"\r\n\r\nvision' in request.content else "assistants"
            return httpx.Response(200, json={"id": self._next_id(f"file-{purpose}"), "purpose": purpose})

        if method == "GET" and path == "/models":
            if self.models_status != 200:
                return httpx.Response(self.models_status, json={"error": {"message": "unauthorized"}})
            return httpx.Response(200, json={"object": "list", "data": []})

        return httpx.Response(404, json={"error": {"message": f"no route for {method} {path}"}})

