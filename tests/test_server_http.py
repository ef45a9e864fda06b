"""Tests for the HTTP transport."""

import json
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest
from starlette.testclient import TestClient

from copilot_catalog.config import RateLimit
from copilot_catalog.server import CatalogMCPServer
from copilot_catalog.server_http import RateLimiter, create_app, normalize_origin


@pytest.fixture
def make_client(mock_config, reader):
    """Build a TestClient around a server configured with `overrides`."""
    def _make(**overrides):
        config = replace(mock_config, **overrides)
        server = CatalogMCPServer(config=config, reader=reader)
        return TestClient(create_app(server, config)), server
    return _make


def rpc(rid, method, params=None):
    message = {"jsonrpc": "2.0", "id": rid, "method": method}
    if params is not None:
        message["params"] = params
    return message


def sse_events(body: str) -> list[dict]:
    events = []
    for line in body.splitlines():
        if line.startswith("data:"):
            events.append(json.loads(line[len("data:"):].strip()))
    return events


class TestRateLimiter:
    """Test the fixed-window counter."""
    
    def test_window_resets(self):
        now = [0.0]
        limiter = RateLimiter(RateLimit(window_seconds=10, max_requests=2), clock=lambda: now[0])
        
        assert limiter.allow("a")
        assert limiter.allow("a")
        assert not limiter.allow("a")
        assert limiter.allow("b")
        
        now[0] = 10.0
        assert limiter.allow("a")
    
    def test_normalize_origin(self):
        assert normalize_origin("https://app.example.com/some/page") == "https://app.example.com"
        assert normalize_origin("null") == "null"


class TestEndpoints:
    """Test JSON-RPC over HTTP."""
    
    def test_health(self, make_client):
        client, _ = make_client()
        
        response = client.get("/health")
        
        assert response.status_code == 200
        assert "Status: Running" in response.text
        assert "Tools: 4" in response.text
    
    def test_json_response(self, make_client):
        client, _ = make_client()
        
        response = client.post("/mcp", json=rpc(1, "tools/call", {"name": "search", "arguments": {"query": "react"}}))
        
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 1
        assert body["result"]["structuredContent"]["count"] == 1
    
    def test_messages_alias(self, make_client):
        client, _ = make_client()
        
        response = client.post("/messages", json=rpc(2, "ping"))
        
        assert response.json() == {"jsonrpc": "2.0", "id": 2, "result": {}}
    
    def test_parse_error(self, make_client):
        client, _ = make_client()
        
        response = client.post("/mcp", content=b"{not json", headers={"content-type": "application/json"})
        
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32700
        assert response.json()["id"] is None
    
    def test_notification_accepted(self, make_client):
        client, _ = make_client()
        
        response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
        
        assert response.status_code == 202
        assert response.content == b""
    
    def test_unexpected_failure_is_500(self, make_client):
        client, server = make_client()
        server.dispatcher.handle = AsyncMock(side_effect=RuntimeError("boom"))
        
        response = client.post("/mcp", json=rpc(3, "ping"))
        
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to handle MCP request"}
    
    def test_streamed_tool_call(self, make_client):
        client, _ = make_client()
        
        response = client.post(
            "/mcp",
            json=rpc("st1", "tools/call", {"name": "load_skill_directory", "arguments": {"name": "webapp-testing"}}),
            headers={"accept": "text/event-stream"},
        )
        
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = sse_events(response.text)
        assert [e["event"] for e in events] == ["partial", "partial", "result", "done"]
        assert all(e["requestId"] == "st1" for e in events)
        files = json.loads(events[2]["payload"]["result"]["content"][0]["text"])["files"]
        assert len(files) == 2


class TestCancelEndpoint:
    """Test POST /mcp/cancel."""
    
    def test_invalid_json(self, make_client):
        client, _ = make_client()
        
        response = client.post("/mcp/cancel", content=b"nope")
        
        assert response.status_code == 400
    
    def test_missing_id(self, make_client):
        client, _ = make_client()
        
        response = client.post("/mcp/cancel", json={})
        
        assert response.status_code == 400
        assert response.json() == {"error": "Missing id"}
    
    def test_unknown_id(self, make_client):
        client, _ = make_client()
        
        response = client.post("/mcp/cancel", json={"id": "ghost"})
        
        assert response.status_code == 404
        assert response.json() == {"error": "Request not found or already completed"}
    
    def test_cancels_inflight_request(self, make_client):
        client, server = make_client()
        entry = server.dispatcher.inflight.register("r1")
        
        response = client.post("/mcp/cancel", json={"id": "r1"})
        
        assert response.status_code == 200
        assert response.json() == {"id": "r1", "status": "cancelled"}
        assert entry.token.cancelled
        assert client.post("/mcp/cancel", json={"id": "r1"}).status_code == 404


class TestRequestGuard:
    """Test auth, origin and rate limit checks."""
    
    def test_auth_required(self, make_client):
        client, _ = make_client(auth_token="s3cret")
        
        assert client.post("/mcp", json=rpc(1, "ping")).status_code == 401
        assert client.post("/mcp", json=rpc(1, "ping"), headers={"authorization": "Bearer wrong"}).status_code == 401
        assert client.post("/mcp/cancel", json={"id": "x"}).status_code == 401
    
    def test_bearer_and_api_key(self, make_client):
        client, _ = make_client(auth_token="s3cret")
        
        assert client.post("/mcp", json=rpc(1, "ping"), headers={"authorization": "Bearer s3cret"}).status_code == 200
        assert client.post("/mcp", json=rpc(2, "ping"), headers={"x-api-key": "s3cret"}).status_code == 200
    
    def test_health_exempt_from_auth(self, make_client):
        client, _ = make_client(auth_token="s3cret")
        
        assert client.get("/health").status_code == 200
    
    def test_origin_allow_list(self, make_client):
        client, _ = make_client(allowed_origins=["https://app.example.com"])
        
        missing = client.post("/mcp", json=rpc(1, "ping"))
        denied = client.post("/mcp", json=rpc(1, "ping"), headers={"origin": "https://evil.example.com"})
        allowed = client.post("/mcp", json=rpc(1, "ping"), headers={"origin": "https://app.example.com"})
        via_referer = client.post("/mcp", json=rpc(1, "ping"), headers={"referer": "https://app.example.com/page"})
        
        assert missing.status_code == 403
        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert via_referer.status_code == 200
    
    def test_rate_limit(self, make_client):
        client, _ = make_client(rate_limit=RateLimit(window_seconds=60, max_requests=2))
        
        statuses = [client.post("/mcp", json=rpc(i, "ping")).status_code for i in range(3)]
        
        assert statuses == [200, 200, 429]
        assert client.post("/mcp", json=rpc(4, "ping"), headers={"x-forwarded-for": "10.0.0.9"}).status_code == 200
