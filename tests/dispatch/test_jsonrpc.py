"""Tests for JSON-RPC envelope parsing."""

import pytest

from copilot_catalog.dispatch import (
    INVALID_REQUEST,
    JsonRpcError,
    error_response,
    parse_request,
    success_response,
)
from copilot_catalog.dispatch.jsonrpc import request_id_of


class TestParseRequest:
    """Test envelope validation."""
    
    def test_valid_request(self):
        request = parse_request({"jsonrpc": "2.0", "id": 1, "method": "ping"})
        
        assert request.method == "ping"
        assert request.params == {}
        assert request.id == 1
        assert not request.is_notification
    
    def test_notification(self):
        request = parse_request({"jsonrpc": "2.0", "method": "notifications/initialized"})
        
        assert request.is_notification
    
    @pytest.mark.parametrize("message", [
        [],
        {"method": "ping", "id": 1},
        {"jsonrpc": "1.0", "method": "ping", "id": 1},
        {"jsonrpc": "2.0", "id": 1},
        {"jsonrpc": "2.0", "method": "", "id": 1},
        {"jsonrpc": "2.0", "method": "ping", "params": [1], "id": 1},
        {"jsonrpc": "2.0", "method": "ping", "id": True},
        {"jsonrpc": "2.0", "method": "ping", "id": 1.5},
    ])
    def test_invalid_envelopes(self, message):
        with pytest.raises(JsonRpcError) as exc:
            parse_request(message)
        assert exc.value.code == INVALID_REQUEST


class TestResponses:
    """Test response builders."""
    
    def test_success_response(self):
        assert success_response("a", {"ok": True}) == {"jsonrpc": "2.0", "id": "a", "result": {"ok": True}}
    
    def test_error_response_with_data(self):
        response = error_response(3, -32603, "Internal error", "boom")
        
        assert response["error"] == {"code": -32603, "message": "Internal error", "data": "boom"}
    
    def test_error_response_without_data(self):
        assert "data" not in error_response(None, -32601, "Method not found")["error"]
    
    def test_request_id_of(self):
        assert request_id_of({"id": "x"}) == "x"
        assert request_id_of({"id": False}) is None
        assert request_id_of("not a dict") is None
