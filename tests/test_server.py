"""Tests for the MCP server surface: tools, input parsing, rate limiting and health."""

import json

import pytest
from fastmcp import Client
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from xref_mcp import __version__
from xref_mcp.server import (
    app,
    RateLimitMiddleware,
    _HealthFilterLog,
    _parse_answers,
    _parse_json_param,
    mcp,
)


def _resistor(mpn: str, **overrides) -> dict:
    values = {
        "resistance": "10kΩ",
        "package_case": "0603",
        "tolerance": "±1%",
        "power_rating": "0.1W",
    }
    values.update(overrides)
    return {
        "part": {"mpn": mpn, "manufacturer": "Test", "subcategory": "Chip Resistor"},
        "parameters": [{"parameter_id": k, "value": v} for k, v in values.items()],
    }


async def _call(tool: str, args: dict) -> dict:
    async with Client(mcp) as client:
        result = await client.call_tool(tool, args)
    return result.structured_content


# --- Input parsing ---

class TestParseJsonParam:
    """Tests for _parse_json_param and _parse_answers."""

    def test_passthrough(self):
        value = {"a": 1}
        assert _parse_json_param(value, "x") is value

    def test_json_string(self):
        assert _parse_json_param('[{"a": 1}]', "x") == [{"a": 1}]

    def test_invalid_json(self):
        with pytest.raises(ValueError, match="not valid JSON"):
            _parse_json_param("{oops", "source")

    def test_too_large(self, monkeypatch):
        import xref_mcp.server as srv
        monkeypatch.setattr(srv, "MAX_PAYLOAD_CHARS", 10)
        with pytest.raises(ValueError, match="too large"):
            _parse_json_param('{"a": "' + "x" * 20 + '"}', "source")

    def test_answers(self):
        assert _parse_answers('{"environment": "automotive"}') == {"environment": "automotive"}
        assert _parse_answers(None) == {}

    def test_answers_must_be_object(self):
        with pytest.raises(ValueError):
            _parse_answers('["automotive"]')


# --- Tools ---

class TestTools:
    """Tool calls through an in-memory MCP client."""

    @pytest.mark.asyncio
    async def test_list_families(self):
        result = await _call("list_families", {})
        ids = {f["family_id"] for f in result["families"]}
        assert {"52", "53", "54", "70"} <= ids
        assert result["subcategories"]["Ferrite Bead"] == "70"

    @pytest.mark.asyncio
    async def test_get_logic_table(self):
        result = await _call("get_logic_table", {"family_id": "70"})
        assert result["family_name"] == "Ferrite Beads (Surface Mount)"
        assert result["rules"][0]["logic_type"] == "identity"

    @pytest.mark.asyncio
    async def test_get_logic_table_unknown(self):
        result = await _call("get_logic_table", {"family_id": "999"})
        assert "error" in result
        assert "hint" in result

    @pytest.mark.asyncio
    async def test_get_context_questions(self):
        result = await _call("get_context_questions", {"family_id": "52"})
        assert [q["question_id"] for q in result["questions"]] == ["precision", "environment"]

    @pytest.mark.asyncio
    async def test_detect_missing_attributes(self):
        result = await _call("detect_missing_attributes", {"part": _resistor("SRC")})
        assert result["family_id"] == "52"
        missing = [m["attribute_id"] for m in result["missing"]]
        assert "resistance" not in missing
        assert "voltage_rated" in missing

    @pytest.mark.asyncio
    async def test_find_replacements(self):
        result = await _call("find_replacements", {
            "source": _resistor("SRC"),
            "candidates": [_resistor("BAD", package_case="0805"), _resistor("GOOD")],
        })
        assert [r["part"]["mpn"] for r in result["recommendations"]] == ["GOOD", "BAD"]

    @pytest.mark.asyncio
    async def test_find_replacements_json_strings(self):
        result = await _call("find_replacements", {
            "source": json.dumps(_resistor("SRC")),
            "candidates": json.dumps([_resistor("GOOD")]),
            "answers": json.dumps({"precision": "yes"}),
        })
        assert result["summary"]["found"] == 1
        assert set(result["context_applied"]["changed_attributes"]) == {"tolerance", "tcr", "composition"}

    @pytest.mark.asyncio
    async def test_find_replacements_invalid_part(self):
        result = await _call("find_replacements", {
            "source": {"parameters": []},
            "candidates": [],
        })
        assert result["error"].startswith("Invalid input")
        assert "hint" in result

    @pytest.mark.asyncio
    async def test_apply_context(self):
        result = await _call("apply_context", {"family_id": "70", "answers": {"signal_or_power": "power"}})
        weights = {r["attribute_id"]: r["weight"] for r in result["rules"]}
        assert weights["rated_current"] == 9
        assert weights["dcr"] == 9
        assert weights["signal_integrity"] == 0


# --- HTTP ---

class TestRateLimitMiddleware:
    """Tests for per-client rate limiting."""

    def test_budget_per_client(self):
        limiter = RateLimitMiddleware(None, requests_per_minute=2)
        assert limiter.allow("1.2.3.4", now=100.0) is True
        assert limiter.allow("1.2.3.4", now=101.0) is True
        assert limiter.allow("1.2.3.4", now=102.0) is False
        assert limiter.allow("5.6.7.8", now=102.0) is True

    def test_window_slides(self):
        limiter = RateLimitMiddleware(None, requests_per_minute=1, window=60)
        assert limiter.allow("a", now=0.0) is True
        assert limiter.allow("a", now=59.0) is False
        assert limiter.allow("a", now=60.5) is True

    def test_full_table_refuses_new_clients(self):
        limiter = RateLimitMiddleware(None, max_clients=1)
        assert limiter.allow("a", now=0.0) is True
        assert limiter.allow("b", now=1.0) is False
        # Once "a" has expired its slot is reclaimed
        assert limiter.allow("b", now=61.0) is True

    def test_returns_429(self):
        async def ping(request):
            return JSONResponse({"ok": True})

        ping_app = Starlette(
            routes=[Route("/ping", ping)],
            middleware=[Middleware(RateLimitMiddleware, requests_per_minute=1)],
        )
        client = TestClient(ping_app)
        assert client.get("/ping").status_code == 200
        resp = client.get("/ping")
        assert resp.status_code == 429
        assert resp.headers["retry-after"] == "60"
        assert resp.json()["error"] == "Rate limit exceeded"
        assert "hint" in resp.json()

    def test_rightmost_forwarded_hop(self):
        class FakeRequest:
            headers = {"x-forwarded-for": "10.0.0.1, 203.0.113.9"}
            client = None

        assert RateLimitMiddleware.client_key(FakeRequest()) == "203.0.113.9"

    def test_no_client_info(self):
        class FakeRequest:
            headers = {}
            client = None

        assert RateLimitMiddleware.client_key(FakeRequest()) == "unknown"


class TestHealth:
    """Tests for the /health route."""

    def test_health(self):
        client = TestClient(app)
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["version"] == __version__

    def test_health_filter(self):
        import logging
        log_filter = _HealthFilterLog()
        health = logging.LogRecord("uvicorn.access", logging.INFO, "", 0, '"GET /health HTTP/1.1" 200', None, None)
        other = logging.LogRecord("uvicorn.access", logging.INFO, "", 0, '"POST /mcp HTTP/1.1" 200', None, None)
        assert log_filter.filter(health) is False
        assert log_filter.filter(other) is True
