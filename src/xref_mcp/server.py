"""Cross-reference MCP Server - Rank replacement candidates for electronic components."""

import json
import logging
import time
from collections import deque
from typing import Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__
from .catalog import (
    SUBCATEGORY_TO_FAMILY,
    get_all_logic_tables,
    get_context_questions_for_family,
)
from .catalog import get_logic_table as lookup_logic_table
from .config import (
    HTTP_PORT,
    MAX_PAYLOAD_CHARS,
    RATE_LIMIT_MAX_CLIENTS,
    RATE_LIMIT_REQUESTS,
    RATE_LIMIT_WINDOW,
)
from .matching import apply_context_to_logic_table
from .matching import detect_missing_attributes as detect_missing
from .models import ApplicationContext, PartAttributes
from .recorder import default_recorder
from .xref import build_replacement_response, resolve_family_id

logger = logging.getLogger(__name__)

# Global state
_recorder = default_recorder()


# Create MCP server
mcp = FastMCP(
    name="xref",
    instructions="Electronic component cross-reference. No auth required. Start with list_families, then get_context_questions for the family to learn which answers change the rules. find_replacements ranks caller-supplied candidates against a source part; it does not look parts up.",
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window request limit per client address. /health is exempt.

    At most ``max_clients`` addresses are tracked. When the table is full and
    nothing has expired, requests from new addresses are refused.
    """

    def __init__(
        self,
        app,
        requests_per_minute: int = RATE_LIMIT_REQUESTS,
        window: float = RATE_LIMIT_WINDOW,
        max_clients: int = RATE_LIMIT_MAX_CLIENTS,
    ):
        super().__init__(app)
        self.limit = requests_per_minute
        self.window = window
        self.max_clients = max_clients
        self._hits: dict[str, deque[float]] = {}

    @staticmethod
    def client_key(request) -> str:
        # Our proxy appends the real peer as the last X-Forwarded-For hop
        hops = [h.strip() for h in request.headers.get("x-forwarded-for", "").split(",") if h.strip()]
        if hops:
            return hops[-1]
        return request.client.host if request.client else "unknown"

    def _evict_expired(self, cutoff: float) -> None:
        expired = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in expired:
            del self._hits[key]

    def allow(self, key: str, now: float | None = None) -> bool:
        """Count one request for ``key``. False once the window budget is spent."""
        now = time.time() if now is None else now
        cutoff = now - self.window

        hits = self._hits.get(key)
        if hits is None:
            if len(self._hits) >= self.max_clients:
                self._evict_expired(cutoff)
                if len(self._hits) >= self.max_clients:
                    logger.warning(f"Rate limiter full ({self.max_clients} clients), refusing {key}")
                    return False
            hits = self._hits[key] = deque()

        while hits and hits[0] <= cutoff:
            hits.popleft()
        if len(hits) >= self.limit:
            return False
        hits.append(now)
        return True

    async def dispatch(self, request, call_next):
        if request.url.path == "/health" or self.allow(self.client_key(request)):
            return await call_next(request)
        retry_after = str(int(self.window))
        return JSONResponse(
            status_code=429,
            content={
                "error": "Rate limit exceeded",
                "hint": f"At most {self.limit} requests per {retry_after}s per client",
            },
            headers={"Retry-After": retry_after},
        )


# Helpers to handle JSON-string payloads from MCP clients
def _parse_json_param(value: Any, name: str) -> Any:
    """Accept a dict/list parameter, or the JSON string some MCP clients send instead.

    Raises ValueError for oversized or unparseable strings.
    """
    if not isinstance(value, str):
        return value
    if len(value) > MAX_PAYLOAD_CHARS:
        raise ValueError(f"{name} too large (max {MAX_PAYLOAD_CHARS} characters)")
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        logger.debug(f"Failed to parse {name} as JSON: {value[:100]!r}")
        raise ValueError(f"{name} is not valid JSON") from None


def _parse_part(value: Any, name: str) -> PartAttributes:
    return PartAttributes.from_dict(_parse_json_param(value, name))


def _parse_answers(value: Any) -> dict[str, str]:
    answers = _parse_json_param(value, "answers")
    if answers is None:
        return {}
    if not isinstance(answers, dict):
        raise ValueError("answers must be an object mapping question_id to option value")
    return {str(k): str(v) for k, v in answers.items()}


def _invalid_input(e: ValueError, hint: str) -> dict[str, Any]:
    return {"error": f"Invalid input: {e}", "hint": hint}


_PART_HINT = 'Expected {"part": {"mpn": ...}, "parameters": [{"parameter_id": ..., "value": ...}]}'


# Tools

@mcp.tool(
    annotations=ToolAnnotations(
        title="List Supported Families",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def list_families() -> dict:
    """List component families with a logic table.

    Returns:
        families: family_id, family_name, category, rule count and whether
            context questions exist
        subcategories: supplier subcategory name -> base family_id
    """
    families = [
        {
            "family_id": table.family_id,
            "family_name": table.family_name,
            "category": table.category,
            "rule_count": len(table.rules),
            "has_context_questions": get_context_questions_for_family(table.family_id) is not None,
        }
        for table in get_all_logic_tables()
    ]
    return {"families": families, "subcategories": dict(SUBCATEGORY_TO_FAMILY)}


@mcp.tool(
    annotations=ToolAnnotations(
        title="Get Logic Table",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def get_logic_table(family_id: str) -> dict:
    """Get the weighted matching rules for a family.

    Args:
        family_id: Family id from list_families (e.g., "52" for chip resistors)

    Returns:
        Logic table with rules in evaluation order. Each rule has logic_type
        (identity, identity_upgrade, identity_flag, threshold, fit,
        application_review, operational), weight 0-10 and an engineering reason.
    """
    table = lookup_logic_table(family_id)
    if table is None:
        return {"error": f"Family not found: '{family_id}'", "hint": "Use list_families() to see supported families"}
    return table.to_dict()


@mcp.tool(
    annotations=ToolAnnotations(
        title="Get Context Questions",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def get_context_questions(family_id: str) -> dict:
    """Get the application-context questions for a family.

    Answers are passed to find_replacements or apply_context as
    {question_id: option value}. Each option lists the rule changes it causes.

    Args:
        family_id: Family id from list_families
    """
    config = get_context_questions_for_family(family_id)
    if config is None:
        return {
            "error": f"No context questions for family '{family_id}'",
            "hint": "Families without questions are matched with their base rules",
        }
    return config.to_dict()


@mcp.tool(
    annotations=ToolAnnotations(
        title="Detect Missing Attributes",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def detect_missing_attributes(
    part: dict[str, Any] | str,
    family_id: str | None = None,
) -> dict:
    """List rules the part has no data for, most important first.

    Review-only and operational rules are never reported.

    Args:
        part: Part attributes: {"part": {"mpn", "subcategory", ...}, "parameters": [...]}
        family_id: Family id. Resolved from the part's subcategory when omitted
    """
    try:
        attrs = _parse_part(part, "part")
    except ValueError as e:
        return _invalid_input(e, _PART_HINT)

    resolved_id = resolve_family_id(attrs, family_id)
    table = lookup_logic_table(resolved_id) if resolved_id else None
    if table is None:
        return {
            "error": f"No logic table for {attrs.part.mpn}",
            "hint": "Pass family_id explicitly, or use list_families() to see supported families",
        }

    missing = detect_missing(attrs, table)
    return {
        "mpn": attrs.part.mpn,
        "family_id": table.family_id,
        "missing": [m.to_dict() for m in missing],
    }


@mcp.tool(
    annotations=ToolAnnotations(
        title="Find Replacements",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def find_replacements(
    source: dict[str, Any] | str,
    candidates: list[dict[str, Any]] | str,
    family_id: str | None = None,
    answers: dict[str, str] | str | None = None,
) -> dict:
    """Score and rank candidate parts as replacements for a source part.

    Candidates that fail any hard rule are ranked after every passing one,
    whatever their match percentage.

    Args:
        source: Source part attributes: {"part": {...}, "parameters": [...]}
        candidates: List of candidate part attributes in the same shape
        family_id: Family id. Resolved from the source subcategory when omitted
        answers: Optional context answers {question_id: option value}

    Returns:
        Ranked recommendations with per-attribute match details, a summary and
        the source's missing attributes.
    """
    try:
        source_attrs = _parse_part(source, "source")
        raw_candidates = _parse_json_param(candidates, "candidates")
        if not isinstance(raw_candidates, list):
            raise ValueError("candidates must be a list")
        candidate_attrs = [PartAttributes.from_dict(c) for c in raw_candidates]
        parsed_answers = _parse_answers(answers)
    except ValueError as e:
        return _invalid_input(e, _PART_HINT)

    return build_replacement_response(
        source_attrs,
        candidate_attrs,
        family_id=family_id,
        answers=parsed_answers,
        recorder=_recorder,
    )


@mcp.tool(
    annotations=ToolAnnotations(
        title="Apply Application Context",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def apply_context(family_id: str, answers: dict[str, str] | str) -> dict:
    """Preview a family's logic table after applying context answers.

    Args:
        family_id: Family id from list_families
        answers: {question_id: option value}. Unknown questions and free-text
            answers have no effect

    Returns:
        The adjusted logic table.
    """
    table = lookup_logic_table(family_id)
    if table is None:
        return {"error": f"Family not found: '{family_id}'", "hint": "Use list_families() to see supported families"}
    config = get_context_questions_for_family(family_id)
    if config is None:
        return {
            "error": f"No context questions for family '{family_id}'",
            "hint": "Families without questions are matched with their base rules",
        }
    try:
        parsed_answers = _parse_answers(answers)
    except ValueError as e:
        return _invalid_input(e, 'Expected {"question_id": "option value"}')

    context = ApplicationContext(family_id=family_id, answers=parsed_answers)
    return apply_context_to_logic_table(table, context, config).to_dict()


# Health check endpoint
async def health(request):
    return JSONResponse({
        "status": "healthy",
        "service": "xref-mcp",
        "version": __version__,
        "families": len(get_all_logic_tables()),
    })


# Create ASGI app
def create_app():
    """Create the ASGI application."""
    middleware = [
        Middleware(RateLimitMiddleware, requests_per_minute=RATE_LIMIT_REQUESTS),
    ]

    # stateless_http=True: MCP clients don't reliably forward session cookies
    app = mcp.http_app(
        path="/mcp",
        middleware=middleware,
        transport="streamable-http",
        stateless_http=True,
    )

    app.routes.append(Route("/health", health))

    return app


app = create_app()


class _HealthFilterLog(logging.Filter):
    """Suppress noisy /health access logs from container healthchecks."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return "/health" not in msg


def main():
    """Run the server."""
    import uvicorn

    logging.getLogger("uvicorn.access").addFilter(_HealthFilterLog())

    uvicorn.run(
        "xref_mcp.server:app",
        host="0.0.0.0",
        port=HTTP_PORT,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
