"""Configuration for the cross-reference MCP server."""

import os

# Server settings
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))  # Per client per window
RATE_LIMIT_WINDOW = 60  # Seconds
RATE_LIMIT_MAX_CLIENTS = int(os.getenv("RATE_LIMIT_MAX_CLIENTS", "10000"))  # Tracked client addresses

# Request limits
MAX_CANDIDATES = int(os.getenv("MAX_CANDIDATES", "200"))  # Candidates evaluated per request
MAX_PAYLOAD_CHARS = 500_000  # Reject oversized JSON-string payloads before parsing

# Scoring credits (fraction of rule weight earned)
REVIEW_CREDIT = 0.5  # review results and application_review rules
OPERATIONAL_MISMATCH_CREDIT = 0.8  # operational rules whose values differ
MAX_ADVISORY_NOTES = 2  # Distinct free-text notes included in a recommendation summary

# Context effects
MANDATORY_WEIGHT = 10
PRIMARY_WEIGHT_FLOOR = 9

# QC logging of recommendation snapshots
QC_TOGGLE_ENV = "XREF_QC_LOGGING"
QC_TOGGLE_TTL = float(os.getenv("QC_TOGGLE_TTL", "60"))  # Seconds to cache the logging toggle
MAX_SNAPSHOT_RECS = int(os.getenv("MAX_SNAPSHOT_RECS", "10"))  # Cap recommendations per logged snapshot


def qc_logging_enabled() -> bool:
    """Read the QC logging flag from the environment (callers cache it with a TTL)."""
    return os.getenv(QC_TOGGLE_ENV, "false").lower() in ("1", "true", "yes")
