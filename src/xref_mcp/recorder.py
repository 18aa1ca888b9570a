"""Recommendation snapshot recording for quality review.

The engine never decides whether to record. Callers inject a recorder; the
response builder hands it one snapshot per request and ignores anything the
recorder raises.
"""

import logging
import time
from typing import Any, Callable, Protocol

from .config import MAX_SNAPSHOT_RECS, QC_TOGGLE_TTL, qc_logging_enabled

logger = logging.getLogger(__name__)


class RecommendationRecorder(Protocol):
    def record(self, snapshot: dict[str, Any]) -> None: ...


class NullRecorder:
    """Records nothing."""

    def record(self, snapshot: dict[str, Any]) -> None:
        return None


class CachedToggle:
    """Cache a boolean check for ``ttl`` seconds.

    Used to avoid re-reading a feature flag on every request. The wrapped
    callable is only invoked when the cached value has expired.
    """

    def __init__(self, check: Callable[[], bool], ttl: float = QC_TOGGLE_TTL):
        self._check = check
        self._ttl = ttl
        self._value: bool | None = None
        self._fetched_at = 0.0

    def __call__(self) -> bool:
        now = time.time()
        if self._value is None or now - self._fetched_at >= self._ttl:
            self._value = bool(self._check())
            self._fetched_at = now
        return self._value

    def invalidate(self) -> None:
        self._value = None


def cap_snapshot(snapshot: dict[str, Any], max_recs: int = MAX_SNAPSHOT_RECS) -> dict[str, Any]:
    """Copy of the snapshot with at most ``max_recs`` recommendations."""
    recs = snapshot.get("recommendations") or []
    if len(recs) <= max_recs:
        return snapshot
    capped = dict(snapshot)
    capped["recommendations"] = recs[:max_recs]
    capped["recommendation_count"] = len(recs)
    return capped


class LoggingRecorder:
    """Emit one structured log record per snapshot while ``enabled()`` is true."""

    def __init__(
        self,
        enabled: Callable[[], bool],
        max_recs: int = MAX_SNAPSHOT_RECS,
        log: logging.Logger | None = None,
    ):
        self._enabled = enabled
        self._max_recs = max_recs
        self._log = log or logger

    def record(self, snapshot: dict[str, Any]) -> None:
        if not self._enabled():
            return
        capped = cap_snapshot(snapshot, self._max_recs)
        source_mpn = (capped.get("source") or {}).get("mpn", "?")
        self._log.info(
            f"Recommendation snapshot for {source_mpn}: "
            f"{len(capped.get('recommendations') or [])} recs, family {capped.get('family_id')}",
            extra={"snapshot": capped},
        )


def default_recorder() -> RecommendationRecorder:
    """Recorder driven by the XREF_QC_LOGGING setting."""
    return LoggingRecorder(CachedToggle(qc_logging_enabled))


def safe_record(recorder: RecommendationRecorder, snapshot: dict[str, Any]) -> None:
    """Hand a snapshot to the recorder. Failures are logged, never raised."""
    try:
        recorder.record(snapshot)
    except Exception as e:
        logger.warning(f"Recommendation recorder failed: {type(e).__name__}: {e}")
