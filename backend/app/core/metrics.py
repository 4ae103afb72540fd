"""Prometheus counters for the share flow."""
import logging

from prometheus_client import REGISTRY, Counter

logger = logging.getLogger(__name__)

TRACK_FAILURE_REASONS = ("bad_token", "unknown_link", "persistence", "unexpected")


def _build_counter(name: str, documentation: str, labelnames):
    try:
        return Counter(name, documentation, labelnames)
    except ValueError:
        # already registered (module reloaded under test runners)
        logger.debug("Counter %s already registered; reusing it.", name)
        return REGISTRY._names_to_collectors[name]


TRACK_VIEW_FAILURES = _build_counter(
    "share_track_view_failures",
    "Anonymous share view tracking attempts that were dropped, by reason.",
    ("reason",),
)


def record_track_failure(reason: str) -> None:
    TRACK_VIEW_FAILURES.labels(reason=reason).inc()
