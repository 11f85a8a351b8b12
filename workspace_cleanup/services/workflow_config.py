"""Workflow service settings shared by the deletion flow."""

from __future__ import annotations

import os

NON_DELETED_STATUSES: tuple[str, ...] = (
    "created",
    "queued",
    "pending",
    "running",
    "finished",
    "failed",
    "stopped",
)

DEFAULT_RELATED_RUNS_PAGE_SIZE = 1000
DEFAULT_REQUEST_TIMEOUT_SECONDS = 60.0


def _get_positive_number(key: str, default: float) -> float:
    raw = os.getenv(key)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_related_runs_page_size() -> int:
    """Page size used to fetch every non-deleted run of a workflow in one request."""
    return int(_get_positive_number("RELATED_RUNS_PAGE_SIZE", DEFAULT_RELATED_RUNS_PAGE_SIZE))


def get_request_timeout() -> float:
    return _get_positive_number("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS)
