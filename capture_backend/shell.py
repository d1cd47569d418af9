"""
Dashboard shell: the home view summary shown after sign-in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from capture_backend.db import CaptureRecord
from capture_backend.enums import CaptureStatus

RECENT_ACTIVITY_LIMIT = 5


@dataclass
class DashboardSummary:
    total_captures: int = 0
    captures_by_status: dict[str, int] = field(default_factory=dict)
    recent: list[CaptureRecord] = field(default_factory=list)


def summarize_dashboard(
    captures: Iterable[CaptureRecord], recent_limit: int = RECENT_ACTIVITY_LIMIT
) -> DashboardSummary:
    """Expects captures newest first, as returned by the record store."""
    captures = list(captures)
    by_status = {status.value: 0 for status in CaptureStatus}
    for capture in captures:
        by_status[capture.status.value] += 1
    return DashboardSummary(
        total_captures=len(captures),
        captures_by_status=by_status,
        recent=captures[:recent_limit],
    )
