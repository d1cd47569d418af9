"""
Client-side style filtering for the capture list.
"""

from __future__ import annotations

from typing import Iterable

from capture_backend.db import CaptureRecord
from capture_backend.enums import STATUS_ALL


def matches_search(capture: CaptureRecord, search: str) -> bool:
    term = (search or "").lower()
    if not term:
        return True
    title = (capture.title or "").lower()
    location = str((capture.data or {}).get("location") or "").lower()
    return term in title or term in location


def matches_status(capture: CaptureRecord, status: str) -> bool:
    if not status or status == STATUS_ALL:
        return True
    return capture.status.value == status


def filter_captures(
    captures: Iterable[CaptureRecord], search: str = "", status: str = STATUS_ALL
) -> list[CaptureRecord]:
    """Apply the search and status filters together, keeping input order."""
    return [
        capture
        for capture in captures
        if matches_search(capture, search) and matches_status(capture, status)
    ]
