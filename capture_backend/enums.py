"""
Shared enumerations for capture records.
"""

from __future__ import annotations

from enum import Enum


class CaptureStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class WaterQuality(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    VERY_POOR = "very-poor"


class View(str, Enum):
    """Views of the dashboard shell a client can be sent to."""

    DASHBOARD = "dashboard"
    CAPTURE = "capture"
    DATA = "data"
    ANALYTICS = "analytics"
    PROFILE = "profile"


STATUS_ALL = "all"
TIME_RANGES = (7, 30, 90, 365)
