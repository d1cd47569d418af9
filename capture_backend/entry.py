"""
Capture entry: form state, photo uploads and the draft insert.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from capture_backend.db import CaptureRecord, DbClient
from capture_backend.enums import CaptureStatus, View, WaterQuality
from capture_backend.storage import StorageClient

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "location", "date", "time")
WATER_QUALITY_VALUES = {quality.value for quality in WaterQuality}


class CaptureSubmitError(Exception):
    """A photo upload or the record insert failed; the message is user-facing."""


class CaptureValidationError(CaptureSubmitError):
    pass


@dataclass
class PhotoAttachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def _today() -> str:
    return datetime.now().date().isoformat()


def _current_time() -> str:
    return datetime.now().strftime("%H:%M")


@dataclass
class CaptureForm:
    title: str = ""
    description: str = ""
    location: str = ""
    date: str = field(default_factory=_today)
    time: str = field(default_factory=_current_time)
    temperature: str = ""
    humidity: str = ""
    wind_speed: str = ""
    water_level: str = ""
    water_quality: str = ""
    observations: str = ""
    photos: list[PhotoAttachment] = field(default_factory=list)

    def add_photos(self, photos: list[PhotoAttachment]) -> None:
        self.photos.extend(photos)

    def remove_photo(self, index: int) -> None:
        if not 0 <= index < len(self.photos):
            raise IndexError(f"no photo at position {index}")
        del self.photos[index]

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name).strip()]

    def validate(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise CaptureValidationError(
                f"Missing required field(s): {', '.join(missing)}"
            )
        if self.water_quality and self.water_quality not in WATER_QUALITY_VALUES:
            raise CaptureValidationError(
                f"Unknown water quality: {self.water_quality}"
            )

    def to_data(self, photo_urls: list[str]) -> dict:
        """Payload stored under the record's ``data`` key."""
        return {
            "location": self.location,
            "date": self.date,
            "time": self.time,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
            "waterLevel": self.water_level,
            "waterQuality": self.water_quality,
            "observations": self.observations,
            "photoUrls": list(photo_urls),
        }


@dataclass
class CaptureSubmission:
    record: CaptureRecord
    next_view: View = View.DATA
    redirect_after_seconds: float = 2.0


def photo_object_name(filename: str, now: float) -> str:
    return f"{int(now * 1000)}-{filename}"


def upload_photos(
    photos: list[PhotoAttachment],
    storage: StorageClient,
    *,
    clock: Callable[[], float] = time.time,
    uploaded: Optional[list[str]] = None,
) -> list[str]:
    """
    Upload photos one by one, in order, and return their public URLs.

    Names of objects that made it to storage are appended to ``uploaded`` so
    a caller can clean them up if a later step fails.
    """
    urls: list[str] = []
    for photo in photos:
        name = photo_object_name(photo.filename or "photo", clock())
        storage.upload_bytes(name, photo.content, photo.content_type)
        if uploaded is not None:
            uploaded.append(name)
        urls.append(storage.public_url(name))
    return urls


def _discard_uploads(storage: StorageClient, names: list[str]) -> None:
    for name in names:
        try:
            storage.delete(name)
        except Exception:
            logger.exception("Failed to remove orphaned photo %s", name)


def submit_capture(
    form: CaptureForm,
    user_id: str,
    db: DbClient,
    storage: StorageClient,
    *,
    clock: Callable[[], float] = time.time,
    cleanup_orphaned_photos: bool = False,
    max_photo_bytes: Optional[int] = None,
    redirect_after_seconds: float = 2.0,
) -> CaptureSubmission:
    form.validate()
    if max_photo_bytes is not None:
        for photo in form.photos:
            if len(photo.content) > max_photo_bytes:
                raise CaptureValidationError(
                    f"Photo {photo.filename} exceeds {max_photo_bytes} bytes"
                )

    uploaded: list[str] = []
    try:
        photo_urls = upload_photos(form.photos, storage, clock=clock, uploaded=uploaded)
        record = db.create_capture(
            user_id,
            form.title,
            form.description,
            form.to_data(photo_urls),
            CaptureStatus.DRAFT,
        )
    except Exception as exc:
        logger.exception("Capture submission failed for user %s", user_id)
        if cleanup_orphaned_photos and uploaded:
            _discard_uploads(storage, uploaded)
        elif uploaded:
            logger.warning("Leaving %d uploaded photo(s) without a record", len(uploaded))
        raise CaptureSubmitError(str(exc) or exc.__class__.__name__) from exc

    logger.info(
        "Stored capture %s with %d photo(s)", record.capture_id, len(photo_urls)
    )
    return CaptureSubmission(
        record=record, redirect_after_seconds=redirect_after_seconds
    )
