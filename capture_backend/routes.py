"""
HTTP routes for the capture backend API.
"""

from __future__ import annotations

import time
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from capture_backend.analytics import compute_analytics
from capture_backend.auth import AuthError, AuthService, EmailTakenError
from capture_backend.config import get_settings
from capture_backend.db import CaptureRecord, DbClient, UserRecord
from capture_backend.dependencies import (
    get_auth_service,
    get_current_user,
    get_db_client,
    get_session_token,
    get_storage_client,
)
from capture_backend.entry import (
    CaptureForm,
    CaptureSubmitError,
    CaptureValidationError,
    PhotoAttachment,
    submit_capture,
)
from capture_backend.enums import STATUS_ALL, TIME_RANGES, CaptureStatus
from capture_backend.listing import filter_captures
from capture_backend.schemas import (
    AnalyticsResponse,
    CaptureCreatedResponse,
    CaptureListResponse,
    CaptureResponse,
    CaptureUpdateRequest,
    DashboardResponse,
    DeleteResponse,
    ProfileUpdateRequest,
    SessionResponse,
    SignInRequest,
    SignOutResponse,
    SignUpRequest,
    UserResponse,
)
from capture_backend.shell import summarize_dashboard
from capture_backend.storage import StorageClient

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_response(user: UserRecord) -> UserResponse:
    return UserResponse(
        id=user.user_id,
        email=user.email,
        full_name=user.full_name,
        display_name=user.display_name,
        created_at=user.created_at,
    )


def _capture_response(record: CaptureRecord) -> CaptureResponse:
    return CaptureResponse(**record.as_dict())


def _fetch_captures(db: DbClient, user: UserRecord) -> list[CaptureRecord]:
    """Load the user's captures; a failing store yields an empty list."""
    try:
        return db.list_captures(user.user_id)
    except Exception:
        logger.exception("Error fetching captures for user %s", user.user_id)
        return []


@router.post("/auth/sign-up", response_model=UserResponse, status_code=201)
def sign_up(payload: SignUpRequest, auth: AuthService = Depends(get_auth_service)):
    try:
        user = auth.sign_up(payload.email, payload.password, payload.full_name)
    except EmailTakenError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except AuthError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _user_response(user)


@router.post("/auth/sign-in", response_model=SessionResponse)
def sign_in(payload: SignInRequest, auth: AuthService = Depends(get_auth_service)):
    try:
        user, token = auth.sign_in(payload.email, payload.password)
    except AuthError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    return SessionResponse(access_token=token, user=_user_response(user))


@router.post("/auth/sign-out", response_model=SignOutResponse)
def sign_out(
    token: str = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
):
    auth.sign_out(token)
    return SignOutResponse(status="ok")


@router.get("/me", response_model=UserResponse)
def get_profile(user: UserRecord = Depends(get_current_user)):
    return _user_response(user)


@router.patch("/me", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    updated = db.update_user_profile(user.user_id, full_name=payload.full_name)
    if not updated:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _user_response(updated)


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    summary = summarize_dashboard(_fetch_captures(db, user))
    return DashboardResponse(
        user=_user_response(user),
        total_captures=summary.total_captures,
        captures_by_status=summary.captures_by_status,
        recent=[_capture_response(c) for c in summary.recent],
    )


@router.post("/captures", response_model=CaptureCreatedResponse, status_code=201)
async def create_capture(
    title: str = Form(...),
    location: str = Form(...),
    description: str = Form(""),
    date: Optional[str] = Form(None),
    time_of_day: Optional[str] = Form(None, alias="time"),
    temperature: str = Form(""),
    humidity: str = Form(""),
    wind_speed: str = Form("", alias="windSpeed"),
    water_level: str = Form("", alias="waterLevel"),
    water_quality: str = Form("", alias="waterQuality"),
    observations: str = Form(""),
    photos: Optional[list[UploadFile]] = File(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
):
    """
    Upload the attached photos, then store the capture as a draft.
    """
    settings = get_settings()
    form = CaptureForm(
        title=title,
        description=description,
        location=location,
        temperature=temperature,
        humidity=humidity,
        wind_speed=wind_speed,
        water_level=water_level,
        water_quality=water_quality,
        observations=observations,
    )
    if date is not None:
        form.date = date
    if time_of_day is not None:
        form.time = time_of_day

    attachments = []
    for upload in photos or []:
        attachments.append(
            PhotoAttachment(
                filename=upload.filename or "photo",
                content=await upload.read(),
                content_type=upload.content_type or "application/octet-stream",
            )
        )
    form.add_photos(attachments)

    try:
        submission = submit_capture(
            form,
            user.user_id,
            db,
            storage,
            cleanup_orphaned_photos=settings.cleanup_orphaned_photos,
            max_photo_bytes=settings.max_photo_bytes,
            redirect_after_seconds=settings.capture_redirect_delay_seconds,
        )
    except CaptureValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except CaptureSubmitError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    return CaptureCreatedResponse(
        capture=_capture_response(submission.record),
        next_view=submission.next_view,
        redirect_after_seconds=submission.redirect_after_seconds,
    )


@router.get("/captures", response_model=CaptureListResponse)
def list_captures(
    search: str = Query(""),
    status: str = Query(STATUS_ALL),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    allowed = {STATUS_ALL} | {s.value for s in CaptureStatus}
    if status not in allowed:
        raise HTTPException(status_code=422, detail=f"Unknown status filter: {status}")
    captures = filter_captures(_fetch_captures(db, user), search, status)
    return CaptureListResponse(
        captures=[_capture_response(c) for c in captures],
        total=len(captures),
        search=search,
        status=status,
    )


@router.get("/captures/{capture_id}", response_model=CaptureResponse)
def get_capture(
    capture_id: str,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    record = db.get_capture(user.user_id, capture_id)
    if not record:
        raise HTTPException(status_code=404, detail="Capture not found")
    return _capture_response(record)


@router.patch("/captures/{capture_id}", response_model=CaptureResponse)
def update_capture(
    capture_id: str,
    payload: CaptureUpdateRequest,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    record = db.update_capture(
        user.user_id,
        capture_id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
    )
    if not record:
        raise HTTPException(status_code=404, detail="Capture not found")
    return _capture_response(record)


@router.delete("/captures/{capture_id}", response_model=DeleteResponse)
def delete_capture(
    capture_id: str,
    confirm: bool = Query(False),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    if not confirm:
        raise HTTPException(
            status_code=400, detail="Deleting a capture requires confirm=true"
        )
    try:
        deleted = db.delete_capture(user.user_id, capture_id)
    except Exception as exc:
        logger.exception("Error deleting capture %s", capture_id)
        raise HTTPException(status_code=502, detail=str(exc))
    if not deleted:
        raise HTTPException(status_code=404, detail="Capture not found")
    return DeleteResponse(status="ok")


@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(
    time_range: int = Query(30),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    if time_range not in TIME_RANGES:
        raise HTTPException(
            status_code=422,
            detail=f"time_range must be one of {', '.join(map(str, TIME_RANGES))}",
        )
    result = compute_analytics(_fetch_captures(db, user), time_range, time.time())
    return AnalyticsResponse(**asdict(result))
