"""
Pydantic schemas for the capture backend.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from capture_backend.enums import CaptureStatus, View


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6, max_length=128)
    full_name: Optional[str] = Field(default=None, max_length=200)


class SignInRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    display_name: str
    created_at: datetime


class SessionResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: UserResponse
    next_view: View = View.DASHBOARD


class SignOutResponse(BaseModel):
    status: Literal["ok"]


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=200)


class CaptureData(BaseModel):
    model_config = ConfigDict(extra="allow")

    location: str = ""
    date: str = ""
    time: str = ""
    temperature: str = ""
    humidity: str = ""
    windSpeed: str = ""
    waterLevel: str = ""
    waterQuality: str = ""
    observations: str = ""
    photoUrls: list[str] = Field(default_factory=list)


class CaptureResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    data: CaptureData
    status: CaptureStatus
    created_at: datetime
    updated_at: datetime


class CaptureCreatedResponse(BaseModel):
    capture: CaptureResponse
    next_view: View
    redirect_after_seconds: float


class CaptureUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[CaptureStatus] = None


class CaptureListResponse(BaseModel):
    captures: list[CaptureResponse]
    total: int
    search: str
    status: str


class DeleteResponse(BaseModel):
    status: Literal["ok"]


class LocationCount(BaseModel):
    location: str
    count: int


class AnalyticsResponse(BaseModel):
    time_range_days: int
    total_captures: int
    captures_by_status: dict[str, int]
    average_temperature: float
    average_humidity: float
    average_wind_speed: float
    average_water_level: float
    sample_counts: dict[str, int]
    water_quality_distribution: dict[str, int]
    captures_by_month: dict[str, int]
    top_locations: list[LocationCount]


class DashboardResponse(BaseModel):
    user: UserResponse
    total_captures: int
    captures_by_status: dict[str, int]
    recent: list[CaptureResponse]
