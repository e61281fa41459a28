import re
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from billboard.core.config import settings

_EMAIL_SHAPE = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _required_text(value: str | None, label: str, max_length: int, min_length: int = 1) -> str:
    """Trim and length-check a text field, raising the user-facing message."""
    value = (value or "").strip()
    if len(value) < min_length:
        if min_length == 1:
            raise ValueError(f"{label} is required")
        raise ValueError(f"{label} must be at least {min_length} characters")
    if len(value) > max_length:
        raise ValueError(f"{label} must be less than {max_length} characters")
    return value


def _optional_text(value: str | None, label: str, max_length: int) -> str | None:
    if value is not None and len(value) > max_length:
        raise ValueError(f"{label} must be less than {max_length} characters")
    return value or None


def _state_code(value: str | None) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("State is required")
    if len(value) > 2:
        raise ValueError("State must be 2 characters (e.g., CA, NY)")
    return value.upper()


def _check_email(value: str | None) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("Email is required")
    if not re.match(_EMAIL_SHAPE, value):
        raise ValueError("Invalid email address")
    return value


def _check_compensation(value: Decimal) -> Decimal:
    if value < Decimal("0.01"):
        raise ValueError("Compensation must be at least $0.01")
    if value > settings.max_compensation_amount:
        raise ValueError(f"Compensation cannot exceed ${settings.max_compensation_amount:,}")
    return value


def _check_duration(value: int | None) -> int | None:
    limit = settings.max_campaign_duration_hours
    if value and not (0 < value <= limit):
        raise ValueError(f"Duration must be between 1 and {limit} hours")
    return value or None


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    identity_token: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    redirect_to: str


class OnboardingRequest(BaseModel):
    user_type: Literal["business", "advertiser"]
    company_name: str | None = None

    @field_validator("company_name")
    @classmethod
    def _company_length(cls, v: str | None) -> str | None:
        return _optional_text(v.strip() if v else v, "Company name", 100)

    @model_validator(mode="after")
    def _company_for_business(self) -> "OnboardingRequest":
        if self.user_type == "business" and not self.company_name:
            raise ValueError("Company name is required for business users")
        return self


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class ProfileResponse(BaseModel):
    id: int
    email: str
    full_name: str | None
    user_type: Literal["business", "advertiser"]
    company_name: str | None
    phone: str | None
    industry: str | None
    description: str | None
    address: str | None
    city: str | None
    state: str | None
    profile_picture_url: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PublicProfileResponse(BaseModel):
    id: int
    full_name: str | None
    user_type: Literal["business", "advertiser"]
    company_name: str | None
    industry: str | None
    description: str | None
    city: str | None
    state: str | None
    profile_picture_url: str | None = None

    model_config = {"from_attributes": True}


class OnboardingResponse(BaseModel):
    profile: ProfileResponse
    redirect_to: str


class AdvertiserProfileUpdate(BaseModel):
    full_name: str
    email: str
    phone: str
    city: str
    state: str

    @field_validator("full_name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _required_text(v, "Name", 100)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Phone number is required")
        return v.strip()

    @field_validator("city")
    @classmethod
    def _city(cls, v: str) -> str:
        return _required_text(v, "City", 100)

    @field_validator("state")
    @classmethod
    def _state(cls, v: str) -> str:
        return _state_code(v)


class BusinessProfileUpdate(BaseModel):
    company_name: str
    email: str
    phone: str
    industry: str
    description: str
    address: str
    city: str
    state: str

    @field_validator("company_name")
    @classmethod
    def _company(cls, v: str) -> str:
        return _required_text(v, "Company name", 100)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Phone number is required")
        return v.strip()

    @field_validator("industry")
    @classmethod
    def _industry(cls, v: str) -> str:
        return _required_text(v, "Industry", 100)

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return _required_text(v, "Description", 1000)

    @field_validator("address")
    @classmethod
    def _address(cls, v: str) -> str:
        return _required_text(v, "Address", 200)

    @field_validator("city")
    @classmethod
    def _city(cls, v: str) -> str:
        return _required_text(v, "City", 100)

    @field_validator("state")
    @classmethod
    def _state(cls, v: str) -> str:
        return _state_code(v)


class ProfilePictureResponse(BaseModel):
    url: str


# ---------------------------------------------------------------------------
# Campaign
# ---------------------------------------------------------------------------

CompensationTypeLiteral = Literal["hourly", "daily", "per_event"]
CampaignStatusLiteral = Literal["active", "paused", "closed"]


class CampaignCreate(BaseModel):
    title: str
    description: str
    compensation_amount: Decimal
    compensation_type: CompensationTypeLiteral
    location: str
    duration_hours: int | None = None
    requirements: str | None = None
    merchandise_type: str | None = Field(default=None, max_length=100)
    target_demographics: dict[str, str] | None = None
    status: CampaignStatusLiteral | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _required_text(v, "Title", 100, min_length=3)

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return _required_text(v, "Description", 2000, min_length=10)

    @field_validator("location")
    @classmethod
    def _location(cls, v: str) -> str:
        return _required_text(v, "Location", 100, min_length=3)

    @field_validator("compensation_amount")
    @classmethod
    def _compensation(cls, v: Decimal) -> Decimal:
        return _check_compensation(v)

    @field_validator("duration_hours")
    @classmethod
    def _duration(cls, v: int | None) -> int | None:
        return _check_duration(v)

    @field_validator("requirements")
    @classmethod
    def _requirements(cls, v: str | None) -> str | None:
        return _optional_text(v, "Requirements", 1000)


class CampaignUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    compensation_amount: Decimal | None = None
    compensation_type: CompensationTypeLiteral | None = None
    location: str | None = None
    duration_hours: int | None = None
    requirements: str | None = None
    merchandise_type: str | None = Field(default=None, max_length=100)
    target_demographics: dict[str, str] | None = None
    status: CampaignStatusLiteral | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        return None if v is None else _required_text(v, "Title", 100, min_length=3)

    @field_validator("description")
    @classmethod
    def _description(cls, v: str | None) -> str | None:
        return None if v is None else _required_text(v, "Description", 2000, min_length=10)

    @field_validator("location")
    @classmethod
    def _location(cls, v: str | None) -> str | None:
        return None if v is None else _required_text(v, "Location", 100, min_length=3)

    @field_validator("compensation_amount")
    @classmethod
    def _compensation(cls, v: Decimal | None) -> Decimal | None:
        return None if v is None else _check_compensation(v)

    @field_validator("duration_hours")
    @classmethod
    def _duration(cls, v: int | None) -> int | None:
        return _check_duration(v)

    @field_validator("requirements")
    @classmethod
    def _requirements(cls, v: str | None) -> str | None:
        return _optional_text(v, "Requirements", 1000)


class BusinessSummary(BaseModel):
    id: int
    company_name: str | None
    full_name: str | None

    model_config = {"from_attributes": True}


class CampaignResponse(BaseModel):
    id: int
    business_id: int
    title: str
    description: str
    compensation_amount: Decimal
    compensation_type: str
    location: str
    duration_hours: int | None
    requirements: str | None
    merchandise_type: str | None = None
    target_demographics: dict | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CampaignDetailResponse(CampaignResponse):
    business: BusinessSummary | None = None


class CampaignLimitStatus(BaseModel):
    active_campaigns: int
    total_campaigns: int
    max_active: int
    max_total: int
    can_create: bool
    remaining_active: int
    error: str | None = None


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


class ApplicationCreate(BaseModel):
    message: str | None = None

    @field_validator("message")
    @classmethod
    def _message(cls, v: str | None) -> str | None:
        return _optional_text(v, "Message", 1000)


class ApplicationTransitionRequest(BaseModel):
    action: Literal["accept", "reject"]


class ApplicationResponse(BaseModel):
    id: int
    campaign_id: int
    advertiser_id: int
    status: Literal["pending", "accepted", "rejected"]
    message: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApplicationWithApplicantResponse(ApplicationResponse):
    advertiser: PublicProfileResponse | None = None
    available_actions: list[str] = []


class ApplicationWithCampaignResponse(ApplicationResponse):
    campaign: CampaignResponse | None = None


class CampaignApplicationsResponse(BaseModel):
    campaign: CampaignResponse
    applications: list[ApplicationWithApplicantResponse]


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------


class CampaignApplicationCounts(BaseModel):
    campaign_id: int
    total: int
    pending: int
    accepted: int
    rejected: int


class BusinessStats(BaseModel):
    total_campaigns: int
    active_campaigns: int
    total_applications: int
    accepted_applications: int
    pending_applications: int
    rejected_applications: int
    acceptance_rate: int
    avg_compensation_offered: int
    avg_applications_per_campaign: float


class BusinessDashboardResponse(BaseModel):
    profile: ProfileResponse
    campaigns: list[CampaignResponse]
    application_counts: list[CampaignApplicationCounts]
    stats: BusinessStats
    limit: CampaignLimitStatus


class AdvertiserDashboardResponse(BaseModel):
    profile: ProfileResponse
    applications: list[ApplicationWithCampaignResponse]
    suggested_campaigns: list[CampaignResponse]


# ---------------------------------------------------------------------------
# Waitlist
# ---------------------------------------------------------------------------


class WaitlistSignupRequest(BaseModel):
    email: str | None = None


class WaitlistSignupResponse(BaseModel):
    id: int
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}
