# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas."""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clubhours.models.domain import FamilySummary, PersonalSummary


# ── Auth ────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class SelectMemberRequest(BaseModel):
    member_id: str = Field(..., min_length=1)
    selection_token: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    id: Optional[str] = None


class UserOut(BaseModel):
    id: str
    name: str
    email: str


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: UserOut


class MemberSelectionResponse(BaseModel):
    success: bool = True
    multiple: bool = True
    users: List[UserOut]
    selection_token: str
    message: str


# ── Work hours ──────────────────────────────────────────────────────────

class WorkHourSubmission(BaseModel):
    """
    Raw submission as the frontend sends it. Fields stay loosely typed so
    the validator, not pydantic, decides which rule a bad value breaks.
    """
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[Any] = Field(None, alias="Datum")
    description: Optional[Any] = Field(None, alias="Tätigkeit")
    hours: Optional[Any] = Field(None, alias="Stunden")


class WorkHourData(BaseModel):
    id: str
    user: str
    date: str
    description: str
    hours: float
    duration_hours: float


class WorkHourCommandResponse(BaseModel):
    success: bool = True
    message: str
    data: WorkHourData


# ── Dashboard ───────────────────────────────────────────────────────────

class DashboardResponse(BaseModel):
    success: bool = True
    personal: PersonalSummary
    family: Optional[FamilySummary] = None
    year: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
