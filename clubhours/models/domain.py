# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models. Pure data structures, NO FastAPI dependency.

Summaries double as the dashboard view model; field aliases keep
the keys the existing frontend reads (``Datum``, ``Tätigkeit``, ``Stunden``,
``memberContributions``).
"""

from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class Member(BaseModel):
    """A club member as read from the Records Service."""
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    birth_date: Optional[str] = None
    family_id: Optional[str] = None
    join_date: Optional[str] = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_family(self) -> bool:
        return bool(self.family_id and self.family_id.strip())


class LinkedRecord(BaseModel):
    """Object form of a linked-record cell: ``{"id": "rec..."}``."""
    model_config = ConfigDict(extra="ignore")

    id: str


class WorkHourEntry(BaseModel):
    """One volunteer-work record, date normalized and duration in hours."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    member_id: Optional[str] = Field(default=None, exclude=True)
    date: str = Field(alias="Datum")
    description: str = Field(alias="Tätigkeit")
    duration_hours: float = Field(alias="Stunden")


class Requirement(NamedTuple):
    hours: float
    exemption_reason: Optional[str]


class PersonalSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    hours: float
    required: float
    exemption_reason: Optional[str] = Field(default=None, alias="exemptionReason")
    entries: list[WorkHourEntry] = []


class FamilyMember(BaseModel):
    id: str
    name: str
    email: str


class FamilySummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    members: list[FamilyMember]
    required: float
    completed: float
    remaining: float
    percentage: float
    member_contributions: list[PersonalSummary] = Field(
        default_factory=list, alias="memberContributions"
    )
