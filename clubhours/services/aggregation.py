# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Hour aggregation. Pure computation over already-fetched entries.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional, Sequence

from clubhours.core.logging import get_logger
from clubhours.models.domain import (
    FamilyMember,
    FamilySummary,
    Member,
    PersonalSummary,
    WorkHourEntry,
)
from clubhours.services.eligibility import required_hours

logger = get_logger(__name__)

_HUNDREDTH = Decimal("0.01")


def round2(value: float) -> float:
    """Round half-up at the hundredths place (2.675 → 2.68, not banker's rounding)."""
    return float(Decimal(str(value)).quantize(_HUNDREDTH, rounding=ROUND_HALF_UP))


def normalize_date(value: Optional[str]) -> str:
    """Strip any time-of-day / timezone suffix: ``2024-03-05T10:00:00Z`` → ``2024-03-05``."""
    if not value:
        return ""
    text = str(value).strip()
    return text.split("T", 1)[0].split(" ", 1)[0]


def entries_in_year(entries: Iterable[WorkHourEntry], year: int) -> list[WorkHourEntry]:
    prefix = f"{year:04d}-"
    return [e for e in entries if normalize_date(e.date).startswith(prefix)]


def total_hours(entries: Iterable[WorkHourEntry]) -> float:
    return round2(sum(e.duration_hours for e in entries))


def aggregate_personal(member: Member, year: int,
                       entries: Iterable[WorkHourEntry]) -> PersonalSummary:
    """Personal summary of ``member`` for ``year``; entries from other years are dropped."""
    in_year = entries_in_year(entries, year)
    requirement = required_hours(member, year)
    summary = PersonalSummary(
        id=member.id,
        name=member.name,
        hours=total_hours(in_year),
        required=requirement.hours,
        exemption_reason=requirement.exemption_reason,
        entries=in_year,
    )
    logger.debug("Aggregated member=%s year=%d entries=%d hours=%.2f required=%.2f",
                 member.id, year, len(in_year), summary.hours, summary.required)
    return summary


def aggregate_family(family_name: str, family_members: Sequence[Member], year: int,
                     entries_by_member: Mapping[str, Iterable[WorkHourEntry]]) -> FamilySummary:
    """
    Roll each member's own entries into family totals.
    Contribution order follows ``family_members``. Percentage is not clamped,
    so over-completion shows as more than 100.
    """
    contributions = [
        aggregate_personal(m, year, entries_by_member.get(m.id, ()))
        for m in family_members
    ]
    required_total = round2(sum(c.required for c in contributions))
    completed_total = round2(sum(c.hours for c in contributions))
    remaining = round2(max(required_total - completed_total, 0.0))
    if required_total == 0:
        percentage = 100.0
    else:
        percentage = round2(completed_total / required_total * 100)

    logger.debug("Family %s year=%d required=%.2f completed=%.2f remaining=%.2f pct=%.2f",
                 family_name, year, required_total, completed_total, remaining, percentage)
    return FamilySummary(
        name=family_name,
        members=[FamilyMember(id=m.id, name=m.name, email=m.email) for m in family_members],
        required=required_total,
        completed=completed_total,
        remaining=remaining,
        percentage=percentage,
        member_contributions=contributions,
    )
