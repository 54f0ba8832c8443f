# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Eligibility rules. Pure computation, no I/O.

Decides whether a member owes volunteer hours in a given year:
    age outside [MIN_ELIGIBLE_AGE, MAX_ELIGIBLE_AGE)  → 0h, "age exemption"
    joined on/after July 1 of the year                → 0h, "late entry"
    otherwise                                         → STANDARD_REQUIRED_HOURS
"""

import re
from datetime import date, datetime, timezone
from typing import Optional

from clubhours.core.config import settings
from clubhours.core.logging import get_logger
from clubhours.models.domain import Member, Requirement

logger = get_logger(__name__)

AGE_EXEMPTION = "age exemption"
LATE_ENTRY = "late entry"

_PLAIN_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_calendar_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a plain ``YYYY-MM-DD`` date or a full ISO date-time
    (``2019-10-08T22:21:36.000Z``). Returns None for empty or unparseable input.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if _PLAIN_DATE.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    if "T" not in text:
        return None
    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def required_hours(member: Member, year: int) -> Requirement:
    """Return (hours owed, exemption reason) for ``member`` in ``year``."""
    birth = parse_calendar_date(member.birth_date)
    if birth is None:
        # Incomplete member data is treated as eligible.
        logger.debug("Eligibility: no usable birth date for member=%s, assuming eligible", member.id)
    else:
        age_in_year = year - birth.year
        if not settings.MIN_ELIGIBLE_AGE <= age_in_year < settings.MAX_ELIGIBLE_AGE:
            logger.debug("Eligibility: member=%s age_in_%d=%d exempt", member.id, year, age_in_year)
            return Requirement(0.0, AGE_EXEMPTION)

    joined = parse_calendar_date(member.join_date)
    if joined is not None:
        cutoff = date(year, settings.LATE_ENTRY_MONTH, settings.LATE_ENTRY_DAY)
        if joined >= cutoff:
            logger.debug("Eligibility: member=%s joined %s on/after %s, late entry",
                         member.id, joined.isoformat(), cutoff.isoformat())
            return Requirement(0.0, LATE_ENTRY)

    return Requirement(settings.STANDARD_REQUIRED_HOURS, None)
