# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Work-hour submission validation.

Checks run in a fixed order and stop at the first failure:
    date format → description → hours → year window → one entry per member and day
Only the last check needs I/O; it goes through an injected entry lookup.
"""

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Iterable, Optional

from clubhours.core.exceptions import ValidationCode, WorkHourValidationError
from clubhours.core.logging import get_logger
from clubhours.metrics import VALIDATION_REJECTIONS
from clubhours.models.domain import WorkHourEntry
from clubhours.services.aggregation import normalize_date

logger = get_logger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MSG_BAD_DATE = "Ungültiges Datumsformat. Bitte verwenden Sie YYYY-MM-DD."
MSG_MISSING_DESCRIPTION = "Bitte geben Sie eine Tätigkeit an."
MSG_INVALID_HOURS = "Die Stundenanzahl muss eine positive Zahl sein."
MSG_YEAR_GRACE = ("Arbeitsstunden können nur für {current} oder {previous} "
                  "(Nachfrist bis Ende Januar) eingetragen werden.")
MSG_YEAR_STRICT = "Arbeitsstunden können nur für das aktuelle Jahr {current} eingetragen werden."
MSG_DUPLICATE = ("Für dieses Datum existiert bereits ein Eintrag. "
                 "Pro Person und Tag ist nur ein Eintrag erlaubt.")

EntryLookup = Callable[[str, str], Awaitable[list[WorkHourEntry]]]


@dataclass(frozen=True)
class ValidatedEntry:
    date: str
    description: str
    hours: float


def _reject(code: ValidationCode, message: str) -> WorkHourValidationError:
    VALIDATION_REJECTIONS.labels(code=code.value).inc()
    logger.info("Work-hour submission rejected code=%s", code.value)
    return WorkHourValidationError(code, message)


def parse_hours(raw: Any) -> Optional[float]:
    """Accept a number or a numeric string; return None for anything else."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        # float() would read "1_5" as 15.
        if "_" in raw:
            return None
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def min_allowed_year(today: date) -> int:
    """January is a grace month for entries of the previous year."""
    return today.year - 1 if today.month == 1 else today.year


def check_fields(raw_date: Any, raw_description: Any, raw_hours: Any,
                 today: date) -> ValidatedEntry:
    """Pure checks 1–4. Raises WorkHourValidationError on the first failure."""
    date_text = str(raw_date).strip() if raw_date is not None else ""
    if not date_text or not _ISO_DATE.match(date_text):
        raise _reject(ValidationCode.BAD_DATE_FORMAT, MSG_BAD_DATE)
    try:
        work_date = date.fromisoformat(date_text)
    except ValueError:
        raise _reject(ValidationCode.BAD_DATE_FORMAT, MSG_BAD_DATE)

    description = str(raw_description).strip() if raw_description is not None else ""
    if not description:
        raise _reject(ValidationCode.MISSING_DESCRIPTION, MSG_MISSING_DESCRIPTION)

    hours = parse_hours(raw_hours)
    if hours is None or hours <= 0:
        raise _reject(ValidationCode.INVALID_HOURS, MSG_INVALID_HOURS)

    minimum = min_allowed_year(today)
    if work_date.year < minimum:
        if today.month == 1:
            message = MSG_YEAR_GRACE.format(current=today.year, previous=today.year - 1)
        else:
            message = MSG_YEAR_STRICT.format(current=today.year)
        raise _reject(ValidationCode.YEAR_OUT_OF_RANGE, message)

    return ValidatedEntry(date=work_date.isoformat(), description=description, hours=hours)


def check_duplicate(entry: ValidatedEntry, existing: Iterable[WorkHourEntry],
                    exclude_entry_id: Optional[str] = None) -> None:
    """Check 5: at most one entry per member and day."""
    for other in existing:
        if exclude_entry_id is not None and other.id == exclude_entry_id:
            continue
        if normalize_date(other.date) == entry.date:
            raise _reject(ValidationCode.DUPLICATE_FOR_DATE, MSG_DUPLICATE)


async def validate_submission(payload, today: date, member_id: str,
                              entry_lookup: EntryLookup,
                              exclude_entry_id: Optional[str] = None) -> ValidatedEntry:
    """
    Validate a ``WorkHourSubmission`` for ``member_id``.
    ``exclude_entry_id`` lets an update keep its own date.
    """
    entry = check_fields(payload.date, payload.description, payload.hours, today)
    existing = await entry_lookup(member_id, entry.date)
    check_duplicate(entry, existing, exclude_entry_id)
    return entry
