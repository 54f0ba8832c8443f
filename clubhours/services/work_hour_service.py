# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for reading and writing a member's own work-hour entries."""
from datetime import date
from typing import Any, Dict, Optional

from clubhours.core.exceptions import NotFoundError, UpstreamError, WorkHourValidationError
from clubhours.core.logging import get_logger
from clubhours.metrics import WORK_HOUR_SUBMISSIONS
from clubhours.models.domain import Member, WorkHourEntry
from clubhours.services.records_client import NAME_FIELDS, RecordsClient
from clubhours.services.validator import ValidatedEntry, validate_submission

logger = get_logger(__name__)

MSG_MEMBER_NOT_FOUND = "Mitglied nicht gefunden"


def _command_result(entry_id: str, member: Member, validated: ValidatedEntry) -> Dict[str, Any]:
    return {
        "id": entry_id,
        "user": member.name,
        "date": validated.date,
        "description": validated.description,
        "hours": validated.hours,
        "duration_hours": validated.hours,
    }


class WorkHourService:
    def __init__(self, records: RecordsClient):
        self._records = records

    async def _member(self, member_id: str) -> Member:
        member = await self._records.get_member_by_id(member_id, NAME_FIELDS)
        if member is None:
            raise NotFoundError(MSG_MEMBER_NOT_FOUND)
        return member

    async def _owned_entry(self, member_id: str, entry_id: str) -> WorkHourEntry:
        """Entries of other members are reported exactly like missing ones."""
        entry = await self._records.get_work_hour_by_id(entry_id)
        if entry is None:
            raise NotFoundError()
        if entry.member_id != member_id:
            logger.warning("Member %s tried to access work hour %s of another member",
                           member_id, entry_id, extra={"member_id": member_id})
            raise NotFoundError()
        return entry

    async def get_entry(self, member_id: str, entry_id: str) -> Dict[str, Any]:
        member = await self._member(member_id)
        entry = await self._owned_entry(member_id, entry_id)
        data = entry.model_dump(by_alias=True)
        data["Vorname"] = member.first_name
        data["Nachname"] = member.last_name
        return data

    async def create_entry(self, member_id: str, payload,
                           today: Optional[date] = None) -> Dict[str, Any]:
        today = today or date.today()
        try:
            member = await self._member(member_id)
            validated = await validate_submission(
                payload, today, member_id, self._records.get_work_hours_for_member_at_date,
            )
            created = await self._records.create_work_hour(
                validated.date, validated.description, validated.hours, member_id, member,
            )
        except WorkHourValidationError:
            WORK_HOUR_SUBMISSIONS.labels(operation="create", outcome="rejected").inc()
            raise
        except NotFoundError:
            WORK_HOUR_SUBMISSIONS.labels(operation="create", outcome="not_found").inc()
            raise
        except UpstreamError:
            WORK_HOUR_SUBMISSIONS.labels(operation="create", outcome="error").inc()
            raise
        WORK_HOUR_SUBMISSIONS.labels(operation="create", outcome="success").inc()
        logger.info("Work hour created id=%s member=%s date=%s hours=%.2f",
                    created.id, member_id, validated.date, validated.hours)
        return _command_result(created.id, member, validated)

    async def update_entry(self, member_id: str, entry_id: str, payload,
                           today: Optional[date] = None) -> Dict[str, Any]:
        today = today or date.today()
        try:
            member = await self._member(member_id)
            await self._owned_entry(member_id, entry_id)
            validated = await validate_submission(
                payload, today, member_id, self._records.get_work_hours_for_member_at_date,
                exclude_entry_id=entry_id,
            )
            updated = await self._records.update_work_hour(
                entry_id, validated.date, validated.description, validated.hours,
                member_id, member,
            )
        except WorkHourValidationError:
            WORK_HOUR_SUBMISSIONS.labels(operation="update", outcome="rejected").inc()
            raise
        except NotFoundError:
            WORK_HOUR_SUBMISSIONS.labels(operation="update", outcome="not_found").inc()
            raise
        except UpstreamError:
            WORK_HOUR_SUBMISSIONS.labels(operation="update", outcome="error").inc()
            raise
        WORK_HOUR_SUBMISSIONS.labels(operation="update", outcome="success").inc()
        logger.info("Work hour updated id=%s member=%s date=%s hours=%.2f",
                    entry_id, member_id, validated.date, validated.hours)
        return _command_result(updated.id or entry_id, member, validated)

    async def delete_entry(self, member_id: str, entry_id: str) -> None:
        try:
            await self._owned_entry(member_id, entry_id)
            await self._records.delete_work_hour(entry_id)
        except NotFoundError:
            WORK_HOUR_SUBMISSIONS.labels(operation="delete", outcome="not_found").inc()
            raise
        except UpstreamError:
            WORK_HOUR_SUBMISSIONS.labels(operation="delete", outcome="error").inc()
            raise
        WORK_HOUR_SUBMISSIONS.labels(operation="delete", outcome="success").inc()
        logger.info("Work hour deleted id=%s member=%s", entry_id, member_id)
