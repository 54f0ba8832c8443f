# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
HTTP client for the Records Service (no-code tabular datastore).

Everything table-shaped stops here: callers get ``Member`` and
``WorkHourEntry`` objects with linked ids resolved, dates normalized and
durations in hours.
"""
import json
import re
import time
from datetime import datetime
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo

import httpx
from pydantic import ValidationError as PydanticValidationError

from clubhours.core.config import settings
from clubhours.core.exceptions import NotFoundError, UpstreamError
from clubhours.core.logging import get_logger
from clubhours.metrics import RECORDS_LATENCY, RECORDS_REQUESTS
from clubhours.models.domain import LinkedRecord, Member, WorkHourEntry
from clubhours.services.aggregation import entries_in_year, normalize_date, round2

logger = get_logger(__name__)

PAGE_SIZE = 1000

MEMBER_FIELDS: tuple[str, ...] = (
    settings.FIELD_FIRST_NAME,
    settings.FIELD_LAST_NAME,
    settings.FIELD_EMAIL,
    settings.FIELD_FAMILY,
    settings.FIELD_BIRTH_DATE,
    settings.FIELD_JOIN_DATE,
)
NAME_FIELDS: tuple[str, ...] = (
    settings.FIELD_FIRST_NAME,
    settings.FIELD_LAST_NAME,
    settings.FIELD_EMAIL,
)


def resolve_linked_id(value: Any) -> Optional[str]:
    """
    A linked-record cell arrives as ``"rec1"``, ``{"id": "rec1"}`` or a list
    of either; return the plain id of the first link.
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        try:
            return LinkedRecord.model_validate(value).id or None
        except PydanticValidationError:
            return None
    return None


_PLAIN_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def record_date(raw: Any) -> str:
    """
    Calendar day of a stored ``Datum`` cell. The Records Service keeps a
    local day as a UTC instant (``2025-01-01`` reads back as
    ``2024-12-31T23:00:00.000Z``), so zoned values are converted to
    ``RECORDS_TIMEZONE`` before the date is taken. Plain dates pass through.
    """
    if not isinstance(raw, str):
        return ""
    text = raw.strip()
    if not text or _PLAIN_DATE.match(text):
        return text
    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        return normalize_date(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(ZoneInfo(settings.RECORDS_TIMEZONE))
    return parsed.date().isoformat()


def duration_to_hours(raw: Any) -> Optional[float]:
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if settings.RECORDS_DURATION_UNIT == "seconds":
        return round2(value / 3600.0)
    return value


def hours_to_storage(hours: float) -> float:
    if settings.RECORDS_DURATION_UNIT == "seconds":
        return hours * 3600.0
    return hours


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = _text(value)
    return text or None


def member_from_record(record: dict[str, Any]) -> Member:
    fields = record.get("fields") or {}
    return Member(
        id=str(record.get("id") or ""),
        first_name=_text(fields.get(settings.FIELD_FIRST_NAME)),
        last_name=_text(fields.get(settings.FIELD_LAST_NAME)),
        email=_text(fields.get(settings.FIELD_EMAIL)),
        birth_date=_optional_text(fields.get(settings.FIELD_BIRTH_DATE)),
        family_id=_optional_text(fields.get(settings.FIELD_FAMILY)),
        join_date=_optional_text(fields.get(settings.FIELD_JOIN_DATE)),
    )


def entry_from_record(record: dict[str, Any]) -> Optional[WorkHourEntry]:
    """None when date, description or duration is missing."""
    fields = record.get("fields") or {}
    record_id = str(record.get("id") or "")
    date = record_date(fields.get(settings.FIELD_DATE))
    description = fields.get(settings.FIELD_DESCRIPTION)
    hours = duration_to_hours(fields.get(settings.FIELD_DURATION))
    if not date or not isinstance(description, str) or hours is None:
        logger.info("Skipping work hour %s with missing data", record_id)
        return None
    member_id = (resolve_linked_id(fields.get(settings.FIELD_MEMBER_LINK))
                 or _optional_text(fields.get(settings.FIELD_MEMBER_UUID)))
    return WorkHourEntry(
        id=record_id,
        member_id=member_id,
        date=date,
        description=description,
        duration_hours=hours,
    )


def _filter(field: str, value: str) -> str:
    return json.dumps({
        "conjunction": "and",
        "filterSet": [{"fieldId": field, "operator": "is", "value": value}],
    }, ensure_ascii=False)


class RecordsClient:
    """Member Directory Client over the Records Service REST API."""

    def __init__(self, http_client: httpx.AsyncClient):
        self._client = http_client

    # ── Plumbing ──────────────────────────────────────────────────────

    def _table_url(self, table_id: str, record_id: Optional[str] = None) -> str:
        url = f"{settings.RECORDS_API_URL}/table/{table_id}/record"
        return f"{url}/{record_id}" if record_id else url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {settings.RECORDS_TOKEN}",
            "Accept": "application/json",
        }

    async def _call(self, operation: str, method: str, url: str,
                    allow_404: bool = False, **kwargs) -> Optional[Any]:
        """Send one request; parsed JSON body, None on a tolerated 404."""
        start = time.monotonic()
        try:
            resp = await self._client.request(
                method, url, headers=self._headers(),
                timeout=settings.RECORDS_TIMEOUT, **kwargs,
            )
        except httpx.HTTPError as exc:
            RECORDS_REQUESTS.labels(operation=operation, outcome="error").inc()
            logger.error("Records Service %s unreachable: %s", operation, exc)
            raise UpstreamError(operation, str(exc)) from exc
        finally:
            RECORDS_LATENCY.labels(operation=operation).observe(time.monotonic() - start)

        if allow_404 and resp.status_code == 404:
            RECORDS_REQUESTS.labels(operation=operation, outcome="not_found").inc()
            return None
        if resp.status_code >= 400:
            RECORDS_REQUESTS.labels(operation=operation, outcome="error").inc()
            logger.error("Records Service %s error %s: %s",
                         operation, resp.status_code, resp.text[:500])
            raise UpstreamError(operation, f"HTTP {resp.status_code}")
        RECORDS_REQUESTS.labels(operation=operation, outcome="ok").inc()
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(operation, "invalid JSON response") from exc

    async def _list_records(self, operation: str, table_id: str,
                            filter_json: Optional[str] = None,
                            fields: Optional[Sequence[str]] = None) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        skip = 0
        while True:
            params: list[tuple[str, Any]] = [("take", PAGE_SIZE), ("skip", skip)]
            if filter_json:
                params.append(("filter", filter_json))
            for field in fields or ():
                params.append(("projection[]", field))
            body = await self._call(operation, "GET", self._table_url(table_id), params=params)
            page = body.get("records") if isinstance(body, dict) else None
            if not isinstance(page, list):
                raise UpstreamError(operation, "response has no records list")
            records.extend(r for r in page if isinstance(r, dict))
            if len(page) < PAGE_SIZE:
                return records
            skip += PAGE_SIZE

    # ── Members ───────────────────────────────────────────────────────

    async def get_member_by_id(self, member_id: str,
                               fields: Optional[Sequence[str]] = MEMBER_FIELDS) -> Optional[Member]:
        params = [("projection[]", f) for f in fields or ()]
        record = await self._call(
            "member_by_id", "GET", self._table_url(settings.MEMBERS_TABLE_ID, member_id),
            allow_404=True, params=params,
        )
        if not record or not record.get("fields"):
            logger.warning("No member found with id %s", member_id)
            return None
        return member_from_record(record)

    async def get_members_by_email(self, email: str,
                                   fields: Optional[Sequence[str]] = MEMBER_FIELDS) -> list[Member]:
        """All members sharing ``email`` (case-insensitive), in Records Service order."""
        wanted = email.strip().lower()
        records = await self._list_records(
            "members_by_email", settings.MEMBERS_TABLE_ID,
            _filter(settings.FIELD_EMAIL, wanted), fields,
        )
        members = [member_from_record(r) for r in records]
        return [m for m in members if m.email.lower() == wanted]

    async def get_member_by_email(self, email: str,
                                  fields: Optional[Sequence[str]] = MEMBER_FIELDS) -> Optional[Member]:
        members = await self.get_members_by_email(email, fields)
        return members[0] if members else None

    async def get_family_members(self, family_id: str,
                                 fields: Optional[Sequence[str]] = MEMBER_FIELDS) -> list[Member]:
        records = await self._list_records(
            "family_members", settings.MEMBERS_TABLE_ID,
            _filter(settings.FIELD_FAMILY, family_id), fields,
        )
        members = [member_from_record(r) for r in records]
        members = [m for m in members if m.family_id == family_id]
        logger.info("Found %d family members for family %s", len(members), family_id)
        return members

    # ── Work hours ────────────────────────────────────────────────────

    async def get_work_hours_for_member(self, member_id: str,
                                        year: Optional[int] = None) -> list[WorkHourEntry]:
        records = await self._list_records(
            "work_hours", settings.WORK_HOURS_TABLE_ID,
            _filter(settings.FIELD_MEMBER_LINK, member_id),
        )
        entries = [e for e in (entry_from_record(r) for r in records) if e is not None]
        # The server-side filter is not trusted on its own.
        entries = [e for e in entries if e.member_id == member_id]
        if year is not None:
            entries = entries_in_year(entries, year)
        return entries

    async def get_work_hours_for_member_at_date(self, member_id: str,
                                                date: str) -> list[WorkHourEntry]:
        entries = await self.get_work_hours_for_member(member_id)
        wanted = normalize_date(date)
        return [e for e in entries if e.date == wanted]

    async def get_work_hour_by_id(self, entry_id: str) -> Optional[WorkHourEntry]:
        record = await self._call(
            "work_hour_by_id", "GET", self._table_url(settings.WORK_HOURS_TABLE_ID, entry_id),
            allow_404=True,
        )
        if not record or not record.get("fields"):
            logger.warning("No work hour found with id %s", entry_id)
            return None
        return entry_from_record(record)

    async def _entry_fields(self, date: str, description: str, hours: float,
                            member_id: str, member: Optional[Member] = None) -> dict[str, Any]:
        if member is None or member.id != member_id:
            member = await self.get_member_by_id(member_id, NAME_FIELDS)
        if member is None:
            raise NotFoundError("Mitglied nicht gefunden")
        return {
            settings.FIELD_MEMBER_LINK: {"id": member_id},
            settings.FIELD_LAST_NAME: member.last_name,
            settings.FIELD_FIRST_NAME: member.first_name,
            settings.FIELD_DURATION: hours_to_storage(hours),
            settings.FIELD_DATE: date,
            settings.FIELD_DESCRIPTION: description,
        }

    async def create_work_hour(self, date: str, description: str, hours: float,
                               member_id: str,
                               member: Optional[Member] = None) -> WorkHourEntry:
        fields = await self._entry_fields(date, description, hours, member_id, member)
        body = await self._call(
            "create_work_hour", "POST", self._table_url(settings.WORK_HOURS_TABLE_ID),
            json={"records": [{"fields": fields}]},
        )
        records = body.get("records") if isinstance(body, dict) else None
        if not records:
            raise UpstreamError("create_work_hour", "response has no records")
        entry = entry_from_record(records[0])
        if entry is None:
            raise UpstreamError("create_work_hour", "created record is incomplete")
        logger.info("Work hour %s created for member %s", entry.id, member_id)
        return entry

    async def update_work_hour(self, entry_id: str, date: str, description: str,
                               hours: float, member_id: str,
                               member: Optional[Member] = None) -> WorkHourEntry:
        fields = await self._entry_fields(date, description, hours, member_id, member)
        body = await self._call(
            "update_work_hour", "PATCH",
            self._table_url(settings.WORK_HOURS_TABLE_ID, entry_id),
            json={"record": {"fields": fields}},
        )
        record = body.get("record", body) if isinstance(body, dict) else None
        entry = entry_from_record(record) if isinstance(record, dict) else None
        if entry is None:
            raise UpstreamError("update_work_hour", "updated record is incomplete")
        logger.info("Work hour %s updated for member %s", entry_id, member_id)
        return entry

    async def delete_work_hour(self, entry_id: str) -> None:
        await self._call(
            "delete_work_hour", "DELETE",
            self._table_url(settings.WORK_HOURS_TABLE_ID, entry_id),
        )
        logger.info("Work hour %s deleted", entry_id)

    async def verify_connection(self) -> None:
        await self._call(
            "ping", "GET", self._table_url(settings.MEMBERS_TABLE_ID),
            params=[("take", 1)],
        )
