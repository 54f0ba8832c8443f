# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Dashboard assembly.

    member → own entries → personal summary
           → family members → entries per member (concurrent) → family summary

Personal data is never lost to a family-side failure: a failed family lookup
drops the family block, a failed per-member fetch counts as zero entries.
"""

import asyncio
from typing import Optional

from clubhours.core.exceptions import NotFoundError, UpstreamError
from clubhours.core.logging import get_logger
from clubhours.metrics import DASHBOARD_BUILDS
from clubhours.models.domain import FamilySummary, Member, WorkHourEntry
from clubhours.schemas import DashboardResponse
from clubhours.services.aggregation import aggregate_family, aggregate_personal
from clubhours.services.records_client import RecordsClient

logger = get_logger(__name__)


class DashboardService:
    def __init__(self, records: RecordsClient):
        self._records = records

    async def _entries_or_empty(self, member: Member, year: int) -> list[WorkHourEntry]:
        try:
            return await self._records.get_work_hours_for_member(member.id, year)
        except UpstreamError as exc:
            logger.warning("Counting zero hours for family member %s in %d: %s",
                           member.id, year, exc)
            return []

    async def _family(self, member: Member, year: int,
                      own_entries: list[WorkHourEntry]) -> Optional[FamilySummary]:
        family_id = member.family_id.strip()
        try:
            family_members = await self._records.get_family_members(family_id)
        except UpstreamError as exc:
            logger.warning("Family %s unavailable for member %s: %s", family_id, member.id, exc)
            return None
        if not family_members:
            # The member is part of their own family even if the lookup disagrees.
            family_members = [member]

        others = [m for m in family_members if m.id != member.id]
        fetched = await asyncio.gather(*(self._entries_or_empty(m, year) for m in others))
        entries_by_member = {m.id: entries for m, entries in zip(others, fetched)}
        entries_by_member[member.id] = own_entries
        return aggregate_family(family_id, family_members, year, entries_by_member)

    async def build_dashboard(self, member_id: str, year: int) -> DashboardResponse:
        member = await self._records.get_member_by_id(member_id)
        if member is None:
            raise NotFoundError("Mitglied nicht gefunden")

        entries = await self._records.get_work_hours_for_member(member.id, year)
        personal = aggregate_personal(member, year, entries)

        family = None
        if member.has_family:
            family = await self._family(member, year, entries)

        DASHBOARD_BUILDS.labels(scope="family" if family else "personal").inc()
        logger.info("Dashboard built member=%s year=%d hours=%.2f family=%s",
                    member.id, year, personal.hours, "included" if family else "none")
        return DashboardResponse(personal=personal, family=family, year=year)
