"""Append-only ledger of completed service periods."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from .records import (
    ServiceCompletion,
    ServiceType,
    Site,
    clone_entries,
    validate_month,
)

logger = logging.getLogger(__name__)

FALLBACK_HOUR = 12


def find_completion(site: Site, service_type, year: int, month: int) -> Optional[ServiceCompletion]:
    service_type = ServiceType.coerce(service_type)
    for completion in site.completed_services:
        if completion.period == (service_type, year, month):
            return completion
    return None


def _parse_time(value: Optional[str]):
    if not value:
        return FALLBACK_HOUR, 0
    try:
        hours, minutes = (int(part) for part in value.split(":")[:2])
    except ValueError:
        return FALLBACK_HOUR, 0
    return hours, minutes


def completion_timestamp(site: Site, year: int, now: Optional[datetime] = None) -> str:
    """Timestamp recorded when no explicit completion time is supplied.

    The site's appointment date in ``year`` is used when one is set, at its
    time or noon. Out-of-range days roll into the next month the way a
    calendar would (``Feb 30`` becomes ``Mar 1`` or ``Mar 2``).
    """

    appointment = site.appointment
    if appointment and 1 <= (appointment.month or 0) <= 12 and 1 <= (appointment.day or 0) <= 31:
        hours, minutes = _parse_time(appointment.time)
        moment = datetime(year, appointment.month, 1) + timedelta(days=appointment.day - 1, hours=hours, minutes=minutes)
        return moment.isoformat()
    return (now or datetime.now()).isoformat()


def mark_complete(
    site: Site,
    service_type,
    year: int,
    month: int,
    completed_by: Optional[str] = None,
    completed_at: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[ServiceCompletion]:
    """Record a completion, returning ``None`` when the period is already done.

    The out-list of the completed discipline and the site notes are snapshotted
    as independent copies.
    """

    service_type = ServiceType.coerce(service_type)
    month = validate_month(month)
    year = int(year)
    if find_completion(site, service_type, year, month) is not None:
        return None

    completion = ServiceCompletion(
        type=service_type,
        year=year,
        month=month,
        completed_date=completed_at or completion_timestamp(site, year, now),
        completed_by=completed_by or "Unknown",
        notes_snapshot=site.notes,
        extinguishers_out_snapshot=clone_entries(site.extinguishers_out)
        if service_type is ServiceType.EXTINGUISHER
        else None,
        system_tanks_snapshot=clone_entries(site.system_tanks) if service_type is ServiceType.SYSTEM else None,
    )
    site.completed_services.append(completion)
    logger.debug("Completed %s %s/%s for site %s", service_type.value, month, year, site.id)
    return completion


def undo_complete(site: Site, service_type, year: int, month: int) -> bool:
    service_type = ServiceType.coerce(service_type)
    completion = find_completion(site, service_type, int(year), int(month))
    if completion is None:
        return False
    site.completed_services = [entry for entry in site.completed_services if entry is not completion]
    return True
