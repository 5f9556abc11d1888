"""Recurrence schedules and the service tracker view."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from .ledger import find_completion
from .records import (
    NO_TECHNICIAN,
    Appointment,
    ServiceCompletion,
    ServiceType,
    Site,
    validate_month,
)

logger = logging.getLogger(__name__)

ALL_TECHNICIANS = "All"
COMBINED = "Combined"


def is_active(site: Site, service_type, year: int, month: int) -> bool:
    """A discipline is active in a period when scheduled or already completed."""

    service_type = ServiceType.coerce(service_type)
    if month in site.months_for(service_type):
        return True
    return find_completion(site, service_type, year, month) is not None


def opposite_month(month: int) -> int:
    month = validate_month(month)
    return (date(2000, month, 1) + relativedelta(months=6)).month


def seed_months(service_type, current_month: int) -> List[int]:
    current_month = validate_month(current_month)
    if ServiceType.coerce(service_type) is ServiceType.SYSTEM:
        return sorted([current_month, opposite_month(current_month)])
    return [current_month]


def assign_technician(site: Site, service_type, name: Optional[str], current_month: int) -> List[int]:
    """Assign a technician to a discipline, seeding an empty month set.

    Returns the resulting month set.
    """

    service_type = ServiceType.coerce(service_type)
    name = (name or "").strip()
    if service_type is ServiceType.EXTINGUISHER:
        site.extinguisher_tech = name or None
        site.assigned_technician = name or None
    else:
        site.system_tech = name or None

    if name and name != NO_TECHNICIAN and not site.months_for(service_type):
        site.set_months(service_type, seed_months(service_type, current_month))
        logger.debug("Seeded %s months for %s: %s", service_type.value, site.id, site.months_for(service_type))
    return list(site.months_for(service_type))


def toggle_month(site: Site, service_type, month: int) -> List[int]:
    service_type = ServiceType.coerce(service_type)
    month = validate_month(month)
    current = list(site.months_for(service_type))
    if month in current:
        current.remove(month)
    elif not current and service_type is ServiceType.SYSTEM:
        current = seed_months(service_type, month)
    else:
        current.append(month)
    site.set_months(service_type, current)
    return list(site.months_for(service_type))


def set_appointment(
    site: Site,
    month: Optional[int],
    day: Optional[int],
    time: Optional[str] = None,
    actor: Optional[str] = None,
) -> Optional[Appointment]:
    if month and day:
        site.appointment = Appointment(month=int(month), day=int(day), time=time or None)
        site.scheduled_by = actor or "Unknown"
    else:
        site.appointment = None
        site.scheduled_by = None
    return site.appointment


@dataclass
class DisciplineStatus:
    type: ServiceType
    is_complete: bool
    completion: Optional[ServiceCompletion] = None


@dataclass
class TrackerItem:
    site: Site
    kind: str
    technician: str
    month: int
    overdue: bool
    disciplines: List[DisciplineStatus] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return all(status.is_complete for status in self.disciplines)


def months_to_check(year: int, month: int, today: date) -> List[int]:
    if year == today.year and month == today.month:
        return list(range(1, today.month + 1))
    return [month]


def _items_for_site(site: Site, year: int, month: int, months: Iterable[int], tech: str, show_completed: bool) -> List[TrackerItem]:
    ext_tech = site.technician_for(ServiceType.EXTINGUISHER)
    sys_tech = site.technician_for(ServiceType.SYSTEM)
    ext_match = tech == ALL_TECHNICIANS or ext_tech == tech
    sys_match = tech == ALL_TECHNICIANS or sys_tech == tech

    items: List[TrackerItem] = []
    for m in months:
        ext_done = find_completion(site, ServiceType.EXTINGUISHER, year, m)
        sys_done = find_completion(site, ServiceType.SYSTEM, year, m)
        ext_scheduled = is_active(site, ServiceType.EXTINGUISHER, year, m)
        sys_scheduled = is_active(site, ServiceType.SYSTEM, year, m)
        if not ext_scheduled and not sys_scheduled:
            continue

        show_ext = ext_scheduled and ext_match
        show_sys = sys_scheduled and sys_match
        if m < month or not show_completed:
            if ext_done:
                show_ext = False
            if sys_done:
                show_sys = False
        if not show_ext and not show_sys:
            continue

        ext_status = DisciplineStatus(ServiceType.EXTINGUISHER, ext_done is not None, ext_done)
        sys_status = DisciplineStatus(ServiceType.SYSTEM, sys_done is not None, sys_done)
        overdue = m < month
        if show_ext and show_sys and ext_tech.lower() == sys_tech.lower():
            items.append(TrackerItem(site, COMBINED, ext_tech, m, overdue, [ext_status, sys_status]))
            continue
        if show_ext:
            items.append(TrackerItem(site, ServiceType.EXTINGUISHER.value, ext_tech, m, overdue, [ext_status]))
        if show_sys:
            items.append(TrackerItem(site, ServiceType.SYSTEM.value, sys_tech, m, overdue, [sys_status]))

    if len(items) <= 1:
        return items
    latest = max(item.month for item in items)
    return [item for item in items if item.month == latest]


def _tracker_sort_key(item: TrackerItem):
    appointment = item.site.appointment
    if appointment and (appointment.month or appointment.day):
        return (0, appointment.month, appointment.day, appointment.time or "23:59", "", "")
    return (1, 0, 0, "", item.site.city, item.site.name)


def tracker_items(
    sites: Iterable[Site],
    year: int,
    month: int,
    today: date,
    tech: str = ALL_TECHNICIANS,
    show_completed: bool = False,
    search: Optional[str] = None,
) -> List[TrackerItem]:
    """Build the service tracker for a viewed period.

    Viewing the current month also surfaces every earlier month of the year
    so that missed periods stay visible until completed.
    """

    month = validate_month(month)
    months = months_to_check(year, month, today)
    needle = (search or "").strip().lower()

    items: List[TrackerItem] = []
    for site in sites:
        if site.archived:
            continue
        if needle and needle not in site.name.lower() and needle not in site.address.lower():
            continue
        items.extend(_items_for_site(site, year, month, months, tech or ALL_TECHNICIANS, show_completed))
    return sorted(items, key=_tracker_sort_key)
