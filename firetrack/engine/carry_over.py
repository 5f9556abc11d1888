"""Back-filling of missed periods when a technician catches up."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from .ledger import completion_timestamp, find_completion, mark_complete
from .records import NO_TECHNICIAN, ServiceCompletion, ServiceType, Site, validate_month

logger = logging.getLogger(__name__)


def _first_name(name: str) -> str:
    parts = name.split(" ")
    return parts[0] if parts else ""


def match_technician(actor_name: Optional[str], technicians: Iterable[str]) -> Optional[str]:
    """Find the roster entry for an actor.

    Tried in order: full name, actor first name against a full entry, then
    first name against first name. Comparisons ignore case.
    """

    name = (actor_name or "").lower().strip()
    if not name:
        return None
    first = _first_name(name)
    roster = list(technicians)

    for candidate in roster:
        if candidate.lower().strip() == name:
            return candidate
    for candidate in roster:
        if candidate.lower().strip() == first:
            return candidate
    for candidate in roster:
        if _first_name(candidate.lower().strip()) == first:
            return candidate
    return None


def is_assignee(actor_name: Optional[str], assigned: Optional[str]) -> bool:
    actor = (actor_name or "").lower().strip()
    technician = (assigned or "").lower().strip()
    if not actor or not technician or technician == NO_TECHNICIAN.lower():
        return False
    return actor == technician or _first_name(actor) == _first_name(technician)


def _is_latest_viewed(site: Site, service_type: ServiceType, month: int, viewed_month: int) -> bool:
    if month > viewed_month:
        return False
    scheduled = site.months_for(service_type)
    return not any(month < later <= viewed_month for later in scheduled)


def complete_with_carry_over(
    site: Site,
    service_type,
    year: int,
    month: int,
    actor: Optional[str],
    completed_at: Optional[str] = None,
    viewed_month: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[ServiceCompletion]:
    """Complete a period and, for the assigned technician, every earlier one.

    Earlier months of the same year that are scheduled for the discipline and
    not yet completed are recorded with the same timestamp. Nothing is carried
    when the period was already complete, the actor is not the assignee, or
    ``month`` is not the latest scheduled month up to ``viewed_month``.
    """

    service_type = ServiceType.coerce(service_type)
    month = validate_month(month)
    viewed_month = month if viewed_month is None else validate_month(viewed_month)
    if completed_at is None:
        completed_at = completion_timestamp(site, year, now)

    created: List[ServiceCompletion] = []
    primary = mark_complete(site, service_type, year, month, actor, completed_at)
    if primary is None:
        return created
    created.append(primary)

    assigned = site.technician_for(service_type)
    if not is_assignee(actor, assigned):
        logger.debug("No carry-over for %s: %r is not assignee %r", site.id, actor, assigned)
        return created
    if not _is_latest_viewed(site, service_type, month, viewed_month):
        logger.debug("No carry-over for %s: month %s is not the latest viewed", site.id, month)
        return created

    for earlier in range(1, month):
        if earlier not in site.months_for(service_type):
            continue
        if find_completion(site, service_type, year, earlier) is not None:
            continue
        carried = mark_complete(site, service_type, year, earlier, actor, completed_at)
        if carried is not None:
            created.append(carried)
    return created
