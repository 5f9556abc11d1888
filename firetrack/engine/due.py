"""Due-state classification of major services.

Two flavours coexist and must stay distinct:

* :func:`classify` powers forecasts. Missing data is ``Unknown`` and never
  reported as due.
* :func:`is_due` answers "should this unit be pulled now". Missing data is
  reported as due so that it gets looked at.
"""
from __future__ import annotations

import re
from typing import Optional

from .intervals import NO_MAJOR_SERVICE, interval_for, tank_interval_for
from .records import Asset, DueState, DueStatus, OutEntry

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_year(value) -> Optional[int]:
    """Read the leading integer of a year string (``"2019"``, ``"2019-04"``)."""

    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def classify(last_service_year, interval: int, current_year: int, forecast_year: Optional[int] = None) -> DueStatus:
    year = parse_year(last_service_year)
    if interval == NO_MAJOR_SERVICE or year is None:
        return DueStatus(DueState.UNKNOWN)

    if forecast_year is None:
        forecast_year = current_year
    next_due = year + interval
    if next_due == forecast_year:
        return DueStatus(DueState.TARGET, next_due)
    if next_due < current_year:
        return DueStatus(DueState.OVERDUE, next_due)
    return DueStatus(DueState.OK, next_due)


def is_due(last_service_year, interval: int, current_year: int) -> bool:
    if interval == NO_MAJOR_SERVICE:
        return False
    year = parse_year(last_service_year)
    if year is None:
        return True
    return year + interval <= current_year


def asset_status(asset: Asset, current_year: int, forecast_year: Optional[int] = None) -> DueStatus:
    return classify(asset.last_service_date, interval_for(asset.type), current_year, forecast_year)


def asset_is_due(asset: Asset, current_year: int) -> bool:
    return is_due(asset.last_service_date, interval_for(asset.type), current_year)


def out_entry_is_due(entry: OutEntry, current_year: int) -> bool:
    return is_due(entry.year, interval_for(entry.type), current_year)


def tank_is_due(entry: OutEntry, current_year: int) -> bool:
    return is_due(entry.year, tank_interval_for(entry.type), current_year)


def out_entry_is_done(entry: OutEntry, current_year: int, tank: bool = False) -> bool:
    """True when a manual line already carries a service year that is not due."""

    year = parse_year(entry.year)
    if year is None:
        return False
    interval = tank_interval_for(entry.type) if tank else interval_for(entry.type)
    return year + interval > current_year
