"""Major-service interval policy, in years."""
from __future__ import annotations

from typing import Optional

NO_MAJOR_SERVICE = 0

LIGHT_TYPES = frozenset({"Exit Light", "Emergency Light"})
SIX_YEAR_CLASSES = ("ABC", "Clean Agent")

DEFAULT_EXTINGUISHER_INTERVAL = 5
SIX_YEAR_INTERVAL = 6
WET_CHEMICAL_TANK_INTERVAL = 12
DEFAULT_TANK_INTERVAL = 6


def is_light(category: Optional[str]) -> bool:
    return (category or "").strip() in LIGHT_TYPES


def interval_for(category: Optional[str]) -> int:
    """Return the recharge / hydrostatic interval of a portable unit.

    Lights never come due through this mechanism (they carry a battery flag
    instead) and return :data:`NO_MAJOR_SERVICE`. Unknown categories fall back
    to the generic five year cycle.
    """

    name = (category or "").strip()
    if is_light(name):
        return NO_MAJOR_SERVICE
    if any(klass in name for klass in SIX_YEAR_CLASSES):
        return SIX_YEAR_INTERVAL
    return DEFAULT_EXTINGUISHER_INTERVAL


def tank_interval_for(agent: Optional[str]) -> int:
    if "Wet" in (agent or ""):
        return WET_CHEMICAL_TANK_INTERVAL
    return DEFAULT_TANK_INTERVAL
