"""Record types shared by the compliance tracking engine.

The engine works on plain dataclasses so it can be exercised without a
database. :mod:`firetrack.store` maps them to and from the ORM models.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple

NO_TECHNICIAN = "None"


class InvalidMonthError(ValueError):
    """Raised when a mutation receives a month outside 1-12."""


class UnknownServiceTypeError(ValueError):
    """Raised when a service type is neither Extinguisher nor System."""


class ServiceType(str, Enum):
    EXTINGUISHER = "Extinguisher"
    SYSTEM = "System"

    @classmethod
    def coerce(cls, value) -> "ServiceType":
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value or "").strip().lower() == member.value.lower():
                return member
        raise UnknownServiceTypeError(f"Unknown service type: {value!r}")


class DueState(str, Enum):
    UNKNOWN = "Unknown"
    OK = "OK"
    TARGET = "Target"
    OVERDUE = "Overdue"


@dataclass(frozen=True)
class DueStatus:
    state: DueState
    next_due: Optional[int] = None

    @property
    def label(self) -> str:
        if self.state is DueState.UNKNOWN:
            return "Unknown"
        if self.state is DueState.OVERDUE:
            return f"Overdue ({self.next_due})"
        return f"Due {self.next_due}"


@dataclass
class OutEntry:
    """A manually maintained extinguisher-out line."""

    id: str
    quantity: int = 1
    brand: str = ""
    size: str = ""
    type: str = ""
    year: str = ""
    supersedes_key: Optional[str] = None

    def clone(self) -> "OutEntry":
        return type(self)(
            id=self.id,
            quantity=self.quantity,
            brand=self.brand,
            size=self.size,
            type=self.type,
            year=self.year,
            supersedes_key=self.supersedes_key,
        )


@dataclass
class SystemTankEntry(OutEntry):
    """A suppression-system tank removed for recharge."""


def clone_entries(entries) -> List[OutEntry]:
    return [entry.clone() for entry in entries or []]


@dataclass
class ServiceCompletion:
    type: ServiceType
    year: int
    month: int
    completed_date: str
    completed_by: str
    notes_snapshot: Optional[str] = None
    extinguishers_out_snapshot: Optional[List[OutEntry]] = None
    system_tanks_snapshot: Optional[List[SystemTankEntry]] = None

    @property
    def period(self) -> Tuple[ServiceType, int, int]:
        return (self.type, self.year, self.month)


@dataclass
class Appointment:
    month: int
    day: int
    time: Optional[str] = None


@dataclass
class Asset:
    id: str
    site_id: str
    type: str
    brand: Optional[str] = None
    size: Optional[str] = None
    last_service_date: Optional[str] = None
    location: str = ""
    unit_number: Optional[str] = None
    battery_type: Optional[str] = None
    battery_replacement_due: bool = False
    sort_order: Optional[int] = None


@dataclass
class Site:
    id: str
    name: str
    address: str = ""
    service_months: List[int] = field(default_factory=list)
    system_months: List[int] = field(default_factory=list)
    extinguisher_tech: Optional[str] = None
    system_tech: Optional[str] = None
    assigned_technician: Optional[str] = None
    notes: str = ""
    appointment: Optional[Appointment] = None
    scheduled_by: Optional[str] = None
    completed_services: List[ServiceCompletion] = field(default_factory=list)
    extinguishers_out: List[OutEntry] = field(default_factory=list)
    system_tanks: List[SystemTankEntry] = field(default_factory=list)
    archived: bool = False

    def technician_for(self, service_type: ServiceType) -> str:
        if ServiceType.coerce(service_type) is ServiceType.EXTINGUISHER:
            name = self.extinguisher_tech or self.assigned_technician
        else:
            name = self.system_tech
        return (name or NO_TECHNICIAN).strip() or NO_TECHNICIAN

    def months_for(self, service_type: ServiceType) -> List[int]:
        if ServiceType.coerce(service_type) is ServiceType.EXTINGUISHER:
            return self.service_months
        return self.system_months

    def set_months(self, service_type: ServiceType, months) -> None:
        ordered = sorted(set(int(month) for month in months))
        if ServiceType.coerce(service_type) is ServiceType.EXTINGUISHER:
            self.service_months = ordered
        else:
            self.system_months = ordered

    def out_list_for(self, service_type: ServiceType) -> List[OutEntry]:
        if ServiceType.coerce(service_type) is ServiceType.EXTINGUISHER:
            return self.extinguishers_out
        return self.system_tanks

    @property
    def city(self) -> str:
        if not self.address:
            return ""
        parts = self.address.split(",")
        return parts[1].strip() if len(parts) > 1 else self.address


@dataclass
class AppData:
    """Opaque bag of records exchanged with the persisted store."""

    sites: List[Site] = field(default_factory=list)
    assets: List[Asset] = field(default_factory=list)

    def site(self, site_id: str) -> Optional[Site]:
        for site in self.sites:
            if site.id == site_id:
                return site
        return None

    def assets_for(self, site_id: str) -> List[Asset]:
        return [asset for asset in self.assets if asset.site_id == site_id]

    def assets_by_site(self) -> Dict[str, List[Asset]]:
        grouped: Dict[str, List[Asset]] = {}
        for asset in self.assets:
            grouped.setdefault(asset.site_id, []).append(asset)
        return grouped


def validate_month(month) -> int:
    try:
        value = int(month)
    except (TypeError, ValueError):
        raise InvalidMonthError(f"Invalid month: {month!r}") from None
    if not 1 <= value <= 12:
        raise InvalidMonthError(f"Month must be between 1 and 12, got {value}")
    return value


def today() -> date:
    return date.today()
