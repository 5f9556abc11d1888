"""Out-for-service aggregation.

Two streams feed the view of equipment pulled from a site:

* auto lines, computed from the site's assets whose major service is due and
  never stored;
* manual lines, owned by the site and editable.

Both are grouped by brand, size and type for display. Clearing an auto line
appends a manual line that supersedes it, so the displayed total does not
move while the auto line drops out on the next computation. The underlying
asset is left untouched; its service year only changes through an explicit
per-asset service action.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

from .due import asset_is_due, out_entry_is_done
from .records import Asset, OutEntry, Site, SystemTankEntry

logger = logging.getLogger(__name__)

AUTO = "auto"
MANUAL = "manual"
AUTO_PREFIX = "auto-"
DEFAULT_BRAND = "Other"

EXTINGUISHER_DEFAULTS = {"quantity": 1, "brand": "Amerex", "size": "5lb", "type": "ABC", "year": ""}
TANK_DEFAULTS = {"quantity": 1, "brand": "Ansul", "size": "", "type": "Wet Chemical", "year": ""}


@dataclass(frozen=True)
class OutLine:
    id: str
    origin: str
    quantity: int
    brand: str
    size: str
    type: str
    year: str

    @property
    def is_auto(self) -> bool:
        return self.origin == AUTO

    @property
    def actions(self) -> Tuple[str, ...]:
        if self.is_auto:
            return ("clear",)
        return ("edit", "delete", "clear")


@dataclass(frozen=True)
class OutGroup:
    key: str
    brand: str
    size: str
    type: str
    total_quantity: int
    lines: Tuple[OutLine, ...]

    @property
    def origins(self) -> Tuple[str, ...]:
        return tuple(sorted({line.origin for line in self.lines}))


def auto_key(brand: str, size: str, type_: str, last_service_date: str) -> str:
    return f"{brand}-{size}-{type_}-{last_service_date}"


def group_key(brand: str, size: str, type_: str) -> str:
    return f"{brand}-{size}-{type_}".lower()


def new_entry_id(prefix: str = "entry") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# Hashable snapshots used as cache keys.
_AssetRow = Tuple[str, Optional[str], Optional[str], Optional[str]]
_EntryRow = Tuple[str, int, str, str, str, str, Optional[str]]


def _asset_rows(assets: Iterable[Asset]) -> Tuple[_AssetRow, ...]:
    return tuple((asset.type, asset.brand, asset.size, asset.last_service_date) for asset in assets)


def _entry_rows(entries: Iterable[OutEntry]) -> Tuple[_EntryRow, ...]:
    return tuple(
        (entry.id, int(entry.quantity or 0), entry.brand, entry.size, entry.type, entry.year, entry.supersedes_key)
        for entry in entries
    )


def _superseded_keys(entries: Sequence[_EntryRow], reference_year: int) -> frozenset:
    year = str(reference_year)
    return frozenset(row[6] for row in entries if row[6] and row[5] == year)


@lru_cache(maxsize=256)
def _auto_lines(assets: Tuple[_AssetRow, ...], entries: Tuple[_EntryRow, ...], reference_year: int, default_brand: str) -> Tuple[OutLine, ...]:
    superseded = _superseded_keys(entries, reference_year)
    totals = {}
    for type_, brand, size, last_service_date in assets:
        probe = Asset(id="", site_id="", type=type_, last_service_date=last_service_date)
        if not asset_is_due(probe, reference_year):
            continue
        brand = brand or default_brand
        key = auto_key(brand, size or "", type_, last_service_date or "")
        if key in superseded:
            continue
        if key not in totals:
            totals[key] = [0, brand, size or "", type_, last_service_date or ""]
        totals[key][0] += 1
    return tuple(
        OutLine(AUTO_PREFIX + key, AUTO, quantity, brand, size, type_, year)
        for key, (quantity, brand, size, type_, year) in totals.items()
    )


def auto_synced_lines(assets: Iterable[Asset], entries: Iterable[OutEntry], reference_year: int, default_brand: str = DEFAULT_BRAND) -> List[OutLine]:
    return list(_auto_lines(_asset_rows(assets), _entry_rows(entries), reference_year, default_brand))


@lru_cache(maxsize=256)
def _grouped(
    assets: Tuple[_AssetRow, ...],
    entries: Tuple[_EntryRow, ...],
    reference_year: int,
    include_completed: bool,
    tank: bool,
    default_brand: str,
) -> Tuple[OutGroup, ...]:
    lines: List[OutLine] = list(_auto_lines(assets, entries, reference_year, default_brand)) if not tank else []
    for entry_id, quantity, brand, size, type_, year, _ in entries:
        probe = OutEntry(id=entry_id, type=type_, year=year)
        if not include_completed and out_entry_is_done(probe, reference_year, tank=tank):
            continue
        lines.append(OutLine(entry_id, MANUAL, quantity, brand, size, type_, year))

    groups = {}
    for line in lines:
        key = group_key(line.brand, line.size, line.type)
        if key not in groups:
            groups[key] = (line.brand, line.size, line.type, [])
        groups[key][3].append(line)

    result = [
        OutGroup(key, brand, size, type_, sum(line.quantity for line in members), tuple(members))
        for key, (brand, size, type_, members) in groups.items()
    ]
    return tuple(sorted(result, key=lambda group: group.type))


def extinguisher_groups(
    site: Site,
    assets: Iterable[Asset],
    reference_year: int,
    include_completed: bool = True,
    default_brand: str = DEFAULT_BRAND,
) -> List[OutGroup]:
    """Merged extinguisher-out view of a site.

    Results are memoised on the content of the inputs, so repeated calls with
    unchanged assets, entries and year reuse the previous computation.
    """

    site_assets = [asset for asset in assets if asset.site_id == site.id]
    return list(
        _grouped(
            _asset_rows(site_assets),
            _entry_rows(site.extinguishers_out),
            reference_year,
            include_completed,
            False,
            default_brand,
        )
    )


def tank_groups(site: Site, reference_year: int, include_completed: bool = True) -> List[OutGroup]:
    return list(_grouped((), _entry_rows(site.system_tanks), reference_year, include_completed, True, DEFAULT_BRAND))


def clear_auto_line(
    site: Site,
    line_id: str,
    assets: Iterable[Asset],
    reference_year: int,
    default_brand: str = DEFAULT_BRAND,
) -> Optional[OutEntry]:
    """Convert an auto line into a manual entry dated ``reference_year``.

    Returns ``None`` when no auto line with that id is currently computed.
    """

    site_assets = [asset for asset in assets if asset.site_id == site.id]
    for line in auto_synced_lines(site_assets, site.extinguishers_out, reference_year, default_brand):
        if line.id != line_id:
            continue
        entry = OutEntry(
            id=new_entry_id("cleared"),
            quantity=line.quantity,
            brand=line.brand,
            size=line.size,
            type=line.type,
            year=str(reference_year),
            supersedes_key=line.id[len(AUTO_PREFIX):],
        )
        site.extinguishers_out = site.extinguishers_out + [entry]
        logger.debug("Cleared auto line %s on site %s as %s", line.id, site.id, entry.id)
        return entry
    return None


def _entries(site: Site, tank: bool) -> List[OutEntry]:
    return site.system_tanks if tank else site.extinguishers_out


def _replace_entries(site: Site, tank: bool, entries: List[OutEntry]) -> None:
    if tank:
        site.system_tanks = entries
    else:
        site.extinguishers_out = entries


def find_entry(site: Site, entry_id: str, tank: bool = False) -> Optional[OutEntry]:
    for entry in _entries(site, tank):
        if entry.id == entry_id:
            return entry
    return None


def add_manual_entry(site: Site, tank: bool = False, **fields) -> OutEntry:
    defaults = dict(TANK_DEFAULTS if tank else EXTINGUISHER_DEFAULTS)
    defaults.update({key: value for key, value in fields.items() if value is not None})
    defaults["quantity"] = _coerce_quantity(defaults.get("quantity"))
    defaults["year"] = str(defaults.get("year") or "")
    entry_type = SystemTankEntry if tank else OutEntry
    entry = entry_type(id=defaults.pop("id", None) or new_entry_id(), **defaults)
    _replace_entries(site, tank, _entries(site, tank) + [entry])
    return entry


def _coerce_quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return quantity if quantity >= 1 else 1


EDITABLE_FIELDS = ("quantity", "brand", "size", "type", "year")


def update_manual_entry(site: Site, entry_id: str, tank: bool = False, **changes) -> Optional[OutEntry]:
    updated: Optional[OutEntry] = None
    entries: List[OutEntry] = []
    for entry in _entries(site, tank):
        if entry.id == entry_id:
            entry = entry.clone()
            for name in EDITABLE_FIELDS:
                if name not in changes or changes[name] is None:
                    continue
                value = changes[name]
                if name == "quantity":
                    value = _coerce_quantity(value)
                else:
                    value = str(value)
                setattr(entry, name, value)
            updated = entry
        entries.append(entry)
    if updated is not None:
        _replace_entries(site, tank, entries)
    return updated


def remove_manual_entry(site: Site, entry_id: str, tank: bool = False) -> bool:
    entries = _entries(site, tank)
    remaining = [entry for entry in entries if entry.id != entry_id]
    if len(remaining) == len(entries):
        return False
    _replace_entries(site, tank, remaining)
    return True


def clear_manual_entry(site: Site, entry_id: str, reference_year: int, tank: bool = False) -> Optional[OutEntry]:
    """Mark a manual line as serviced by stamping the reference year on it."""

    return update_manual_entry(site, entry_id, tank=tank, year=str(reference_year))
