"""Pure builders behind the printable compliance reports."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .due import asset_status, out_entry_is_due, tank_is_due
from .records import Asset, DueState, DueStatus, OutEntry, ServiceType, Site

FORECAST_ALL = "all"
FORECAST_DUE_YEAR = "due_year"
FORECAST_OVERDUE = "overdue"
FORECAST_MODES = (FORECAST_ALL, FORECAST_DUE_YEAR, FORECAST_OVERDUE)


@dataclass
class ForecastRow:
    asset: Asset
    status: DueStatus


@dataclass
class OutReportRow:
    site: Site
    entry: OutEntry
    tank: bool = False


@dataclass
class SiteDueCounts:
    site_id: str
    extinguishers_out_due: int
    system_tanks_due: int


def site_matches(site: Site, site_id: Optional[str], tech: Optional[str]) -> bool:
    if site_id and site_id != "All" and site.id != site_id:
        return False
    if not tech or tech == "All":
        return True
    return tech in (site.technician_for(ServiceType.EXTINGUISHER), site.technician_for(ServiceType.SYSTEM))


def major_service_forecast(
    assets: Iterable[Asset],
    current_year: int,
    forecast_year: Optional[int] = None,
    mode: str = FORECAST_ALL,
) -> List[ForecastRow]:
    if mode not in FORECAST_MODES:
        mode = FORECAST_ALL
    rows = [ForecastRow(asset, asset_status(asset, current_year, forecast_year)) for asset in assets]
    if mode == FORECAST_DUE_YEAR:
        rows = [row for row in rows if row.status.state is DueState.TARGET]
    elif mode == FORECAST_OVERDUE:
        rows = [row for row in rows if row.status.state is DueState.OVERDUE]
    return sorted(rows, key=lambda row: row.status.next_due or 0)


def out_for_service_report(
    sites: Iterable[Site],
    current_year: int,
    site_id: Optional[str] = None,
    tech: Optional[str] = None,
) -> List[OutReportRow]:
    rows: List[OutReportRow] = []
    for site in sites:
        if not site_matches(site, site_id, tech):
            continue
        rows.extend(OutReportRow(site, entry) for entry in site.extinguishers_out if out_entry_is_due(entry, current_year))
        rows.extend(OutReportRow(site, tank, tank=True) for tank in site.system_tanks if tank_is_due(tank, current_year))
    return rows


def battery_replacement_report(assets: Iterable[Asset], site_id: Optional[str] = None) -> List[Asset]:
    return [
        asset
        for asset in assets
        if asset.battery_replacement_due and (not site_id or site_id == "All" or asset.site_id == site_id)
    ]


def site_due_counts(site: Site, current_year: int) -> SiteDueCounts:
    return SiteDueCounts(
        site_id=site.id,
        extinguishers_out_due=sum(1 for entry in site.extinguishers_out if out_entry_is_due(entry, current_year)),
        system_tanks_due=sum(1 for tank in site.system_tanks if tank_is_due(tank, current_year)),
    )
