"""JSON shapes returned by the blueprints."""
from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from ..engine.out_service import OutGroup, OutLine
from ..engine.records import Asset, DueStatus, OutEntry, ServiceCompletion, Site
from ..engine.reports import ForecastRow, OutReportRow
from ..engine.schedule import TrackerItem


def entry_json(entry: OutEntry) -> dict:
    return asdict(entry)


def completion_json(completion: Optional[ServiceCompletion]) -> Optional[dict]:
    if completion is None:
        return None
    data = asdict(completion)
    data["type"] = completion.type.value
    return data


def site_json(site: Site, include_ledger: bool = True) -> dict:
    data = {
        "id": site.id,
        "name": site.name,
        "address": site.address,
        "service_months": list(site.service_months),
        "system_months": list(site.system_months),
        "extinguisher_tech": site.technician_for("Extinguisher"),
        "system_tech": site.technician_for("System"),
        "notes": site.notes,
        "appointment": asdict(site.appointment) if site.appointment else None,
        "scheduled_by": site.scheduled_by,
        "extinguishers_out": [entry_json(entry) for entry in site.extinguishers_out],
        "system_tanks": [entry_json(entry) for entry in site.system_tanks],
    }
    if include_ledger:
        data["completed_services"] = [completion_json(item) for item in site.completed_services]
    return data


def status_json(status: DueStatus) -> dict:
    return {"state": status.state.value, "next_due": status.next_due, "label": status.label}


def asset_json(asset: Asset) -> dict:
    return asdict(asset)


def line_json(line: OutLine) -> dict:
    data = asdict(line)
    data["actions"] = list(line.actions)
    return data


def group_json(group: OutGroup) -> dict:
    return {
        "key": group.key,
        "brand": group.brand,
        "size": group.size,
        "type": group.type,
        "total_quantity": group.total_quantity,
        "origins": list(group.origins),
        "lines": [line_json(line) for line in group.lines],
    }


def tracker_item_json(item: TrackerItem) -> dict:
    return {
        "site_id": item.site.id,
        "site_name": item.site.name,
        "kind": item.kind,
        "technician": item.technician,
        "month": item.month,
        "overdue": item.overdue,
        "is_complete": item.is_complete,
        "disciplines": [
            {
                "type": status.type.value,
                "is_complete": status.is_complete,
                "completion": completion_json(status.completion),
            }
            for status in item.disciplines
        ],
    }


def forecast_row_json(row: ForecastRow) -> dict:
    data = asset_json(row.asset)
    data["status"] = status_json(row.status)
    return data


def out_report_row_json(row: OutReportRow) -> dict:
    return {
        "site_id": row.site.id,
        "site_name": row.site.name,
        "kind": "tank" if row.tank else "extinguisher",
        "entry": entry_json(row.entry),
    }
