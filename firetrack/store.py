"""Persisted store backing the engine.

The engine treats persistence as an opaque ``load()`` / ``save()`` pair over
:class:`~firetrack.engine.records.AppData`. Saving is last-write-wins: the
ledger and manual out-lists of each saved site replace the stored ones.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from flask import current_app

from .engine import records
from .extensions import db
from .models import Asset, OutEntry, ServiceCompletion, Site


def _entry_to_dict(entry: records.OutEntry) -> dict:
    data = {
        "id": entry.id,
        "quantity": entry.quantity,
        "brand": entry.brand,
        "size": entry.size,
        "type": entry.type,
        "year": entry.year,
    }
    if entry.supersedes_key:
        data["supersedes_key"] = entry.supersedes_key
    return data


def _entry_from_dict(data: dict, tank: bool = False) -> records.OutEntry:
    entry_type = records.SystemTankEntry if tank else records.OutEntry
    return entry_type(
        id=str(data.get("id") or ""),
        quantity=int(data.get("quantity") or 1),
        brand=data.get("brand") or "",
        size=data.get("size") or "",
        type=data.get("type") or "",
        year=str(data.get("year") or ""),
        supersedes_key=data.get("supersedes_key"),
    )


def _snapshot_to_json(entries: Optional[List[records.OutEntry]]) -> Optional[list]:
    if entries is None:
        return None
    return [_entry_to_dict(entry) for entry in entries]


def _snapshot_from_json(payload: Optional[list], tank: bool = False) -> Optional[List[records.OutEntry]]:
    if payload is None:
        return None
    return [_entry_from_dict(item, tank=tank) for item in payload]


def asset_to_record(asset: Asset) -> records.Asset:
    return records.Asset(
        id=asset.id,
        site_id=asset.site_id,
        type=asset.type,
        brand=asset.brand,
        size=asset.size,
        last_service_date=asset.last_service_date,
        location=asset.location or "",
        unit_number=asset.unit_number,
        battery_type=asset.battery_type,
        battery_replacement_due=bool(asset.battery_replacement_due),
        sort_order=asset.sort_order,
    )


def completion_to_record(row: ServiceCompletion) -> records.ServiceCompletion:
    return records.ServiceCompletion(
        type=records.ServiceType.coerce(row.service_type),
        year=row.year,
        month=row.month,
        completed_date=row.completed_date,
        completed_by=row.completed_by,
        notes_snapshot=row.notes_snapshot,
        extinguishers_out_snapshot=_snapshot_from_json(row.extinguishers_out_snapshot),
        system_tanks_snapshot=_snapshot_from_json(row.system_tanks_snapshot, tank=True),
    )


def site_to_record(site: Site) -> records.Site:
    appointment = None
    if site.appointment_month and site.appointment_day:
        appointment = records.Appointment(
            month=site.appointment_month,
            day=site.appointment_day,
            time=site.appointment_time,
        )
    return records.Site(
        id=site.id,
        name=site.name,
        address=site.address or "",
        service_months=sorted(site.service_months or []),
        system_months=sorted(site.system_months or []),
        extinguisher_tech=site.extinguisher_tech,
        system_tech=site.system_tech,
        assigned_technician=site.assigned_technician,
        notes=site.notes or "",
        appointment=appointment,
        scheduled_by=site.scheduled_by,
        completed_services=[completion_to_record(row) for row in site.completions],
        extinguishers_out=[
            _entry_from_dict(_row_to_dict(row)) for row in site.out_entries if row.kind == OutEntry.EXTINGUISHER
        ],
        system_tanks=[
            _entry_from_dict(_row_to_dict(row), tank=True) for row in site.out_entries if row.kind == OutEntry.TANK
        ],
        archived=bool(site.archived),
    )


def _row_to_dict(row: OutEntry) -> dict:
    return {
        "id": row.entry_id,
        "quantity": row.quantity,
        "brand": row.brand,
        "size": row.size,
        "type": row.type,
        "year": row.year,
        "supersedes_key": row.supersedes_key,
    }


class SqlAlchemyStore:
    def __init__(self, session=None):
        self.session = session or db.session

    def load(self) -> Optional[records.AppData]:
        sites = Site.query.order_by(Site.name).all()
        assets = Asset.query.order_by(Asset.site_id, Asset.sort_order, Asset.id).all()
        if not sites and not assets:
            return None
        return records.AppData(
            sites=[site_to_record(site) for site in sites],
            assets=[asset_to_record(asset) for asset in assets],
        )

    def load_site(self, site_id: str) -> Optional[records.Site]:
        site = self.session.get(Site, site_id)
        if site is None:
            return None
        return site_to_record(site)

    def load_assets(self, site_id: Optional[str] = None) -> List[records.Asset]:
        query = Asset.query
        if site_id is not None:
            query = query.filter_by(site_id=site_id)
        return [asset_to_record(asset) for asset in query.order_by(Asset.sort_order, Asset.id).all()]

    def save(self, data: records.AppData) -> None:
        try:
            for site in data.sites:
                self._write_site(site)
            for asset in data.assets:
                self._write_asset(asset)
            self.session.commit()
        except Exception:
            current_app.logger.exception("Failed to persist application data")
            self.session.rollback()
            raise

    def save_site(self, site: records.Site) -> None:
        self.save(records.AppData(sites=[site]))

    def _write_asset(self, record: records.Asset) -> None:
        row = self.session.get(Asset, record.id)
        if row is None:
            row = Asset(id=record.id)
            self.session.add(row)
        row.site_id = record.site_id
        row.type = record.type
        row.brand = record.brand
        row.size = record.size
        row.last_service_date = record.last_service_date
        row.location = record.location
        row.unit_number = record.unit_number
        row.battery_type = record.battery_type
        row.battery_replacement_due = record.battery_replacement_due
        row.sort_order = record.sort_order

    def _write_site(self, record: records.Site) -> None:
        row = self.session.get(Site, record.id)
        if row is None:
            row = Site(id=record.id)
            self.session.add(row)
        row.name = record.name
        row.address = record.address
        row.notes = record.notes
        row.service_months = list(record.service_months)
        row.system_months = list(record.system_months)
        row.extinguisher_tech = record.extinguisher_tech
        row.system_tech = record.system_tech
        row.assigned_technician = record.assigned_technician
        row.appointment_month = record.appointment.month if record.appointment else None
        row.appointment_day = record.appointment.day if record.appointment else None
        row.appointment_time = record.appointment.time if record.appointment else None
        row.scheduled_by = record.scheduled_by
        row.archived = record.archived
        self._write_completions(row, record.completed_services)
        self._write_out_entries(row, record.extinguishers_out, record.system_tanks)

    def _write_completions(self, row: Site, completions: Iterable[records.ServiceCompletion]) -> None:
        existing: Dict[tuple, ServiceCompletion] = {
            (item.service_type, item.year, item.month): item for item in row.completions
        }
        kept = []
        for completion in completions:
            key = (completion.type.value, completion.year, completion.month)
            item = existing.pop(key, None)
            if item is None:
                item = ServiceCompletion(service_type=key[0], year=key[1], month=key[2])
            item.completed_date = completion.completed_date
            item.completed_by = completion.completed_by
            item.notes_snapshot = completion.notes_snapshot
            item.extinguishers_out_snapshot = _snapshot_to_json(completion.extinguishers_out_snapshot)
            item.system_tanks_snapshot = _snapshot_to_json(completion.system_tanks_snapshot)
            kept.append(item)
        row.completions = kept

    def _write_out_entries(self, row: Site, extinguishers, tanks) -> None:
        existing: Dict[str, OutEntry] = {item.entry_id: item for item in row.out_entries}
        kept = []
        position = 0
        for kind, entries in ((OutEntry.EXTINGUISHER, extinguishers), (OutEntry.TANK, tanks)):
            for entry in entries:
                item = existing.pop(entry.id, None)
                if item is None:
                    item = OutEntry(entry_id=entry.id)
                item.kind = kind
                item.position = position
                item.quantity = entry.quantity
                item.brand = entry.brand
                item.size = entry.size
                item.type = entry.type
                item.year = entry.year
                item.supersedes_key = entry.supersedes_key
                kept.append(item)
                position += 1
        row.out_entries = kept
