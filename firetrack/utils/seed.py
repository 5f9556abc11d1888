from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from flask import current_app

from ..engine import complete_with_carry_over
from ..engine.records import AppData, Asset, Site, SystemTankEntry
from ..extensions import db
from ..models import Site as SiteRow
from ..models import Technician
from ..store import SqlAlchemyStore
from .context import reference_date
from .demo_data import ASSET_DATA, SITE_DATA, TANK_DATA, TECHNICIAN_NAMES, month_list


def register_seed_commands(app):
    @app.cli.command("seed-demo")
    def seed_demo():
        """Rebuild the schema and load the demo sites, assets and ledger."""

        populate_demo_data(reset=True, skip_if_exists=False)
        data = SqlAlchemyStore().load()
        completions = sum(len(site.completed_services) for site in data.sites) if data else 0
        current_app.logger.info(
            "Seeded %d sites, %d assets and %d completed periods",
            len(data.sites) if data else 0,
            len(data.assets) if data else 0,
            completions,
        )


def populate_demo_data(reset: bool = False, skip_if_exists: bool = True) -> bool:
    """Load the demo customers into the store.

    Five Vermont sites with their extinguishers and lights, the system tanks
    out for recharge and the roster of three technicians are written. Every
    extinguisher period of the reference year up to March that has already
    passed is completed by the assigned technician, so the tracker opens with
    a realistic ledger.

    ``reset`` drops and recreates the schema first. With ``skip_if_exists``
    nothing is written when any site is already stored. Returns whether data
    was written.
    """

    if reset:
        db.drop_all()
        db.create_all()

    if skip_if_exists and SiteRow.query.count() > 0:
        return False

    technicians = _ensure_technicians()
    data = _build_demo_data()
    _complete_first_quarter(data)
    SqlAlchemyStore().save(data)

    current_app.logger.debug(
        "Demo seed complete: %s technicians=%d sites=%d assets=%d",
        "reset" if reset else "initial", len(technicians), len(data.sites), len(data.assets)
    )
    return True


def _ensure_technicians() -> List[Technician]:
    technicians: List[Technician] = []
    for name in TECHNICIAN_NAMES:
        technician = Technician.query.filter_by(name=name).first()
        if technician is None:
            technician = Technician(name=name)
            db.session.add(technician)
        technicians.append(technician)
    db.session.flush()
    return technicians


def _build_demo_data() -> AppData:
    sites: Dict[str, Site] = {}
    for record in SITE_DATA:
        sites[record["Code"]] = Site(
            id=record["Code"].lower(),
            name=record["Name"],
            address=record["Address"],
            service_months=month_list(record["ServiceMonths"]),
            system_months=month_list(record["SystemMonths"]),
            extinguisher_tech=record["ExtinguisherTech"] or None,
            system_tech=record["SystemTech"] or None,
            notes=record["Notes"] or "",
        )

    for index, record in enumerate(TANK_DATA, start=1):
        site = sites[record["Site"]]
        site.system_tanks.append(
            SystemTankEntry(
                id=f"tank-{index}",
                quantity=int(record["Quantity"]),
                brand=record["Brand"],
                size=record["Size"],
                type=record["Type"],
                year=record["Year"],
            )
        )

    assets: List[Asset] = []
    for record in ASSET_DATA:
        site = sites[record["Site"]]
        assets.append(
            Asset(
                id=f"{site.id}-{record['Unit']}",
                site_id=site.id,
                unit_number=record["Unit"],
                location=record["Location"],
                type=record["Type"],
                brand=record["Brand"] or None,
                size=record["Size"] or None,
                last_service_date=record["LastService"] or None,
                battery_replacement_due=record["BatteryDue"] == "yes",
                sort_order=int(record["Unit"]),
            )
        )
    return AppData(sites=list(sites.values()), assets=assets)


def _complete_first_quarter(data: AppData) -> None:
    today = reference_date()
    for site in data.sites:
        for month in site.service_months:
            if month <= min(3, today.month - 1):
                complete_with_carry_over(
                    site,
                    "Extinguisher",
                    today.year,
                    month,
                    site.technician_for("Extinguisher"),
                    now=datetime(today.year, month, 15, 12),
                )
