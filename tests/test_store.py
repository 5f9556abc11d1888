from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from firetrack import create_app
from firetrack.config import TestingConfig
from firetrack.engine import AppData, Asset, OutEntry, Site, mark_complete, undo_complete
from firetrack.engine.records import Appointment, SystemTankEntry
from firetrack.extensions import db
from firetrack.models import ServiceCompletion, Technician
from firetrack.store import SqlAlchemyStore
from firetrack.utils.seed import populate_demo_data


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


def _site():
    site = Site(
        id="s1",
        name="Maple Diner",
        address="12 Maple St, Burlington, VT",
        service_months=[3],
        system_months=[3, 9],
        extinguisher_tech="Dan Morse",
        system_tech="Dan Morse",
        notes="Hood over fryer",
        appointment=Appointment(month=3, day=14, time="09:30"),
        scheduled_by="Dan Morse",
        extinguishers_out=[OutEntry(id="m1", quantity=2, brand="Amerex", size="5lb", type="ABC", year="2018")],
        system_tanks=[SystemTankEntry(id="t1", brand="Ansul", size="3 gal", type="Wet Chemical", year="2012")],
    )
    mark_complete(site, "Extinguisher", 2024, 3, "Dan Morse")
    mark_complete(site, "System", 2024, 3, "Dan Morse")
    return site


def test_empty_store_loads_nothing(app):
    assert SqlAlchemyStore().load() is None


def test_saved_site_reloads_with_ledger_and_snapshots(app):
    store = SqlAlchemyStore()
    asset = Asset(id="a1", site_id="s1", type="ABC", brand="Amerex", size="5lb", last_service_date="2018")
    store.save(AppData(sites=[_site()], assets=[asset]))

    data = store.load()
    site = data.site("s1")
    assert site.appointment == Appointment(month=3, day=14, time="09:30")
    assert [(item.type.value, item.year, item.month) for item in site.completed_services] == [
        ("Extinguisher", 2024, 3),
        ("System", 2024, 3),
    ]
    extinguisher = site.completed_services[0]
    assert extinguisher.completed_date == "2024-03-14T09:30:00"
    assert [entry.id for entry in extinguisher.extinguishers_out_snapshot] == ["m1"]
    assert extinguisher.system_tanks_snapshot is None
    assert isinstance(site.system_tanks[0], SystemTankEntry)
    assert data.assets_for("s1") == [asset]


def test_last_write_wins_for_ledger_and_out_lists(app):
    store = SqlAlchemyStore()
    store.save_site(_site())

    site = store.load_site("s1")
    undo_complete(site, "System", 2024, 3)
    site.extinguishers_out = []
    site.extinguishers_out.append(OutEntry(id="m2", type="CO2", year="2024"))
    site.extinguishers_out[0].quantity = 3
    store.save_site(site)

    reloaded = store.load_site("s1")
    assert [item.type.value for item in reloaded.completed_services] == ["Extinguisher"]
    assert [(entry.id, entry.quantity) for entry in reloaded.extinguishers_out] == [("m2", 3)]
    assert reloaded.completed_services[0].extinguishers_out_snapshot[0].id == "m1"
    assert ServiceCompletion.query.count() == 1


def test_out_entry_ids_are_scoped_per_site(app):
    store = SqlAlchemyStore()
    other = Site(id="s2", name="Lodge", extinguishers_out=[OutEntry(id="m1", type="CO2")])
    store.save(AppData(sites=[_site(), other]))
    assert store.load_site("s2").extinguishers_out[0].type == "CO2"
    assert store.load_site("s1").extinguishers_out[0].type == "ABC"


def test_demo_seed_is_skipped_when_data_exists(app):
    assert populate_demo_data(reset=True, skip_if_exists=False) is True
    assert populate_demo_data() is False

    data = SqlAlchemyStore().load()
    assert len(data.sites) == 5
    assert Technician.query.count() == 3
    assert data.site("s01").system_tanks[0].type == "Wet Chemical"
