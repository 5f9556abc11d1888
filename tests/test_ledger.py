from datetime import datetime
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from firetrack.engine import OutEntry, ServiceType, Site, find_completion, mark_complete, undo_complete
from firetrack.engine.ledger import completion_timestamp
from firetrack.engine.records import Appointment


def _site(**overrides):
    values = {
        "id": "s1",
        "name": "Maple Diner",
        "notes": "Back door code 1234",
        "service_months": [3],
        "system_months": [3, 9],
        "extinguishers_out": [OutEntry(id="e1", quantity=2, brand="Amerex", size="5lb", type="ABC", year="2018")],
        "system_tanks": [OutEntry(id="t1", brand="Ansul", type="Wet Chemical", year="2012")],
    }
    values.update(overrides)
    return Site(**values)


def test_mark_complete_is_idempotent_per_period():
    site = _site()
    first = mark_complete(site, "Extinguisher", 2024, 3, "Dan", completed_at="2024-03-14T09:00:00")
    assert first is not None
    assert mark_complete(site, ServiceType.EXTINGUISHER, 2024, 3, "Mike") is None
    assert len(site.completed_services) == 1
    assert site.completed_services[0].completed_by == "Dan"


def test_mark_complete_defaults_actor_to_unknown():
    site = _site()
    completion = mark_complete(site, "System", 2024, 3, completed_at="2024-03-01T12:00:00")
    assert completion.completed_by == "Unknown"


def test_undo_restores_the_period():
    site = _site()
    mark_complete(site, "System", 2024, 9, "Dan", completed_at="2024-09-02T10:00:00")
    assert undo_complete(site, "System", 2024, 9) is True
    assert find_completion(site, "System", 2024, 9) is None
    assert undo_complete(site, "System", 2024, 9) is False


def test_snapshots_are_independent_of_later_edits():
    site = _site()
    extinguisher = mark_complete(site, "Extinguisher", 2024, 3, "Dan", completed_at="2024-03-01T12:00:00")
    system = mark_complete(site, "System", 2024, 3, "Dan", completed_at="2024-03-01T12:00:00")

    site.extinguishers_out[0].quantity = 9
    site.system_tanks.append(OutEntry(id="t2"))
    site.notes = "changed"

    assert extinguisher.extinguishers_out_snapshot[0].quantity == 2
    assert extinguisher.system_tanks_snapshot is None
    assert extinguisher.notes_snapshot == "Back door code 1234"
    assert [entry.id for entry in system.system_tanks_snapshot] == ["t1"]
    assert system.extinguishers_out_snapshot is None


def test_timestamp_prefers_appointment_in_viewed_year():
    site = _site(appointment=Appointment(month=3, day=14, time="09:30"))
    assert completion_timestamp(site, 2024) == "2024-03-14T09:30:00"

    site = _site(appointment=Appointment(month=3, day=14, time=None))
    assert completion_timestamp(site, 2023) == "2023-03-14T12:00:00"


def test_timestamp_rolls_overflowing_days_forward():
    site = _site(appointment=Appointment(month=2, day=30, time=None))
    assert completion_timestamp(site, 2024) == "2024-03-01T12:00:00"
    assert completion_timestamp(site, 2023) == "2023-03-02T12:00:00"


def test_timestamp_falls_back_to_now():
    now = datetime(2024, 5, 6, 7, 8, 9)
    assert completion_timestamp(_site(), 2024, now=now) == "2024-05-06T07:08:09"
