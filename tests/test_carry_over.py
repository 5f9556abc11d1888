from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from firetrack.engine import Site, complete_with_carry_over, find_completion, match_technician
from firetrack.engine.carry_over import is_assignee

STAMP = "2024-03-14T09:00:00"


def _site(**overrides):
    values = {"id": "s1", "name": "Maple Diner", "service_months": [1, 2, 3], "extinguisher_tech": "Dan Morse"}
    values.update(overrides)
    return Site(**values)


@pytest.mark.parametrize("actor", ["Dan Morse", "dan morse", "Dan", "dan smith"])
def test_assignee_catches_up_every_missed_month(actor):
    site = _site()
    created = complete_with_carry_over(site, "Extinguisher", 2024, 3, actor, completed_at=STAMP)

    assert [item.month for item in created] == [3, 1, 2]
    assert {item.completed_date for item in created} == {STAMP}
    assert {item.completed_by for item in created} == {actor}


def test_other_technician_completes_only_the_selected_month():
    site = _site()
    created = complete_with_carry_over(site, "Extinguisher", 2024, 3, "Mike Lee", completed_at=STAMP)
    assert [item.month for item in created] == [3]
    assert find_completion(site, "Extinguisher", 2024, 1) is None


def test_unassigned_site_never_carries():
    site = _site(extinguisher_tech="None")
    created = complete_with_carry_over(site, "Extinguisher", 2024, 3, "None", completed_at=STAMP)
    assert len(created) == 1


def test_no_carry_when_a_later_month_is_in_view():
    site = _site()
    created = complete_with_carry_over(site, "Extinguisher", 2024, 2, "Dan", completed_at=STAMP, viewed_month=3)
    assert [item.month for item in created] == [2]


def test_existing_completions_are_kept():
    site = _site()
    complete_with_carry_over(site, "Extinguisher", 2024, 1, "Mike", completed_at="2024-01-05T08:00:00")
    created = complete_with_carry_over(site, "Extinguisher", 2024, 3, "Dan", completed_at=STAMP)

    assert [item.month for item in created] == [3, 2]
    assert find_completion(site, "Extinguisher", 2024, 1).completed_by == "Mike"


def test_carry_over_uses_discipline_technician():
    site = _site(system_months=[3, 9], system_tech="Mike Lee")
    created = complete_with_carry_over(site, "System", 2024, 9, "Mike", completed_at=STAMP)
    assert [item.month for item in created] == [9, 3]
    assert find_completion(site, "Extinguisher", 2024, 3) is None


def test_match_technician_order():
    roster = ["Dan Morse", "Mike", "Sara Quinn"]
    assert match_technician("dan morse", roster) == "Dan Morse"
    assert match_technician("Mike Lee", roster) == "Mike"
    assert match_technician("Sara", roster) == "Sara Quinn"
    assert match_technician("Zoe", roster) is None
    assert match_technician("", roster) is None


def test_is_assignee_ignores_placeholder():
    assert is_assignee("Dan", "Dan Morse")
    assert not is_assignee("Dan", "None")
    assert not is_assignee("", "Dan")


def test_repeat_completion_by_assignee_is_a_no_op():
    site = _site()
    complete_with_carry_over(site, "Extinguisher", 2024, 3, "Mike", completed_at=STAMP)

    created = complete_with_carry_over(site, "Extinguisher", 2024, 3, "Dan", completed_at=STAMP)

    assert created == []
    assert [item.month for item in site.completed_services] == [3]
    assert site.completed_services[0].completed_by == "Mike"
