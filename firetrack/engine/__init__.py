"""Service lifecycle and compliance tracking engine.

Pure functions over :mod:`firetrack.engine.records`; nothing here touches the
database or the request cycle.
"""

from .carry_over import complete_with_carry_over, is_assignee, match_technician
from .due import asset_is_due, asset_status, classify, is_due, parse_year
from .intervals import interval_for, tank_interval_for
from .ledger import completion_timestamp, find_completion, mark_complete, undo_complete
from .out_service import (
    add_manual_entry,
    auto_synced_lines,
    clear_auto_line,
    clear_manual_entry,
    extinguisher_groups,
    remove_manual_entry,
    tank_groups,
    update_manual_entry,
)
from .records import (
    AppData,
    Appointment,
    Asset,
    DueState,
    DueStatus,
    InvalidMonthError,
    OutEntry,
    ServiceCompletion,
    ServiceType,
    Site,
    SystemTankEntry,
    UnknownServiceTypeError,
)
from .schedule import assign_technician, is_active, set_appointment, toggle_month, tracker_items

__all__ = [
    "AppData",
    "Appointment",
    "Asset",
    "DueState",
    "DueStatus",
    "InvalidMonthError",
    "OutEntry",
    "ServiceCompletion",
    "ServiceType",
    "Site",
    "SystemTankEntry",
    "UnknownServiceTypeError",
    "add_manual_entry",
    "asset_is_due",
    "asset_status",
    "assign_technician",
    "auto_synced_lines",
    "classify",
    "clear_auto_line",
    "clear_manual_entry",
    "complete_with_carry_over",
    "completion_timestamp",
    "extinguisher_groups",
    "find_completion",
    "interval_for",
    "is_active",
    "is_assignee",
    "is_due",
    "mark_complete",
    "match_technician",
    "parse_year",
    "remove_manual_entry",
    "set_appointment",
    "tank_groups",
    "tank_interval_for",
    "toggle_month",
    "tracker_items",
    "undo_complete",
]
