from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, Optional

from flask import current_app, request
from flask_login import current_user

from ..engine.records import today


class PayloadError(ValueError):
    """Raised when a JSON request body is missing or malformed."""


def reference_date() -> date:
    """Today's date, with the year pinned by ``FIRETRACK_REFERENCE_YEAR``."""

    current = today()
    pinned = current_app.config.get("FIRETRACK_REFERENCE_YEAR")
    if not pinned:
        return current
    try:
        year = int(pinned)
    except (TypeError, ValueError):
        current_app.logger.warning("Ignoring non-numeric FIRETRACK_REFERENCE_YEAR %r", pinned)
        return current
    try:
        return current.replace(year=year)
    except ValueError:
        # 29 February in a non-leap reference year
        return current.replace(year=year, day=28)


def reference_year() -> int:
    return request.args.get("year", type=int) or reference_date().year


def current_actor_name() -> Optional[str]:
    if current_user and current_user.is_authenticated:
        return current_user.name
    return None


def payload(required: Iterable[str] = ()) -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PayloadError("Request body must be a JSON object")
    missing = [name for name in required if data.get(name) in (None, "")]
    if missing:
        raise PayloadError("Missing fields: " + ", ".join(missing))
    return data


def int_field(data: Dict[str, Any], name: str, default: Optional[int] = None) -> Optional[int]:
    value = data.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PayloadError(f"Field {name} must be an integer") from None
