from __future__ import annotations

from typing import Optional

from flask import current_app

from ..extensions import db
from ..models import AuditEntry


def record_audit(action: str, entity_type: str, entity_name: str, details: Optional[str] = None, actor: Optional[str] = None) -> AuditEntry:
    """Queue an audit entry on the session; the caller commits."""

    entry = AuditEntry(
        actor=actor or "System",
        action=action,
        entity_type=entity_type,
        entity_name=entity_name,
        details=details,
    )
    db.session.add(entry)
    current_app.logger.info("%s %s %s: %s", entry.actor, action, entity_name, details or "")
    return entry
