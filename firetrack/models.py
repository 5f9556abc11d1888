import uuid
from datetime import datetime
from typing import Optional

from flask import current_app, jsonify
from flask_login import UserMixin
from sqlalchemy import func

from .extensions import db, login_manager


def _new_id() -> str:
    return uuid.uuid4().hex


class Technician(UserMixin, db.Model):
    __tablename__ = "technicians"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:  # pragma: no cover - repr helper
        return f"<Technician {self.name}>"


@login_manager.user_loader
def load_user(user_id: str) -> Optional["Technician"]:
    if not user_id:
        return None
    return db.session.get(Technician, int(user_id))


@login_manager.request_loader
def load_actor(request) -> Optional["Technician"]:
    name = (request.headers.get(current_app.config["ACTOR_HEADER"]) or "").strip()
    if not name:
        return None
    technician = Technician.query.filter(func.lower(Technician.name) == name.lower()).first()
    if technician is None:
        technician = Technician(name=name)
        db.session.add(technician)
        db.session.commit()
        current_app.logger.info("Registered technician %s", name)
    return technician


@login_manager.unauthorized_handler
def unauthorized():
    header = current_app.config["ACTOR_HEADER"]
    return jsonify({"error": f"Missing {header} header"}), 401


class Site(db.Model):
    __tablename__ = "sites"

    id = db.Column(db.String(64), primary_key=True, default=_new_id)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), default="")
    phone = db.Column(db.String(40))
    contact_person = db.Column(db.String(120))
    notes = db.Column(db.Text, default="")
    service_months = db.Column(db.JSON, default=list)
    system_months = db.Column(db.JSON, default=list)
    extinguisher_tech = db.Column(db.String(120))
    system_tech = db.Column(db.String(120))
    assigned_technician = db.Column(db.String(120))
    appointment_month = db.Column(db.Integer)
    appointment_day = db.Column(db.Integer)
    appointment_time = db.Column(db.String(5))
    scheduled_by = db.Column(db.String(120))
    archived = db.Column(db.Boolean, default=False)

    assets = db.relationship(
        "Asset",
        back_populates="site",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )
    completions = db.relationship(
        "ServiceCompletion",
        back_populates="site",
        cascade="all, delete-orphan",
        order_by="ServiceCompletion.id",
    )
    out_entries = db.relationship(
        "OutEntry",
        back_populates="site",
        cascade="all, delete-orphan",
        order_by="OutEntry.position",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Site {self.name}>"


class Asset(db.Model):
    __tablename__ = "assets"

    id = db.Column(db.String(64), primary_key=True, default=_new_id)
    site_id = db.Column(db.String(64), db.ForeignKey("sites.id"), nullable=False)
    type = db.Column(db.String(80), nullable=False)
    brand = db.Column(db.String(80))
    size = db.Column(db.String(40))
    last_service_date = db.Column(db.String(10))
    location = db.Column(db.String(255), default="")
    unit_number = db.Column(db.String(20))
    battery_type = db.Column(db.String(80))
    battery_replacement_due = db.Column(db.Boolean, default=False)
    sort_order = db.Column(db.Integer)

    site = db.relationship("Site", back_populates="assets")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Asset {self.type} {self.brand} {self.size}>"


class ServiceCompletion(db.Model):
    __tablename__ = "service_completions"
    __table_args__ = (
        db.UniqueConstraint("site_id", "service_type", "year", "month", name="uq_completion_period"),
    )

    id = db.Column(db.Integer, primary_key=True)
    site_id = db.Column(db.String(64), db.ForeignKey("sites.id"), nullable=False)
    service_type = db.Column(db.String(20), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Integer, nullable=False)
    completed_date = db.Column(db.String(40), nullable=False)
    completed_by = db.Column(db.String(120), nullable=False)
    notes_snapshot = db.Column(db.Text)
    extinguishers_out_snapshot = db.Column(db.JSON)
    system_tanks_snapshot = db.Column(db.JSON)

    site = db.relationship("Site", back_populates="completions")


class OutEntry(db.Model):
    __tablename__ = "out_entries"

    EXTINGUISHER = "extinguisher"
    TANK = "tank"

    __table_args__ = (db.UniqueConstraint("site_id", "entry_id", name="uq_out_entry"),)

    id = db.Column(db.Integer, primary_key=True)
    entry_id = db.Column(db.String(64), nullable=False, default=_new_id)
    site_id = db.Column(db.String(64), db.ForeignKey("sites.id"), nullable=False)
    kind = db.Column(db.String(20), nullable=False, default=EXTINGUISHER)
    position = db.Column(db.Integer, default=0)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    brand = db.Column(db.String(80), default="")
    size = db.Column(db.String(40), default="")
    type = db.Column(db.String(80), default="")
    year = db.Column(db.String(10), default="")
    supersedes_key = db.Column(db.String(255))

    site = db.relationship("Site", back_populates="out_entries")


class AuditEntry(db.Model):
    __tablename__ = "audit_entries"

    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)
    actor = db.Column(db.String(120), nullable=False)
    action = db.Column(db.String(20), nullable=False)
    entity_type = db.Column(db.String(20), nullable=False)
    entity_name = db.Column(db.String(255), nullable=False)
    details = db.Column(db.Text)
