from datetime import datetime

from flask import Blueprint, abort, current_app, jsonify, request
from flask_login import login_required

from ..engine import (
    ServiceType,
    assign_technician,
    complete_with_carry_over,
    set_appointment,
    toggle_month,
    tracker_items,
    undo_complete,
)
from ..engine.records import AppData, validate_month
from ..store import SqlAlchemyStore
from ..utils import PayloadError, current_actor_name, payload, record_audit, reference_date
from ..utils.context import int_field
from ..utils.serializers import asset_json, completion_json, site_json, tracker_item_json

bp = Blueprint("sites", __name__, url_prefix="/sites")


@bp.errorhandler(PayloadError)
@bp.errorhandler(ValueError)
def bad_request(error):
    return jsonify({"error": str(error)}), 400


def _load_site(store: SqlAlchemyStore, site_id: str):
    site = store.load_site(site_id)
    if site is None:
        abort(404)
    return site


@bp.route("/")
def index():
    data = SqlAlchemyStore().load()
    sites = data.sites if data else []
    return jsonify([site_json(site, include_ledger=False) for site in sites if not site.archived])


@bp.route("/tracker")
def tracker():
    today = reference_date()
    year = request.args.get("year", type=int, default=today.year)
    month = validate_month(request.args.get("month", type=int, default=today.month))
    data = SqlAlchemyStore().load()
    items = tracker_items(
        data.sites if data else [],
        year,
        month,
        today,
        tech=request.args.get("tech", "All"),
        show_completed=request.args.get("show_completed", "false").lower() == "true",
        search=request.args.get("q"),
    )
    return jsonify({"year": year, "month": month, "items": [tracker_item_json(item) for item in items]})


@bp.route("/<site_id>")
def detail(site_id: str):
    site = _load_site(SqlAlchemyStore(), site_id)
    return jsonify(site_json(site))


@bp.route("/<site_id>/technicians", methods=["POST"])
@login_required
def assign(site_id: str):
    data = payload(required=("discipline",))
    store = SqlAlchemyStore()
    site = _load_site(store, site_id)
    service_type = ServiceType.coerce(data["discipline"])
    months = assign_technician(site, service_type, data.get("name"), reference_date().month)
    record_audit(
        "Updated",
        "Customer",
        site.name,
        f"{service_type.value} technician set to {site.technician_for(service_type)}",
        actor=current_actor_name(),
    )
    store.save_site(site)
    return jsonify({"technician": site.technician_for(service_type), "months": months})


@bp.route("/<site_id>/months", methods=["POST"])
@login_required
def months(site_id: str):
    data = payload(required=("discipline", "month"))
    store = SqlAlchemyStore()
    site = _load_site(store, site_id)
    service_type = ServiceType.coerce(data["discipline"])
    result = toggle_month(site, service_type, int_field(data, "month"))
    store.save_site(site)
    return jsonify({"months": result})


@bp.route("/<site_id>/appointment", methods=["POST"])
@login_required
def appointment(site_id: str):
    data = payload()
    store = SqlAlchemyStore()
    site = _load_site(store, site_id)
    month = int_field(data, "month")
    if month is not None:
        validate_month(month)
    scheduled = set_appointment(site, month, int_field(data, "day"), data.get("time"), current_actor_name())
    store.save_site(site)
    return jsonify({"appointment": site_json(site, include_ledger=False)["appointment"], "scheduled": scheduled is not None})


@bp.route("/<site_id>/complete", methods=["POST"])
@login_required
def complete(site_id: str):
    data = payload(required=("type", "year", "month"))
    store = SqlAlchemyStore()
    site = _load_site(store, site_id)
    service_type = ServiceType.coerce(data["type"])
    year = int_field(data, "year")
    month = int_field(data, "month")
    actor = current_actor_name()

    created = complete_with_carry_over(
        site,
        service_type,
        year,
        month,
        actor,
        completed_at=data.get("completed_at") or None,
        viewed_month=int_field(data, "viewed_month"),
        now=datetime.now(),
    )
    for completion in created:
        record_audit(
            "Cleared",
            "Customer",
            site.name,
            f"{service_type.value} service cycle for {completion.month}/{completion.year}",
            actor=actor,
        )
    store.save_site(site)
    current_app.logger.info("%s completed %d period(s) on %s", actor, len(created), site.id)
    return jsonify({"created": [completion_json(item) for item in created]})


@bp.route("/<site_id>/undo", methods=["POST"])
@login_required
def undo(site_id: str):
    data = payload(required=("type", "year", "month"))
    store = SqlAlchemyStore()
    site = _load_site(store, site_id)
    service_type = ServiceType.coerce(data["type"])
    year = int_field(data, "year")
    month = int_field(data, "month")

    removed = undo_complete(site, service_type, year, month)
    if removed:
        record_audit(
            "Restored",
            "Customer",
            site.name,
            f"{service_type.value} service cycle for {month}/{year}",
            actor=current_actor_name(),
        )
    store.save_site(site)
    return jsonify({"removed": removed})


@bp.route("/<site_id>/assets/<asset_id>/service", methods=["POST"])
@login_required
def service_asset(site_id: str, asset_id: str):
    """Record a major service on one asset (the explicit "service & save")."""

    data = payload()
    store = SqlAlchemyStore()
    site = _load_site(store, site_id)
    asset = next((item for item in store.load_assets(site.id) if item.id == asset_id), None)
    if asset is None:
        abort(404)
    year = int_field(data, "year", default=reference_date().year)
    asset.last_service_date = str(year)
    record_audit("Updated", "Asset", f"{site.name} #{asset.unit_number or asset.id}", f"Major service {year}", actor=current_actor_name())
    store.save(AppData(assets=[asset]))
    return jsonify(asset_json(asset))
