from flask import Blueprint, abort, current_app, jsonify, request
from flask_login import login_required

from ..engine import (
    add_manual_entry,
    clear_auto_line,
    clear_manual_entry,
    extinguisher_groups,
    remove_manual_entry,
    tank_groups,
    update_manual_entry,
)
from ..engine.out_service import EDITABLE_FIELDS
from ..engine.reports import site_due_counts
from ..store import SqlAlchemyStore
from ..utils import PayloadError, current_actor_name, payload, record_audit, reference_year
from ..utils.serializers import entry_json, group_json

bp = Blueprint("out_service", __name__, url_prefix="/out-service")


@bp.errorhandler(PayloadError)
def bad_request(error):
    return jsonify({"error": str(error)}), 400


def _load(store: SqlAlchemyStore, site_id: str):
    site = store.load_site(site_id)
    if site is None:
        abort(404)
    return site


def _is_tank() -> bool:
    return request.args.get("kind", "extinguisher") == "tank"


@bp.route("/<site_id>")
def view(site_id: str):
    store = SqlAlchemyStore()
    site = _load(store, site_id)
    year = reference_year()
    include_completed = request.args.get("include_completed", "true").lower() != "false"
    brand = current_app.config["DEFAULT_EXTINGUISHER_BRAND"]
    counts = site_due_counts(site, year)
    return jsonify(
        {
            "site_id": site.id,
            "year": year,
            "extinguishers": [
                group_json(group)
                for group in extinguisher_groups(site, store.load_assets(site.id), year, include_completed, brand)
            ],
            "tanks": [group_json(group) for group in tank_groups(site, year, include_completed)],
            "extinguishers_out_due": counts.extinguishers_out_due,
            "system_tanks_due": counts.system_tanks_due,
        }
    )


@bp.route("/<site_id>/clear", methods=["POST"])
@login_required
def clear(site_id: str):
    data = payload(required=("key",))
    store = SqlAlchemyStore()
    site = _load(store, site_id)
    year = reference_year()
    entry = clear_auto_line(
        site,
        data["key"],
        store.load_assets(site.id),
        year,
        current_app.config["DEFAULT_EXTINGUISHER_BRAND"],
    )
    if entry is None:
        return jsonify({"error": "No due auto line with that key"}), 404
    record_audit("Cleared", "Customer", site.name, f"Out-for-service line {data['key']}", actor=current_actor_name())
    store.save_site(site)
    return jsonify(entry_json(entry)), 201


@bp.route("/<site_id>/entries", methods=["POST"])
@login_required
def add_entry(site_id: str):
    data = payload()
    store = SqlAlchemyStore()
    site = _load(store, site_id)
    fields = {name: data.get(name) for name in EDITABLE_FIELDS}
    entry = add_manual_entry(site, tank=_is_tank(), **fields)
    store.save_site(site)
    return jsonify(entry_json(entry)), 201


@bp.route("/<site_id>/entries/<entry_id>", methods=["PATCH"])
@login_required
def edit_entry(site_id: str, entry_id: str):
    data = payload()
    store = SqlAlchemyStore()
    site = _load(store, site_id)
    entry = update_manual_entry(site, entry_id, tank=_is_tank(), **{name: data.get(name) for name in EDITABLE_FIELDS})
    if entry is None:
        abort(404)
    store.save_site(site)
    return jsonify(entry_json(entry))


@bp.route("/<site_id>/entries/<entry_id>", methods=["DELETE"])
@login_required
def delete_entry(site_id: str, entry_id: str):
    store = SqlAlchemyStore()
    site = _load(store, site_id)
    if not remove_manual_entry(site, entry_id, tank=_is_tank()):
        abort(404)
    store.save_site(site)
    return jsonify({"deleted": entry_id})


@bp.route("/<site_id>/entries/<entry_id>/clear", methods=["POST"])
@login_required
def clear_entry(site_id: str, entry_id: str):
    store = SqlAlchemyStore()
    site = _load(store, site_id)
    entry = clear_manual_entry(site, entry_id, reference_year(), tank=_is_tank())
    if entry is None:
        abort(404)
    record_audit("Cleared", "Customer", site.name, f"Out-for-service entry {entry_id}", actor=current_actor_name())
    store.save_site(site)
    return jsonify(entry_json(entry))
