from flask import Blueprint, jsonify, request

from ..engine.reports import (
    FORECAST_ALL,
    battery_replacement_report,
    major_service_forecast,
    out_for_service_report,
)
from ..store import SqlAlchemyStore
from ..utils import reference_date
from ..utils.serializers import asset_json, forecast_row_json, out_report_row_json

bp = Blueprint("reports", __name__, url_prefix="/reports")


def _site_assets(data, site_id):
    if data is None:
        return []
    if site_id and site_id != "All":
        return data.assets_for(site_id)
    return data.assets


@bp.route("/forecast")
def forecast():
    current_year = reference_date().year
    forecast_year = request.args.get("year", type=int, default=current_year)
    mode = request.args.get("mode", FORECAST_ALL)
    data = SqlAlchemyStore().load()
    rows = major_service_forecast(_site_assets(data, request.args.get("site")), current_year, forecast_year, mode)
    return jsonify({"current_year": current_year, "forecast_year": forecast_year, "mode": mode, "rows": [forecast_row_json(row) for row in rows]})


@bp.route("/out-for-service")
def out_for_service():
    current_year = reference_date().year
    data = SqlAlchemyStore().load()
    rows = out_for_service_report(
        data.sites if data else [],
        current_year,
        site_id=request.args.get("site"),
        tech=request.args.get("tech"),
    )
    return jsonify({"current_year": current_year, "rows": [out_report_row_json(row) for row in rows]})


@bp.route("/batteries")
def batteries():
    data = SqlAlchemyStore().load()
    assets = battery_replacement_report(data.assets if data else [], site_id=request.args.get("site"))
    return jsonify([asset_json(asset) for asset in assets])
