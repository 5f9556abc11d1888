from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from ..engine import match_technician
from ..models import Site

bp = Blueprint("auth", __name__, url_prefix="/auth")


@bp.route("/whoami")
@login_required
def whoami():
    roster = set()
    for site in Site.query.all():
        for name in (site.extinguisher_tech or site.assigned_technician, site.system_tech):
            if name and name.strip() and name.strip() != "None":
                roster.add(name.strip())
    return jsonify({"name": current_user.name, "roster_match": match_technician(current_user.name, sorted(roster))})
