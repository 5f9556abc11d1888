from __future__ import annotations

from typing import Optional

from flask import Flask

from .config import BaseConfig
from .extensions import db, login_manager


def create_app(config_class: Optional[type] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_object(config_class or BaseConfig)

    db.init_app(app)
    login_manager.init_app(app)

    with app.app_context():
        from . import models  # noqa: F401  registers tables and the actor loaders

        db.create_all()

    register_blueprints(app)
    register_cli(app)

    return app


def register_blueprints(app: Flask) -> None:
    from .auth.routes import bp as auth_bp
    from .sites.routes import bp as sites_bp
    from .out_service.routes import bp as out_service_bp
    from .reports.routes import bp as reports_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(sites_bp)
    app.register_blueprint(out_service_bp)
    app.register_blueprint(reports_bp)


def register_cli(app: Flask) -> None:
    from .utils.seed import register_seed_commands

    register_seed_commands(app)
