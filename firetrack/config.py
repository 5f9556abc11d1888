import os
from pathlib import Path


class BaseConfig:
    SECRET_KEY = os.environ.get("FIRETRACK_SECRET", "change-me")
    BASE_DIR = Path(__file__).resolve().parent
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "FIRETRACK_DATABASE_URI", f"sqlite:///{BASE_DIR.parent / 'firetrack.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ACTOR_HEADER = os.environ.get("FIRETRACK_ACTOR_HEADER", "X-Actor")
    DEFAULT_EXTINGUISHER_BRAND = "Other"
    FIRETRACK_REFERENCE_YEAR = os.environ.get("FIRETRACK_REFERENCE_YEAR")


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
