from __future__ import annotations
import os
from pathlib import Path

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    BASE_DIR = Path(__file__).resolve().parent
    # SQLite file in project directory
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'app.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # fallbacks when teacher policy columns are NULL
    DEFAULT_ADVANCE_NOTICE_HOURS = int(os.getenv("DEFAULT_ADVANCE_NOTICE_HOURS", "24"))
    DEFAULT_MAX_ADVANCE_BOOKING_HOURS = int(os.getenv("DEFAULT_MAX_ADVANCE_BOOKING_HOURS", "720"))

    DEFAULT_SLOT_DURATION = 60      # minutes
    DEFAULT_BREAK_TIME = 15         # minutes
    WEEKLY_BREAK_TIME = 15          # gap between visualisation slots in weekly view
    SUMMARY_WEEKS = 4

    # BLACKOUT rules are informational until product decides otherwise
    BLACKOUT_SUPPRESSES_SLOTS = os.getenv("BLACKOUT_SUPPRESSES_SLOTS", "0") == "1"

    SEED_TEST_DATA = False
    DEFAULT_TEACHERS: list[dict] = []

class DevConfig(BaseConfig):
    DEBUG = True
    SEED_TEST_DATA = True
    DEFAULT_TEACHERS = [
        {"full_name": "Demo Teacher", "timezone": "UTC",
         "rules": [
             {"day_of_week": 1, "start_time": "09:00", "end_time": "12:00"},
             {"day_of_week": 3, "start_time": "14:00", "end_time": "18:00"},
         ]},
    ]

class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

class ProdConfig(BaseConfig):
    DEBUG = False
    SEED_TEST_DATA = False

config_map = {
    "dev": DevConfig,
    "test": TestConfig,
    "prod": ProdConfig,
    "default": DevConfig,
}
