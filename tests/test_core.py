from __future__ import annotations
import json
import logging
import os

from flask_migrate import upgrade
from sqlalchemy import inspect

from app import _seed_from_config, create_app
from extensions import db
from models import AvailabilityRule, Teacher
from blueprints.core.routes import JSONFormatter

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "migrations")

def test_health_ok():
    app = create_app("test")
    with app.test_client() as c:
        rv = c.get("/health")
        assert rv.status_code == 200
        assert rv.get_json()["status"] == "ok"

def test_json_formatter_carries_request_fields():
    record = logging.LogRecord("app", logging.INFO, __file__, 1, "request handled", None, None)
    record.event = "http_request"
    record.status = 200
    payload = json.loads(JSONFormatter().format(record))
    assert payload["msg"] == "request handled"
    assert payload["event"] == "http_request"
    assert payload["status"] == 200
    assert payload["ts"].endswith("Z")

def test_dev_seed_is_idempotent():
    app = create_app("dev")
    with app.app_context():
        db.create_all()
        _seed_from_config(app)
        _seed_from_config(app)
        assert Teacher.query.count() == 1
        assert AvailabilityRule.query.count() == 2
        db.drop_all()

def test_migrations_create_tables():
    app = create_app("test")
    with app.app_context():
        upgrade(directory=MIGRATIONS_DIR)
        tables = set(inspect(db.engine).get_table_names())
        assert {"teachers", "availability_rules", "bookings"} <= tables
