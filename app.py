from __future__ import annotations
import os
from importlib import import_module
from flask import Flask
from config import config_map
from extensions import db, migrate
from sqlalchemy import inspect

def _seed_from_config(app):
    if not app.config.get("SEED_TEST_DATA"):
        return
    with app.app_context():
        # tables may not exist yet (before `flask db upgrade`)
        if not inspect(db.engine).has_table("teachers"):
            return

        from models import Teacher, AvailabilityRule  # local import to avoid cycles
        created = 0
        for t in app.config.get("DEFAULT_TEACHERS", []):
            if Teacher.query.filter_by(full_name=t["full_name"]).first():
                continue
            teacher = Teacher(full_name=t["full_name"], timezone=t.get("timezone", "UTC"))
            db.session.add(teacher)
            db.session.flush()
            for r in t.get("rules", []):
                db.session.add(AvailabilityRule(
                    teacher_id=teacher.id,
                    day_of_week=r["day_of_week"],
                    start_time=r["start_time"],
                    end_time=r["end_time"],
                ))
            created += 1
        if created:
            db.session.commit()
            app.logger.info("seeded %d teacher(s)", created)

def register_blueprints(app: Flask) -> None:
    # core routes must be imported before taking the blueprint
    import_module("blueprints.core.routes")
    from blueprints.core import bp as core_bp
    from blueprints.availability import api_bp as availability_api_bp

    # core without prefix -> '/health' at the root
    app.register_blueprint(core_bp)
    app.register_blueprint(availability_api_bp, url_prefix="/api/v1")

def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    cfg_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config_map[cfg_name])
    # pytest always sets PYTEST_CURRENT_TEST: keep every test on a private in-memory DB
    if os.environ.get("PYTEST_CURRENT_TEST"):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
        app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {"connect_args": {"check_same_thread": False}})

    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        pass
    db.init_app(app)
    migrate.init_app(app, db)
    register_blueprints(app)
    _seed_from_config(app)
    return app
