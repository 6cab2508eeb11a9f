from __future__ import annotations
import json, logging
from datetime import datetime, timezone
from time import perf_counter

from flask import current_app, g, jsonify, request
from werkzeug.wrappers.response import Response

from . import bp                 # bp comes from __init__.py

LOG_EXTRA_KEYS = ("event", "path", "method", "status", "duration_ms")

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in LOG_EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _install_json_handler(logger: logging.Logger) -> None:
    has_json = any(
        isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), JSONFormatter)
        for h in logger.handlers
    )
    if not has_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

def _setup_structured_logging(app):
    # app logger for requests, "blueprints" for the service module loggers
    _install_json_handler(app.logger)
    _install_json_handler(logging.getLogger("blueprints"))

@bp.before_app_request
def _start_timer():
    g._req_start = perf_counter()

@bp.after_app_request
def _log_request(response: Response):
    start = getattr(g, "_req_start", None)
    duration_ms = int((perf_counter() - start) * 1000) if start is not None else None
    extra = {
        "event": "http_request",
        "path": request.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration_ms,
    }
    current_app.logger.info("request handled", extra=extra)
    return response

@bp.record_once
def _on_register(state):
    _setup_structured_logging(state.app)

@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
    })
