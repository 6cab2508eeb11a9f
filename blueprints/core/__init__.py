from flask import Blueprint

bp = Blueprint("core", __name__)
# routes register themselves on import
from . import routes  # noqa: E402,F401
