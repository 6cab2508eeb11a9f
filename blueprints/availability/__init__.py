from flask import Blueprint

api_bp = Blueprint("availability_api", __name__)
# routes register themselves on import
from . import routes  # noqa: E402,F401
