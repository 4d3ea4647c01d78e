# --- restopos/utils/api.py ---
from datetime import datetime, timezone

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException

from ..pos.errors import PosError


def _api_time():
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

def api_ok(message, data=None):
    return {
        "status": True,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME_HUMAN": _api_time(),
        }
    }

def api_error(message, data=None):
    return {
        "status": False,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME_HUMAN": _api_time(),
        }
    }

# ---- standard API response format ------------------------------------------
def ok(msg, data=None, status=200):
    r = jsonify(api_ok(msg, data)); r.status_code = status; return r
def err(msg, status=400, data=None):
    r = jsonify(api_error(msg, data)); r.status_code = status; return r


def register_error_handlers(app):
    @app.errorhandler(PosError)
    def handle_pos_error(e):
        current_app.logger.warning("%s: %s", type(e).__name__, e)
        return err(str(e), e.status)

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return err(str(e), 422)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return err(e.description or e.name, e.code or 500)
