# ------- restopos/utils/decorators.py -------
from functools import wraps

from flask import request, current_app, g

from .api import err


def require_json(f):
    """Reject writes whose body is not a JSON object."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return err("JSON object body required", 400)
        return f(*args, **kwargs)
    return wrapper


def with_terminal_cart(f):
    """
    Resolve the cart of the calling terminal (``X-Terminal-Id`` header) and
    pass it as ``cart``; echo the terminal id back on the response.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        terminal_id = (request.headers.get("X-Terminal-Id") or "").strip() \
            or current_app.config["DEFAULT_TERMINAL"]
        g.terminal_id = terminal_id
        cart = current_app.extensions["restopos.terminals"].cart_for(terminal_id)
        resp = f(*args, cart=cart, **kwargs)
        resp.headers["X-Terminal-Id"] = terminal_id
        return resp
    return wrapper
