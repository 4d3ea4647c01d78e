# restopos/cart/routes.py
from __future__ import annotations
from flask import request, current_app, g

from ..pos.kitchen import project
from ..services.catalog_service import SqlCatalog
from ..services.checkout_service import apply_code, checkout as checkout_cart
from ..utils.api import ok, err
from ..utils.decorators import require_json, with_terminal_cart
from . import bp

# ---- helpers ---------------------------------------------------------------

def _qty(data) -> int:
    qty = data.get("qty")
    if qty is None:
        qty = data.get("quantity")
    if qty is None:
        return 1
    try:
        qty = int(qty)
    except (TypeError, ValueError):
        raise ValueError("qty must be a whole number")
    if qty < 1:
        raise ValueError("qty must be >= 1")
    return qty

# ---- endpoints -------------------------------------------------------------

@bp.get("")
@with_terminal_cart
def get_cart(cart):
    return ok("cart", cart.as_api())


@bp.delete("")
@with_terminal_cart
def reset_cart(cart):
    """Drop the terminal's cart (items and promo) and hand back a fresh one."""
    fresh = current_app.extensions["restopos.terminals"].reset(g.terminal_id)
    return ok("cart reset", fresh.as_api())


@bp.post("/items")
@require_json
@with_terminal_cart
def add_item(cart):
    """
    Body: { "code": "101", "variantId": "3" | null, "qty": int }
    Price and names come from the catalog at this moment and stay on the line.
    """
    data = request.get_json(silent=True) or {}
    code = data.get("code")
    if code in (None, ""):
        return err("code is required", 422)

    item = SqlCatalog().line_item(code, data.get("variantId") or None, _qty(data))
    line = cart.add(item)
    current_app.logger.info("cart: +%s %s (now %s)", item.quantity, line.key, line.quantity)
    return ok("item added", cart.as_api(), status=201)


@bp.post("/items/<key>/inc")
@with_terminal_cart
def inc_item(cart, key: str):
    cart.increment(key)
    return ok("item updated", cart.as_api())


@bp.post("/items/<key>/dec")
@with_terminal_cart
def dec_item(cart, key: str):
    cart.decrement(key)
    return ok("item updated", cart.as_api())


@bp.delete("/items/<key>")
@with_terminal_cart
def remove_item(cart, key: str):
    cart.remove(key)
    return ok("item removed", cart.as_api())


@bp.delete("/items")
@with_terminal_cart
def clear_cart_items(cart):
    cart.clear()
    return ok("all items removed", cart.as_api())


# ---- promo -----------------------------------------------------------------

@bp.post("/promo")
@require_json
@with_terminal_cart
def apply_promo(cart):
    """
    Body: { "code": "SUMMER10" }
    An invalid code is not an error: the response carries valid=false and the
    reason, and the cart keeps no promotion.
    """
    data = request.get_json(silent=True) or {}
    result = apply_code(cart, data.get("code"))
    msg = "promo applied" if result.valid else (result.message or "Invalid code")
    return ok(msg, {**cart.as_api(), "result": result.as_api()})


@bp.delete("/promo")
@with_terminal_cart
def remove_promo(cart):
    cart.drop_promotion()
    return ok("promo removed", cart.as_api())


# ---- kitchen preview & checkout --------------------------------------------

@bp.get("/kot")
@with_terminal_cart
def kot_preview(cart):
    """Kitchen ticket for the open cart, before payment."""
    return ok("kot", {"items": [k.as_api() for k in project(cart)]})


@bp.post("/checkout")
@with_terminal_cart
def checkout(cart):
    """
    Body: { "paymentMode": "Cash" | "UPI" | "Card", "invoicePrefix"?: str, "kotNote"?: str }
    """
    data = request.get_json(silent=True) or {}
    invoice, promo_message = checkout_cart(
        cart,
        payment_mode=data.get("paymentMode"),
        prefix=data.get("invoicePrefix"),
        kot_note=data.get("kotNote"),
    )
    payload = {"sale": invoice.as_api()}
    if promo_message:
        payload["promoWarning"] = promo_message
    resp = ok("order created", payload, status=201)
    resp.headers["X-Invoice-No"] = invoice.invoice_no
    return resp
