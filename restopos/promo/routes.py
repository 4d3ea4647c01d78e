# restopos/promo/routes.py
from __future__ import annotations
from flask import request, current_app

from ..pos.cart import Cart, LineItem
from ..services.checkout_service import apply_code
from ..services import promotion_service as promos
from ..utils.api import ok, err
from ..utils.decorators import require_json
from . import bp


@bp.post("/apply")
@require_json
def apply():
    """
    Body: { "code": "SUMMER10", "items": [{code, name, price, qty, variantId, variantName}] }
    Stateless preview for a cart held by the client. Always 200; check ``valid``.
    """
    data = request.get_json(silent=True) or {}
    items = data.get("items") or []
    if not isinstance(items, list):
        return err("items must be a list", 422)
    cart = Cart(LineItem.from_payload(it) for it in items)
    result = apply_code(cart, data.get("code"))
    return ok("promo result", result.as_api())


# ---- administration ----------------------------------------------------------

@bp.get("/manage")
def list_promos():
    active = request.args.get("active")
    rules = promos.list_rules(None if active is None else active.lower() == "true")
    current_app.logger.debug("list_promos count=%s", len(rules))
    return ok("ok", {"items": [r.as_api() for r in rules]})


@bp.post("/manage")
@require_json
def create_promo():
    rule = promos.save_rule(request.get_json(silent=True))
    return ok("Promo created", {"promotion": rule.as_api()}, status=201)


@bp.put("/manage/<int:rule_id>")
@require_json
def update_promo(rule_id: int):
    rule = promos.save_rule(request.get_json(silent=True), rule_id=rule_id)
    return ok("Promo updated", {"promotion": rule.as_api()})


@bp.delete("/manage/<int:rule_id>")
def delete_promo(rule_id: int):
    promos.delete_rule(rule_id)
    return ok("Promo deleted")
