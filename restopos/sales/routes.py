# restopos/sales/routes.py
from datetime import datetime, timedelta

from flask import request, current_app

from ..pos.kitchen import project
from ..services import sale_service
from ..services.checkout_service import sell_items
from ..utils.api import ok, err
from ..utils.decorators import require_json
from . import bp


def _parse_day(value, name):
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{name} must be YYYY-MM-DD")


@bp.post("")
@require_json
def create_sale():
    """
    Body: { items: [...], paymentMode, promoCode?, invoicePrefix?, kotNote? }
    The promo code is evaluated here against these exact items.
    """
    data = request.get_json(silent=True) or {}
    invoice, promo_message = sell_items(
        data.get("items"),
        promo_code=(data.get("promoCode") or "").strip() or None,
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


@bp.get("")
def list_sales():
    """
    Query params:
      - status=Created|Cancelled
      - limit (default SALES_LIST_LIMIT)
      - start=YYYY-MM-DD
      - end=YYYY-MM-DD (inclusive)
    """
    status = request.args.get("status")
    if status and status not in sale_service.SALE_STATUSES:
        return err(f"status must be one of {', '.join(sale_service.SALE_STATUSES)}", 422)

    default_limit = current_app.config["SALES_LIST_LIMIT"]
    try:
        limit = min(int(request.args.get("limit", default_limit)), default_limit)
    except ValueError:
        return err("limit must be a number", 422)

    start = request.args.get("start")
    end = request.args.get("end")
    start = _parse_day(start, "start") if start else None
    # make end inclusive for the whole day
    end = _parse_day(end, "end") + timedelta(days=1) if end else None

    rows = sale_service.list_sales(status=status, limit=max(limit, 1), start=start, end=end)
    return ok("sales", {"items": [s.as_summary() for s in rows]})


@bp.get("/<invoice_no>")
def get_sale(invoice_no: str):
    return ok("sale", {"sale": sale_service.get_invoice(invoice_no).as_api()})


@bp.get("/<invoice_no>/kot")
def get_kot(invoice_no: str):
    invoice = sale_service.get_invoice(invoice_no)
    return ok("kot", {
        "invoiceNo": invoice.invoice_no,
        "datetime": invoice.created_at.isoformat(),
        "kotNote": invoice.kot_note,
        "items": [k.as_api() for k in project(invoice.items)],
    })


@bp.patch("/<invoice_no>/cancel")
def cancel_sale(invoice_no: str):
    """Body: { "reason": "customer left" } (optional)"""
    data = request.get_json(silent=True) or {}
    invoice = sale_service.cancel_sale(invoice_no, data.get("reason"))
    return ok(f"Order {invoice.invoice_no} cancelled", {"sale": invoice.as_api()})
