# restopos/services/checkout_service.py
import logging

from flask import current_app

from ..extensions import db
from ..pos.cart import Cart, LineItem
from ..pos.invoice import finalize, zero_tax, FlatRateTax
from ..utils.money import D
from .catalog_service import SqlCatalog
from .promotion_service import rules_snapshot
from .sale_service import next_invoice_no, record_sale

logger = logging.getLogger("restopos.sales")


def tax_policy_from_config(config):
    rate = D(config.get("TAX_RATE") or 0)
    return FlatRateTax(rate) if rate > 0 else zero_tax


def normalize_payment_mode(mode):
    modes = current_app.config["PAYMENT_MODES"]
    mode = (mode or current_app.config["DEFAULT_PAYMENT_MODE"]).strip()
    for m in modes:
        if m.lower() == mode.lower():
            return m
    raise ValueError(f"paymentMode must be one of {', '.join(modes)}")


def apply_code(cart: Cart, code, catalog=None):
    return cart.apply_promotion(code, rules_snapshot(), catalog=catalog or SqlCatalog())


def checkout(cart: Cart, payment_mode=None, prefix=None, kot_note=None):
    """
    Finalize ``cart`` into a stored sale.

    An applied code is evaluated again against the current rules first, so a
    code that expired or was switched off since it was applied is not
    charged. Returns ``(invoice, promo_message)``; the message is set when
    such a code had to be dropped.
    """
    payment_mode = normalize_payment_mode(payment_mode)
    prefix = prefix or current_app.config["INVOICE_PREFIX"]
    catalog = SqlCatalog()

    promo_message = None
    if cart.promotion is not None:
        result = apply_code(cart, cart.promotion.code, catalog)
        if not result.valid:
            promo_message = f"promo {result.code} not applied: {result.message}"
            logger.warning(promo_message)

    lines = cart.snapshot()
    promotion = cart.promotion
    try:
        invoice_no = next_invoice_no(prefix)
        invoice = finalize(
            cart,
            invoice_no,
            payment_mode=payment_mode,
            tax_policy=tax_policy_from_config(current_app.config),
            kot_note=kot_note,
        )
        record_sale(invoice)
        db.session.commit()
    except Exception:
        db.session.rollback()
        # put the lines back so the terminal can retry
        if cart.is_empty and lines:
            for it in lines:
                cart.add(it)
            cart.promotion = promotion
        raise
    return invoice, promo_message


def sell_items(items_payload, promo_code=None, payment_mode=None, prefix=None, kot_note=None):
    """Checkout for a cart held by the client: ``[{code, name, price, qty, variantId, variantName}]``."""
    if not isinstance(items_payload, list):
        raise ValueError("items must be a list")
    cart = Cart(LineItem.from_payload(it) for it in items_payload)
    if promo_code:
        apply_code(cart, promo_code)
    return checkout(cart, payment_mode=payment_mode, prefix=prefix, kot_note=kot_note)
