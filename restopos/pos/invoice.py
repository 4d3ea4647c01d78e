# restopos/pos/invoice.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal

from ..utils.money import D, ZERO, CENT, round_money
from .cart import make_key
from .errors import EmptyCartError, StalePromotionError, InvoiceStateError
from .promotion import utc_now

logger = logging.getLogger("restopos.sales")

STATUS_CREATED = "Created"
STATUS_CANCELLED = "Cancelled"


# ---- tax policies -----------------------------------------------------------

def zero_tax(sub_total, discount_total) -> Decimal:
    return ZERO


class FlatRateTax:
    """Tax as a fraction of the discounted subtotal, e.g. ``FlatRateTax("0.05")``."""

    def __init__(self, rate):
        self.rate = D(rate)
        if self.rate < 0:
            raise ValueError("tax rate must be >= 0")

    def __call__(self, sub_total, discount_total) -> Decimal:
        base = max(ZERO, D(sub_total) - D(discount_total))
        return round_money(base * self.rate)

    def __repr__(self):
        return f"FlatRateTax({self.rate})"


# ---- invoice ----------------------------------------------------------------

@dataclass(frozen=True)
class InvoiceLine:
    product_code: str
    product_name: str
    unit_price: Decimal
    quantity: int
    variant_id: str | None = None
    variant_name: str | None = None
    free: bool = False

    @property
    def key(self) -> str:
        return make_key(self.product_code, self.variant_id)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def from_line_item(cls, it):
        return cls(it.product_code, it.product_name, it.unit_price, it.quantity, it.variant_id, it.variant_name)

    def as_api(self):
        return {
            "code": self.product_code,
            "name": self.product_name,
            "variantId": self.variant_id,
            "variantName": self.variant_name,
            "price": float(self.unit_price),
            "qty": self.quantity,
            "free": self.free,
        }


@dataclass(frozen=True)
class Invoice:
    invoice_no: str
    created_at: datetime
    items: tuple
    sub_total: Decimal
    discount_total: Decimal
    tax_total: Decimal
    grand_total: Decimal
    payment_mode: str
    promo_code: str | None = None
    promo_breakdown: tuple = field(default_factory=tuple)
    status: str = STATUS_CREATED
    cancel_reason: str | None = None
    cancelled_at: datetime | None = None
    kot_note: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    @property
    def round_off(self) -> Decimal:
        return self.grand_total - (self.sub_total - self.discount_total + self.tax_total)

    @property
    def show_round_off(self) -> bool:
        return abs(self.round_off) >= CENT

    def as_api(self):
        return {
            "invoiceNo": self.invoice_no,
            "datetime": self.created_at.isoformat(),
            "items": [i.as_api() for i in self.items],
            "subTotal": float(self.sub_total),
            "discountTotal": float(self.discount_total),
            "promoCode": self.promo_code,
            "promoBreakdown": [b.as_api() for b in self.promo_breakdown],
            "taxTotal": float(self.tax_total),
            "roundOff": float(self.round_off) if self.show_round_off else None,
            "grandTotal": float(self.grand_total),
            "paymentMode": self.payment_mode,
            "status": self.status,
            "cancelReason": self.cancel_reason,
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "kotNote": self.kot_note,
        }


# ---- assembly ---------------------------------------------------------------

def finalize(cart, invoice_no, promotion=None, payment_mode="Cash", tax_policy=zero_tax, now=None, kot_note=None) -> Invoice:
    """
    Turn the cart into a numbered, immutable invoice and empty the cart.

    ``promotion`` defaults to the one applied on the cart. A result computed
    for other lines than the cart holds now raises ``StalePromotionError``.
    """
    if cart.is_empty:
        raise EmptyCartError()

    promotion = promotion if promotion is not None else cart.promotion
    if promotion is not None and not promotion.valid:
        promotion = None
    if promotion is not None and promotion.basis != cart.fingerprint():
        raise StalePromotionError()

    lines = [InvoiceLine.from_line_item(it) for it in cart.snapshot()]
    if promotion is not None:
        for fi in promotion.free_items:
            lines.append(InvoiceLine(fi.product_code, fi.name, ZERO, fi.quantity, free=True))

    sub_total = round_money(sum((ln.line_total for ln in lines), ZERO))
    discount_total = round_money(promotion.discount_amount) if promotion else ZERO
    tax_total = round_money(tax_policy(sub_total, discount_total))
    grand_total = round_money(max(ZERO, sub_total - discount_total + tax_total))

    invoice = Invoice(
        invoice_no=invoice_no,
        created_at=now or utc_now(),
        items=tuple(lines),
        sub_total=sub_total,
        discount_total=discount_total,
        tax_total=tax_total,
        grand_total=grand_total,
        payment_mode=payment_mode,
        promo_code=promotion.code if promotion else None,
        promo_breakdown=promotion.breakdown if promotion else (),
        kot_note=(kot_note or "").strip() or None,
    )
    cart.clear()
    logger.info("invoice %s finalized: total=%s mode=%s", invoice_no, grand_total, payment_mode)
    return invoice


def cancel(invoice: Invoice, reason=None, now=None) -> Invoice:
    if invoice.is_cancelled:
        raise InvoiceStateError(f"invoice {invoice.invoice_no} is already cancelled")
    logger.info("invoice %s cancelled", invoice.invoice_no)
    return replace(
        invoice,
        status=STATUS_CANCELLED,
        cancel_reason=(reason or "").strip() or None,
        cancelled_at=now or utc_now(),
    )
