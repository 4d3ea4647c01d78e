# restopos/pos/cart.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal

from ..utils.money import D, ZERO, round_money

logger = logging.getLogger("restopos.cart")

BASE_VARIANT = "base"


def make_key(product_code, variant_id=None) -> str:
    """Identity of a line: product code plus variant (or ``base``)."""
    return f"{product_code}:{variant_id or BASE_VARIANT}"


def _payload_qty(data):
    qty = data.get("qty")
    return data.get("quantity") if qty is None else qty


@dataclass(frozen=True)
class LineItem:
    product_code: str
    product_name: str
    unit_price: Decimal
    quantity: int = 1
    variant_id: str | None = None
    variant_name: str | None = None

    def __post_init__(self):
        price = D(self.unit_price)
        if price < 0:
            raise ValueError("unit price must be >= 0")
        object.__setattr__(self, "product_code", str(self.product_code).strip())
        object.__setattr__(self, "unit_price", price)
        object.__setattr__(self, "quantity", max(1, int(self.quantity or 1)))
        if self.variant_id is not None:
            object.__setattr__(self, "variant_id", str(self.variant_id))

    @property
    def key(self) -> str:
        return make_key(self.product_code, self.variant_id)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def from_payload(cls, data: dict) -> "LineItem":
        """Accepts the POS payload shape ``{code, name, price, qty, variantId, variantName}``."""
        if not isinstance(data, dict):
            raise ValueError("each item must be an object")
        code = data.get("code") or data.get("product_code") or data.get("productCode")
        if code in (None, ""):
            raise ValueError("item code is required")
        qty = _payload_qty(data)
        try:
            qty = 1 if qty is None else int(qty)
        except (TypeError, ValueError):
            raise ValueError(f"invalid quantity for item {code}")
        if qty < 1:
            raise ValueError(f"quantity for item {code} must be >= 1")
        return cls(
            product_code=str(code),
            product_name=data.get("name") or data.get("product_name") or str(code),
            unit_price=D(data.get("price", data.get("unit_price"))),
            quantity=qty,
            variant_id=data.get("variantId") or data.get("variant_id") or None,
            variant_name=data.get("variantName") or data.get("variant_name") or None,
        )

    def as_api(self):
        return {
            "key": self.key,
            "code": self.product_code,
            "name": self.product_name,
            "variantId": self.variant_id,
            "variantName": self.variant_name,
            "price": float(self.unit_price),
            "qty": self.quantity,
            "lineTotal": float(round_money(self.line_total)),
        }


def fingerprint(items) -> tuple:
    """Hashable description of a set of lines; equal fingerprints price identically."""
    return tuple((it.key, str(it.unit_price), it.quantity) for it in items)


class Cart:
    """
    Ordered line items for one terminal.

    Lines are merged by identity key. Any mutation drops ``promotion`` so a
    discount computed for an older set of lines is never carried over.
    """

    def __init__(self, items=None):
        self._lines: list[LineItem] = []
        self.promotion = None
        for it in items or ():
            self.add(it)

    # --------- read ----------
    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines)

    def __contains__(self, key):
        return self.get(key) is not None

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get(self, key: str) -> LineItem | None:
        return next((it for it in self._lines if it.key == key), None)

    def snapshot(self) -> tuple:
        return tuple(self._lines)

    def fingerprint(self) -> tuple:
        return fingerprint(self._lines)

    def subtotal(self) -> Decimal:
        return sum((it.line_total for it in self._lines), ZERO)

    def total_quantity(self) -> int:
        return sum(it.quantity for it in self._lines)

    # --------- mutations ----------
    def add(self, item: LineItem, qty: int | None = None) -> LineItem:
        qty = item.quantity if qty is None else max(1, int(qty))
        self._invalidate()
        for idx, existing in enumerate(self._lines):
            if existing.key == item.key:
                merged = replace(existing, quantity=existing.quantity + qty)
                self._lines[idx] = merged
                logger.debug("merged %s -> qty %s", item.key, merged.quantity)
                return merged
        line = replace(item, quantity=qty)
        self._lines.append(line)
        logger.debug("added %s qty %s", line.key, qty)
        return line

    def increment(self, key: str) -> LineItem | None:
        return self._set_qty(key, lambda q: q + 1)

    def decrement(self, key: str) -> LineItem | None:
        # floors at 1; removal is explicit
        return self._set_qty(key, lambda q: max(1, q - 1))

    def remove(self, key: str) -> LineItem | None:
        line = self.get(key)
        if line is None:
            return None
        self._invalidate()
        self._lines = [it for it in self._lines if it.key != key]
        return line

    def clear(self) -> None:
        self._invalidate()
        self._lines = []

    def _set_qty(self, key, fn) -> LineItem | None:
        for idx, existing in enumerate(self._lines):
            if existing.key == key:
                qty = fn(existing.quantity)
                if qty == existing.quantity:
                    return existing
                self._invalidate()
                updated = replace(existing, quantity=qty)
                self._lines[idx] = updated
                return updated
        return None

    def _invalidate(self):
        if self.promotion is not None:
            logger.info("cart changed; dropping promotion %s", self.promotion.code)
        self.promotion = None

    # --------- promotion ----------
    def apply_promotion(self, code, rules, catalog=None, now=None):
        """
        Evaluate ``code`` against the current lines. A valid result is kept on
        the cart until the next mutation; an invalid one clears it.
        """
        from .evaluator import evaluate

        result = evaluate(self.snapshot(), code, rules, catalog=catalog, now=now)
        self.promotion = result if result.valid else None
        return result

    def drop_promotion(self):
        self.promotion = None

    def as_api(self):
        sub = self.subtotal()
        promo = self.promotion
        discount = promo.discount_amount if promo else ZERO
        return {
            "items": [it.as_api() for it in self._lines],
            "promotion": promo.as_api() if promo else None,
            "totals": {
                "subTotal": float(round_money(sub)),
                "discount": float(discount),
                "total": float(round_money(max(ZERO, sub - discount))),
                "qty": self.total_quantity(),
            },
        }
