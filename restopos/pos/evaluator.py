# restopos/pos/evaluator.py
"""
Score a cart snapshot against the promotion rule set.

``evaluate`` is pure: it reads the lines, the rules and the catalog and
returns a new ``PromotionResult``; nothing it is given is modified, so the POS
can call it again on every "Apply" click.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from ..utils.money import ZERO, round_money, fmt_number
from .cart import fingerprint
from .promotion import (
    PromoType,
    TriggerKind,
    PURCHASE_GATED,
    normalize_code,
    utc_now,
)

logger = logging.getLogger("restopos.promotions")

MSG_EMPTY_CODE = "Enter a promo code"
MSG_INVALID = "Invalid code"
MSG_MINIMUM = "Minimum not met"


@dataclass(frozen=True)
class BreakdownEntry:
    label: str
    amount: Decimal | None = None

    def as_api(self):
        return {"label": self.label, "amount": float(self.amount) if self.amount is not None else None}


@dataclass(frozen=True)
class FreeItem:
    product_code: str
    name: str
    quantity: int

    def as_api(self):
        return {"code": self.product_code, "name": self.name, "qty": self.quantity}


@dataclass(frozen=True)
class PromotionResult:
    valid: bool
    code: str
    message: str | None = None
    discount_amount: Decimal = ZERO
    breakdown: tuple = field(default_factory=tuple)
    free_items: tuple = field(default_factory=tuple)
    basis: tuple = field(default_factory=tuple, compare=False, repr=False)

    @classmethod
    def rejected(cls, code, message, basis=()):
        return cls(valid=False, code=code, message=message, basis=basis)

    def as_api(self):
        return {
            "valid": self.valid,
            "message": self.message,
            "code": self.code,
            "discountAmount": float(self.discount_amount),
            "breakdown": [b.as_api() for b in self.breakdown],
            "freeItems": [f.as_api() for f in self.free_items],
        }


# ---- helpers ----------------------------------------------------------------

def find_live_rule(code, rules, now=None):
    wanted = normalize_code(code)
    now = now or utc_now()
    for rule in rules:
        if rule.code == wanted and rule.is_live(now):
            return rule
    return None


def matched_lines(items, trigger, catalog=None) -> list:
    if trigger.kind is TriggerKind.ANY:
        return list(items)
    if trigger.kind is TriggerKind.PRODUCT:
        return [it for it in items if it.product_code == trigger.product_code]
    if catalog is None:
        return []
    return [it for it in items if catalog.in_category(it.product_code, trigger.category_name)]


def _cheapest_units(lines, count: int) -> list[Decimal]:
    # one entry per unit, cart order kept on equal prices (sorted() is stable)
    units = [it.unit_price for it in lines for _ in range(it.quantity)]
    return sorted(units)[:count]


def _reward_name(catalog, code) -> str:
    product = catalog.get_product(code) if catalog is not None else None
    return product.name if product else f"Item {code}"


# ---- reward computation -----------------------------------------------------

def _percent(reward, matched_subtotal):
    discount = round_money(matched_subtotal * reward.percent / Decimal("100"))
    if reward.max_discount is not None and discount > reward.max_discount:
        discount = round_money(reward.max_discount)
    label = f"{fmt_number(reward.percent)}% off"
    return discount, (BreakdownEntry(label, discount),), ()


def _amount(reward, matched_subtotal):
    discount = round_money(min(reward.amount, matched_subtotal))
    return discount, (BreakdownEntry(f"Flat {fmt_number(reward.amount)} off", discount),), ()


def _bogo(reward, lines, matched_qty):
    sets = matched_qty // (reward.buy_qty + reward.get_qty)
    free_qty = sets * reward.get_qty
    discount = round_money(sum(_cheapest_units(lines, free_qty), ZERO))
    label = f"Buy {reward.buy_qty} Get {reward.get_qty}: {free_qty} free"
    return discount, (BreakdownEntry(label, discount),), ()


def _item_free(reward, trigger, matched_qty, catalog):
    multiplier = matched_qty // trigger.min_qty if trigger.min_qty else 1
    units = multiplier * reward.reward_qty
    name = _reward_name(catalog, reward.reward_product_code)
    free = (FreeItem(reward.reward_product_code, name, units),)
    # priced at 0 on the invoice, nothing is subtracted from the subtotal
    return ZERO, (BreakdownEntry(f"Free {name} x{units}"),), free


# ---- entry point ------------------------------------------------------------

def evaluate(items, code, rules, catalog=None, now=None) -> PromotionResult:
    """
    items   : iterable of LineItem (a cart snapshot)
    code    : code typed at the terminal, any case / surrounding spaces
    rules   : iterable of PromotionRule
    catalog : Catalog, needed for CATEGORY triggers and free-item names
    """
    items = tuple(items)
    basis = fingerprint(items)
    wanted = normalize_code(code)
    if not wanted:
        return PromotionResult.rejected(wanted, MSG_EMPTY_CODE, basis)

    rule = find_live_rule(wanted, rules, now)
    if rule is None:
        logger.info("promo %s rejected: no live rule", wanted)
        return PromotionResult.rejected(wanted, MSG_INVALID, basis)

    trigger = rule.trigger
    lines = matched_lines(items, trigger, catalog)
    matched_subtotal = sum((it.line_total for it in lines), ZERO)
    matched_qty = sum(it.quantity for it in lines)

    if rule.type in PURCHASE_GATED:
        met = matched_subtotal >= (trigger.min_purchase or ZERO)
    else:
        met = matched_qty >= (trigger.min_qty or 1)
    if not met:
        logger.info("promo %s rejected: minimum not met", wanted)
        return PromotionResult.rejected(wanted, MSG_MINIMUM, basis)

    reward = rule.reward
    if rule.type is PromoType.PERCENT:
        discount, breakdown, free = _percent(reward, matched_subtotal)
    elif rule.type is PromoType.AMOUNT:
        discount, breakdown, free = _amount(reward, matched_subtotal)
    elif rule.type is PromoType.BOGO:
        discount, breakdown, free = _bogo(reward, lines, matched_qty)
    else:
        discount, breakdown, free = _item_free(reward, trigger, matched_qty, catalog)

    logger.info("promo %s applied: discount=%s free=%s", wanted, discount, len(free))
    return PromotionResult(
        valid=True,
        code=rule.code,
        discount_amount=discount,
        breakdown=breakdown,
        free_items=free,
        basis=basis,
    )
