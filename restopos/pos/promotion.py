# restopos/pos/promotion.py
"""
Promotion rules.

A rule is a trigger (scope + threshold) and a reward. The reward is one of
four payload classes, one per promotion type, so a PERCENT rule simply has no
place to keep ``buy_qty``. ``rule_from_payload`` is the single entry point for
admin input: it drops fields that do not belong to the declared type and
raises ``RuleConfigError`` for definitions that could never be evaluated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Union

from ..utils.money import D
from .errors import RuleConfigError


class PromoType(str, Enum):
    PERCENT = "PERCENT"
    AMOUNT = "AMOUNT"
    BOGO = "BOGO"
    ITEM_FREE = "ITEM_FREE"


class TriggerKind(str, Enum):
    ANY = "ANY"
    PRODUCT = "PRODUCT"
    CATEGORY = "CATEGORY"


# gate on money vs. gate on quantity
PURCHASE_GATED = (PromoType.PERCENT, PromoType.AMOUNT)
QUANTITY_GATED = (PromoType.BOGO, PromoType.ITEM_FREE)


def normalize_code(code) -> str:
    return str(code or "").strip().upper()


def _code_str(v) -> str | None:
    if v is None:
        return None
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    s = str(v).strip()
    return s or None


def parse_timestamp(value, field_name="timestamp"):
    """ISO-8601 (``Z`` allowed) or datetime -> naive UTC datetime; blank -> None."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        s = str(value).strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            raise RuleConfigError(f"Invalid datetime format for {field_name}")
    if dt.tzinfo:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _number(value, name, *, required=False, integer=False):
    if value in (None, ""):
        if required:
            raise RuleConfigError(f"{name} is required")
        return None
    try:
        num = D(value)
    except ValueError:
        raise RuleConfigError(f"{name} must be numeric")
    if not num.is_finite():
        raise RuleConfigError(f"{name} must be numeric")
    if integer:
        if num != num.to_integral_value():
            raise RuleConfigError(f"{name} must be a whole number")
        return int(num)
    return num


# ---------------- trigger ----------------

@dataclass(frozen=True)
class Trigger:
    kind: TriggerKind = TriggerKind.ANY
    product_code: str | None = None
    category_name: str | None = None
    min_qty: int | None = None
    min_purchase: Decimal | None = None

    def __post_init__(self):
        object.__setattr__(self, "kind", TriggerKind(self.kind))
        if self.kind is TriggerKind.PRODUCT and not self.product_code:
            raise RuleConfigError("trigger.productCode is required for PRODUCT triggers")
        if self.kind is TriggerKind.CATEGORY and not self.category_name:
            raise RuleConfigError("trigger.categoryName is required for CATEGORY triggers")
        if self.kind is not TriggerKind.PRODUCT and self.product_code is not None:
            raise RuleConfigError("trigger.productCode only applies to PRODUCT triggers")
        if self.kind is not TriggerKind.CATEGORY and self.category_name is not None:
            raise RuleConfigError("trigger.categoryName only applies to CATEGORY triggers")
        if self.min_qty is not None and self.min_qty < 1:
            raise RuleConfigError("trigger.minQty must be >= 1")
        if self.min_purchase is not None and self.min_purchase < 0:
            raise RuleConfigError("trigger.minPurchase must be >= 0")

    def as_api(self):
        out = {"kind": self.kind.value}
        if self.product_code is not None:
            out["productCode"] = self.product_code
        if self.category_name is not None:
            out["categoryName"] = self.category_name
        if self.min_qty is not None:
            out["minQty"] = self.min_qty
        if self.min_purchase is not None:
            out["minPurchase"] = float(self.min_purchase)
        return out


# ---------------- rewards ----------------

@dataclass(frozen=True)
class PercentOff:
    type: ClassVar[PromoType] = PromoType.PERCENT
    percent: Decimal
    max_discount: Decimal | None = None

    def __post_init__(self):
        if not (0 < self.percent <= 100):
            raise RuleConfigError("reward.percent must be > 0 and <= 100")
        if self.max_discount is not None and self.max_discount < 0:
            raise RuleConfigError("reward.maxDiscount must be >= 0")

    def as_api(self):
        out = {"percent": float(self.percent)}
        if self.max_discount is not None:
            out["maxDiscount"] = float(self.max_discount)
        return out


@dataclass(frozen=True)
class AmountOff:
    type: ClassVar[PromoType] = PromoType.AMOUNT
    amount: Decimal

    def __post_init__(self):
        if self.amount < 0:
            raise RuleConfigError("reward.amount must be >= 0")

    def as_api(self):
        return {"amount": float(self.amount)}


@dataclass(frozen=True)
class BuyGet:
    type: ClassVar[PromoType] = PromoType.BOGO
    buy_qty: int
    get_qty: int

    def __post_init__(self):
        if self.buy_qty < 1 or self.get_qty < 1:
            raise RuleConfigError("reward.buyQty and reward.getQty must be >= 1")

    def as_api(self):
        return {"buyQty": self.buy_qty, "getQty": self.get_qty}


@dataclass(frozen=True)
class FreeItemReward:
    type: ClassVar[PromoType] = PromoType.ITEM_FREE
    reward_product_code: str
    reward_qty: int = 1

    def __post_init__(self):
        if not self.reward_product_code:
            raise RuleConfigError("reward.rewardProductCode is required for ITEM_FREE")
        if self.reward_qty < 1:
            raise RuleConfigError("reward.rewardQty must be >= 1")

    def as_api(self):
        return {"rewardProductCode": self.reward_product_code, "rewardQty": self.reward_qty}


Reward = Union[PercentOff, AmountOff, BuyGet, FreeItemReward]


# ---------------- rule ----------------

@dataclass(frozen=True)
class PromotionRule:
    code: str
    reward: Reward
    trigger: Trigger = field(default_factory=Trigger)
    active: bool = True
    start_at: datetime | None = None
    end_at: datetime | None = None
    note: str = ""
    id: int | None = None

    def __post_init__(self):
        code = normalize_code(self.code)
        if not code:
            raise RuleConfigError("code is required")
        object.__setattr__(self, "code", code)
        if self.type in PURCHASE_GATED and self.trigger.min_qty is not None:
            raise RuleConfigError(f"{self.type.value} rules gate on minPurchase, not minQty")
        if self.type in QUANTITY_GATED and self.trigger.min_purchase is not None:
            raise RuleConfigError(f"{self.type.value} rules gate on minQty, not minPurchase")
        if self.start_at and self.end_at and self.end_at < self.start_at:
            raise RuleConfigError("endAt must not be before startAt")

    @property
    def type(self) -> PromoType:
        return self.reward.type

    def matches_code(self, code) -> bool:
        return self.code == normalize_code(code)

    def is_live(self, now: datetime | None = None) -> bool:
        if not self.active:
            return False
        now = now or utc_now()
        if self.start_at and now < self.start_at:
            return False
        if self.end_at and now > self.end_at:
            return False
        return True

    def as_api(self):
        return {
            "id": self.id,
            "code": self.code,
            "type": self.type.value,
            "active": self.active,
            "startAt": self.start_at.isoformat() if self.start_at else None,
            "endAt": self.end_at.isoformat() if self.end_at else None,
            "note": self.note,
            "trigger": self.trigger.as_api(),
            "reward": self.reward.as_api(),
        }


# ---------------- payload parsing ----------------

def _pick(d: dict, *names):
    for n in names:
        if n in d and d[n] not in (None, ""):
            return d[n]
    return None


def _parse_type(value) -> PromoType:
    try:
        return PromoType(str(value or "").strip().upper())
    except ValueError:
        raise RuleConfigError("type must be one of PERCENT, AMOUNT, BOGO, ITEM_FREE")


def _parse_trigger(ptype: PromoType, data: dict) -> Trigger:
    try:
        kind = TriggerKind(str(data.get("kind") or "ANY").strip().upper())
    except ValueError:
        raise RuleConfigError("trigger.kind must be one of ANY, PRODUCT, CATEGORY")

    product_code = category_name = None
    if kind is TriggerKind.PRODUCT:
        product_code = _code_str(_pick(data, "productCode", "product_code"))
    elif kind is TriggerKind.CATEGORY:
        category_name = _code_str(_pick(data, "categoryName", "category_name"))

    min_qty = min_purchase = None
    if ptype in QUANTITY_GATED:
        min_qty = _number(_pick(data, "minQty", "min_qty"), "trigger.minQty", integer=True)
    else:
        min_purchase = _number(_pick(data, "minPurchase", "min_purchase"), "trigger.minPurchase")

    return Trigger(kind, product_code, category_name, min_qty, min_purchase)


def _parse_reward(ptype: PromoType, data: dict) -> Reward:
    if ptype is PromoType.PERCENT:
        return PercentOff(
            percent=_number(_pick(data, "percent"), "reward.percent", required=True),
            max_discount=_number(_pick(data, "maxDiscount", "max_discount"), "reward.maxDiscount"),
        )
    if ptype is PromoType.AMOUNT:
        return AmountOff(amount=_number(_pick(data, "amount"), "reward.amount", required=True))
    if ptype is PromoType.BOGO:
        return BuyGet(
            buy_qty=_number(_pick(data, "buyQty", "buy_qty"), "reward.buyQty", required=True, integer=True),
            get_qty=_number(_pick(data, "getQty", "get_qty"), "reward.getQty", required=True, integer=True),
        )
    reward_code = _code_str(_pick(data, "rewardProductCode", "reward_product_code"))
    if not reward_code:
        raise RuleConfigError("reward.rewardProductCode is required for ITEM_FREE")
    qty = _number(_pick(data, "rewardQty", "reward_qty"), "reward.rewardQty", integer=True)
    return FreeItemReward(reward_product_code=reward_code, reward_qty=1 if qty is None else qty)


def rule_from_payload(data: dict, rule_id: int | None = None) -> PromotionRule:
    """
    Build a rule from the admin payload::

        {code, type, active, startAt, endAt, note,
         trigger: {kind, productCode, categoryName, minQty, minPurchase},
         reward:  {percent, maxDiscount, amount, buyQty, getQty, rewardProductCode, rewardQty}}

    Fields that do not belong to ``type`` are ignored.
    """
    if not isinstance(data, dict):
        raise RuleConfigError("promotion payload must be an object")
    ptype = _parse_type(data.get("type"))
    trigger = data.get("trigger") or {}
    reward = data.get("reward") or {}
    if not isinstance(trigger, dict) or not isinstance(reward, dict):
        raise RuleConfigError("trigger and reward must be objects")

    active = data.get("active", True)
    if isinstance(active, str):
        active = active.strip().lower() in {"1", "true", "yes", "y", "on"}

    return PromotionRule(
        code=data.get("code"),
        reward=_parse_reward(ptype, reward),
        trigger=_parse_trigger(ptype, trigger),
        active=bool(active),
        start_at=parse_timestamp(_pick(data, "startAt", "start_at"), "startAt"),
        end_at=parse_timestamp(_pick(data, "endAt", "end_at"), "endAt"),
        note=(data.get("note") or "").strip(),
        id=rule_id if rule_id is not None else data.get("id"),
    )
