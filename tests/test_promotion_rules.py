"""Promotion rule construction and validation."""

from datetime import datetime
from decimal import Decimal

import pytest

from restopos.pos.errors import RuleConfigError
from restopos.pos.promotion import (
    AmountOff,
    BuyGet,
    FreeItemReward,
    PercentOff,
    PromoType,
    PromotionRule,
    Trigger,
    TriggerKind,
    normalize_code,
    parse_timestamp,
    rule_from_payload,
)


def payload(**overrides):
    base = {
        "code": "ten",
        "type": "PERCENT",
        "trigger": {"kind": "ANY", "minPurchase": 0},
        "reward": {"percent": 10},
    }
    base.update(overrides)
    return base


class TestRuleFromPayload:
    def test_percent_rule(self):
        rule = rule_from_payload(payload(note=" lunch "))
        assert rule.code == "TEN"
        assert rule.type is PromoType.PERCENT
        assert isinstance(rule.reward, PercentOff)
        assert rule.reward.percent == Decimal("10")
        assert rule.trigger.min_purchase == Decimal("0")
        assert rule.note == "lunch"
        assert rule.active is True

    def test_fields_of_other_types_are_dropped(self):
        rule = rule_from_payload(payload(
            trigger={"kind": "ANY", "minPurchase": 100, "minQty": 5, "productCode": "101"},
            reward={"percent": 10, "buyQty": 1, "getQty": 1, "amount": 40, "rewardProductCode": "500"},
        ))
        assert rule.trigger.min_qty is None
        assert rule.trigger.product_code is None
        assert rule.reward.as_api() == {"percent": 10.0}
        assert rule.trigger.as_api() == {"kind": "ANY", "minPurchase": 100.0}

    def test_bogo_keeps_min_qty_only(self):
        rule = rule_from_payload({
            "code": "tea11", "type": "bogo",
            "trigger": {"kind": "PRODUCT", "productCode": 101.0, "minQty": 2, "minPurchase": 50},
            "reward": {"buyQty": 1, "getQty": 1, "percent": 20},
        })
        assert isinstance(rule.reward, BuyGet)
        assert rule.trigger.product_code == "101"
        assert rule.trigger.min_qty == 2
        assert rule.trigger.min_purchase is None

    def test_item_free_defaults_reward_qty(self):
        rule = rule_from_payload({
            "code": "sweet", "type": "ITEM_FREE",
            "trigger": {"kind": "CATEGORY", "categoryName": "Meals", "minQty": 2},
            "reward": {"rewardProductCode": "500"},
        })
        assert rule.reward == FreeItemReward("500", 1)
        assert rule.trigger.kind is TriggerKind.CATEGORY

    def test_amount_rule(self):
        rule = rule_from_payload(payload(type="AMOUNT", reward={"amount": "50"}))
        assert rule.reward == AmountOff(Decimal("50"))

    def test_string_active_flag(self):
        assert rule_from_payload(payload(active="false")).active is False
        assert rule_from_payload(payload(active="yes")).active is True

    def test_window_parsed_to_naive_utc(self):
        rule = rule_from_payload(payload(startAt="2024-01-01T05:30:00+05:30", endAt="2024-01-31T00:00:00Z"))
        assert rule.start_at == datetime(2024, 1, 1, 0, 0)
        assert rule.end_at == datetime(2024, 1, 31, 0, 0)

    def test_as_api_round_trips_through_payload(self):
        rule = rule_from_payload(payload(reward={"percent": 15, "maxDiscount": 40}))
        again = rule_from_payload(rule.as_api())
        assert again == rule


class TestRejectedDefinitions:
    @pytest.mark.parametrize("bad", [
        payload(type="HALF_OFF"),
        payload(code="  "),
        payload(reward={}),
        payload(reward={"percent": 0}),
        payload(reward={"percent": 150}),
        payload(reward={"percent": "ten"}),
        payload(reward={"percent": 10, "maxDiscount": -1}),
        payload(trigger={"kind": "PRODUCT"}),
        payload(trigger={"kind": "CATEGORY"}),
        payload(trigger={"kind": "SOMETIMES"}),
        payload(trigger={"kind": "ANY", "minPurchase": -5}),
        payload(type="AMOUNT", reward={"amount": -10}),
        payload(type="BOGO", trigger={"kind": "ANY"}, reward={"buyQty": 1, "getQty": 0}),
        payload(type="BOGO", trigger={"kind": "ANY"}, reward={"buyQty": 1.5, "getQty": 1}),
        payload(type="BOGO", trigger={"kind": "ANY", "minQty": 0}, reward={"buyQty": 1, "getQty": 1}),
        payload(type="ITEM_FREE", trigger={"kind": "ANY"}, reward={}),
        payload(type="ITEM_FREE", trigger={"kind": "ANY"}, reward={"rewardProductCode": "500", "rewardQty": 0}),
        payload(startAt="2024-02-01T00:00:00", endAt="2024-01-01T00:00:00"),
        payload(startAt="next tuesday"),
        payload(trigger="ANY"),
    ])
    def test_raises(self, bad):
        with pytest.raises(RuleConfigError):
            rule_from_payload(bad)

    def test_not_a_dict(self):
        with pytest.raises(RuleConfigError):
            rule_from_payload(["TEN"])

    def test_gate_must_match_type(self):
        with pytest.raises(RuleConfigError):
            PromotionRule("X", PercentOff(Decimal("10")), Trigger(min_qty=2))
        with pytest.raises(RuleConfigError):
            PromotionRule("X", BuyGet(1, 1), Trigger(min_purchase=Decimal("10")))

    def test_trigger_fields_follow_kind(self):
        with pytest.raises(RuleConfigError):
            Trigger(TriggerKind.ANY, product_code="101")
        with pytest.raises(RuleConfigError):
            Trigger(TriggerKind.PRODUCT, category_name="Meals", product_code="101")

    def test_bad_datetime_message(self):
        with pytest.raises(RuleConfigError, match="endAt"):
            parse_timestamp("31/01/2024", "endAt")


class TestLiveness:
    START = datetime(2024, 1, 1, 0, 0)
    END = datetime(2024, 1, 31, 23, 59)

    def rule(self, **kw):
        return PromotionRule("TEN", PercentOff(Decimal("10")), start_at=self.START, end_at=self.END, **kw)

    def test_bounds_are_inclusive(self):
        assert self.rule().is_live(self.START)
        assert self.rule().is_live(self.END)

    def test_outside_window(self):
        assert not self.rule().is_live(datetime(2023, 12, 31, 23, 59))
        assert not self.rule().is_live(datetime(2024, 2, 1))

    def test_inactive_is_never_live(self):
        assert not self.rule(active=False).is_live(datetime(2024, 1, 15))

    def test_open_window(self):
        assert PromotionRule("TEN", PercentOff(Decimal("10"))).is_live()


def test_normalize_code():
    assert normalize_code("  ten ") == "TEN"
    assert normalize_code(None) == ""
    assert rule_from_payload(payload(code=" Ten ")).matches_code("ten")
