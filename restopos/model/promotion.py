# --- restopos/model/promotion.py ---

from ..extensions import db
from sqlalchemy.sql import func

from ..pos.promotion import PromotionRule, rule_from_payload

class Promotion(db.Model):
    __tablename__ = "promotion"

    id = db.Column(db.Integer, primary_key=True)
    # stored uppercase; lookups are case-insensitive
    code = db.Column(db.String(64), unique=True, nullable=False, index=True)

    # PERCENT | AMOUNT | BOGO | ITEM_FREE
    ptype = db.Column(db.String(16), nullable=False)
    active = db.Column(db.Boolean, default=True, index=True)
    note = db.Column(db.String(255), default="")

    starts_at = db.Column(db.DateTime, nullable=True)    # naive UTC
    ends_at = db.Column(db.DateTime, nullable=True)

    # canonical, type-pure shapes written by PromotionRule.as_api()
    trigger_json = db.Column(db.JSON, nullable=False, default=dict)
    reward_json = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    def to_rule(self) -> PromotionRule:
        return rule_from_payload({
            "code": self.code,
            "type": self.ptype,
            "active": self.active,
            "startAt": self.starts_at,
            "endAt": self.ends_at,
            "note": self.note,
            "trigger": self.trigger_json or {},
            "reward": self.reward_json or {},
        }, rule_id=self.id)

    def apply_rule(self, rule: PromotionRule):
        self.code = rule.code
        self.ptype = rule.type.value
        self.active = rule.active
        self.note = rule.note
        self.starts_at = rule.start_at
        self.ends_at = rule.end_at
        self.trigger_json = rule.trigger.as_api()
        self.reward_json = rule.reward.as_api()
