# restopos/services/promotion_service.py
import logging

from sqlalchemy import func

from ..extensions import db
from ..model import Promotion
from ..pos.errors import PosError, RuleConfigError
from ..pos.promotion import normalize_code, rule_from_payload

logger = logging.getLogger("restopos.promotions")


class PromotionNotFoundError(PosError, LookupError):
    status = 404


def rules_snapshot():
    """All stored rules as an immutable tuple; liveness is checked at evaluation time."""
    return tuple(p.to_rule() for p in Promotion.query.order_by(Promotion.id.asc()).all())


def find_rule(code):
    code = normalize_code(code)
    if not code:
        return None
    row = Promotion.query.filter(func.upper(Promotion.code) == code).first()
    return row.to_rule() if row else None


def list_rules(active=None):
    q = Promotion.query
    if active is not None:
        q = q.filter(Promotion.active == active)
    return [p.to_rule() for p in q.order_by(Promotion.id.desc()).all()]


def _get_row(rule_id) -> Promotion:
    row = db.session.get(Promotion, rule_id)
    if not row:
        raise PromotionNotFoundError(f"promotion {rule_id} not found")
    return row


def save_rule(payload: dict, rule_id=None):
    """
    Validate ``payload`` through the rule model and store it. Returns the
    saved rule, so callers do not need to read it back.
    """
    rule = rule_from_payload(payload, rule_id=rule_id)

    clash = Promotion.query.filter(func.upper(Promotion.code) == rule.code)
    if rule_id is not None:
        clash = clash.filter(Promotion.id != rule_id)
    if clash.first():
        raise RuleConfigError("Promotion code already exists")

    row = _get_row(rule_id) if rule_id is not None else Promotion()
    row.apply_rule(rule)
    if rule_id is None:
        db.session.add(row)
    db.session.commit()
    logger.info("promotion %s saved (id=%s, type=%s)", row.code, row.id, row.ptype)
    return row.to_rule()


def delete_rule(rule_id):
    row = _get_row(rule_id)
    db.session.delete(row)
    db.session.commit()
    logger.info("promotion %s deleted", row.code)
