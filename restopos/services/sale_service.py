# restopos/services/sale_service.py
import logging

from ..extensions import db
from ..model import Sale, InvoiceSequence
from ..pos.errors import PosError
from ..pos.invoice import cancel as cancel_invoice, STATUS_CREATED, STATUS_CANCELLED

logger = logging.getLogger("restopos.sales")

SALE_STATUSES = (STATUS_CREATED, STATUS_CANCELLED)


class InvoiceNotFoundError(PosError, LookupError):
    status = 404


def next_invoice_no(prefix: str) -> str:
    """
    Reserve the next number for ``prefix`` (``ANN-000001``, ``ANN-000002`` ...).
    Runs inside the caller's transaction; a rollback gives the number back.
    """
    prefix = (prefix or "INV").strip().upper()
    seq = (
        db.session.query(InvoiceSequence)
        .filter(InvoiceSequence.prefix == prefix)
        .with_for_update()
        .first()
    )
    if seq is None:
        seq = InvoiceSequence(prefix=prefix, last_value=0)
        db.session.add(seq)
    seq.last_value = (seq.last_value or 0) + 1
    db.session.flush()
    return f"{prefix}-{seq.last_value:06d}"


def record_sale(invoice) -> Sale:
    sale = Sale.from_invoice(invoice)
    db.session.add(sale)
    db.session.flush()
    return sale


def _get_row(invoice_no) -> Sale:
    sale = Sale.query.filter(Sale.invoice_no == str(invoice_no).strip()).first()
    if not sale:
        raise InvoiceNotFoundError(f"invoice {invoice_no} not found")
    return sale


def get_invoice(invoice_no):
    return _get_row(invoice_no).to_invoice()


def list_sales(status=None, limit=200, start=None, end=None):
    q = Sale.query
    if status:
        q = q.filter(Sale.status == status)
    if start:
        q = q.filter(Sale.created_at >= start)
    if end:
        q = q.filter(Sale.created_at < end)
    return q.order_by(Sale.created_at.desc(), Sale.id.desc()).limit(limit).all()


def cancel_sale(invoice_no, reason=None):
    """Created -> Cancelled. Returns the updated invoice."""
    sale = _get_row(invoice_no)
    cancelled = cancel_invoice(sale.to_invoice(), reason)
    sale.status = cancelled.status
    sale.cancel_reason = cancelled.cancel_reason
    sale.cancelled_at = cancelled.cancelled_at
    db.session.commit()
    logger.info("sale %s cancelled (%s)", sale.invoice_no, sale.cancel_reason or "no reason")
    return sale.to_invoice()
