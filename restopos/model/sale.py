from datetime import datetime, timezone
from ..extensions import db

from ..pos.evaluator import BreakdownEntry
from ..pos.invoice import Invoice, InvoiceLine, STATUS_CREATED
from ..utils.money import D

def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)

class Sale(db.Model):
    __tablename__ = "sales"

    id = db.Column(db.Integer, primary_key=True)
    invoice_no = db.Column(db.String(32), unique=True, nullable=False, index=True)  # e.g. "ANN-000042"
    status = db.Column(db.String(20), default=STATUS_CREATED, nullable=False, index=True)
    payment_mode = db.Column(db.String(20), nullable=False)

    # Money snapshot
    sub_total = db.Column(db.Numeric(12, 2), nullable=False)
    discount_total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    tax_total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    grand_total = db.Column(db.Numeric(12, 2), nullable=False)

    promo_code = db.Column(db.String(64), index=True)
    promo_breakdown_json = db.Column(db.JSON)            # [{label, amount}]
    kot_note = db.Column(db.String(255))

    cancel_reason = db.Column(db.String(255))
    cancelled_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=_utcnow, index=True)

    items = db.relationship(
        "SaleItem",
        backref="sale",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="SaleItem.line_index.asc()",
    )

    @classmethod
    def from_invoice(cls, inv: Invoice) -> "Sale":
        sale = cls(
            invoice_no=inv.invoice_no,
            status=inv.status,
            payment_mode=inv.payment_mode,
            sub_total=inv.sub_total,
            discount_total=inv.discount_total,
            tax_total=inv.tax_total,
            grand_total=inv.grand_total,
            promo_code=inv.promo_code,
            promo_breakdown_json=[b.as_api() for b in inv.promo_breakdown],
            kot_note=inv.kot_note,
            cancel_reason=inv.cancel_reason,
            cancelled_at=inv.cancelled_at,
            created_at=inv.created_at,
        )
        for idx, ln in enumerate(inv.items):
            sale.items.append(SaleItem(
                line_index=idx,
                product_code=ln.product_code,
                name=ln.product_name,
                variant_id=ln.variant_id,
                variant_name=ln.variant_name,
                unit_price=ln.unit_price,
                quantity=ln.quantity,
                is_free=ln.free,
            ))
        return sale

    def to_invoice(self) -> Invoice:
        return Invoice(
            invoice_no=self.invoice_no,
            created_at=self.created_at,
            items=tuple(i.to_line() for i in self.items),
            sub_total=D(self.sub_total),
            discount_total=D(self.discount_total or 0),
            tax_total=D(self.tax_total or 0),
            grand_total=D(self.grand_total),
            payment_mode=self.payment_mode,
            promo_code=self.promo_code,
            promo_breakdown=tuple(
                BreakdownEntry(b.get("label", ""), D(b["amount"]) if b.get("amount") is not None else None)
                for b in (self.promo_breakdown_json or [])
            ),
            status=self.status,
            cancel_reason=self.cancel_reason,
            cancelled_at=self.cancelled_at,
            kot_note=self.kot_note,
        )

    def as_summary(self):
        return {
            "invoiceNo": self.invoice_no,
            "datetime": self.created_at.isoformat() if self.created_at else None,
            "grandTotal": float(self.grand_total or 0),
            "paymentMode": self.payment_mode,
            "status": self.status,
            "itemCount": sum(i.quantity for i in self.items),
        }

class SaleItem(db.Model):
    __tablename__ = "sale_items"

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    line_index = db.Column(db.Integer, nullable=False)

    product_code = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    variant_id = db.Column(db.String(64))
    variant_name = db.Column(db.String(120))

    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    is_free = db.Column(db.Boolean, default=False)

    def to_line(self) -> InvoiceLine:
        return InvoiceLine(
            product_code=self.product_code,
            product_name=self.name,
            unit_price=D(self.unit_price),
            quantity=self.quantity,
            variant_id=self.variant_id,
            variant_name=self.variant_name,
            free=bool(self.is_free),
        )

class InvoiceSequence(db.Model):
    """Last number handed out per invoice prefix."""
    __tablename__ = "invoice_sequence"

    prefix = db.Column(db.String(16), primary_key=True)
    last_value = db.Column(db.Integer, nullable=False, default=0)
