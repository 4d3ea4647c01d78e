# restopos/model/product.py
from ..extensions import db
from sqlalchemy.sql import func

from ..pos.catalog import CatalogProduct, CatalogVariant
from ..utils.money import D

class Product(db.Model):
    __tablename__ = "product"
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False, unique=True, index=True)   # short POS code, e.g. "101"
    name = db.Column(db.String(255), nullable=False, index=True)

    # base price; ignored at the till when the product has variants
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    unit = db.Column(db.String(32))                  # e.g. "cup", "plate"

    sort_order = db.Column(db.Integer, default=0)
    status = db.Column(db.Boolean, default=True, index=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    variants = db.relationship(
        "ProductVariant",
        backref="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProductVariant.id.asc()",
    )
    category_id = db.Column(
        db.Integer,
        db.ForeignKey("category.id"),
        nullable=True
    )

    def to_catalog(self) -> CatalogProduct:
        return CatalogProduct(
            code=self.code,
            name=self.name,
            price=D(self.price),
            category=self.category.name if self.category else None,
            variants=tuple(v.to_catalog() for v in self.variants),
        )

    def as_api(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "price": float(self.price or 0),
            "unit": self.unit,
            "status": self.status,
            "category": self.category.name if self.category else None,
            "variants": [v.as_api() for v in self.variants],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

class ProductVariant(db.Model):
    __tablename__ = "product_variant"
    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)          # e.g. "Half", "Full"
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    def to_catalog(self) -> CatalogVariant:
        return CatalogVariant(id=str(self.id), name=self.name, price=D(self.price))

    def as_api(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "price": float(self.price or 0),
        }
