# restopos/pos/catalog.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

from ..utils.money import D
from .cart import LineItem
from .errors import UnknownProductError


@dataclass(frozen=True)
class CatalogVariant:
    id: str
    name: str
    price: Decimal


@dataclass(frozen=True)
class CatalogProduct:
    code: str
    name: str
    price: Decimal
    category: str | None = None
    variants: tuple = field(default_factory=tuple)

    def variant(self, variant_id) -> CatalogVariant | None:
        return next((v for v in self.variants if v.id == str(variant_id)), None)


class Catalog(Protocol):
    def get_product(self, code: str) -> CatalogProduct | None: ...

    def in_category(self, code: str, category_name: str) -> bool: ...


def line_item_for(catalog: Catalog, code, variant_id=None, qty: int = 1) -> LineItem:
    """
    Price a new cart line from the catalog as it is right now. The price is
    copied into the line, later catalog edits do not touch open carts.
    """
    product = catalog.get_product(str(code))
    if product is None:
        raise UnknownProductError(f"product {code} not found")

    if product.variants and variant_id is None:
        # same default the POS picker uses
        variant_id = product.variants[0].id

    if variant_id is not None:
        variant = product.variant(variant_id)
        if variant is None:
            raise UnknownProductError(f"variant {variant_id} not found for product {code}")
        return LineItem(
            product_code=product.code,
            product_name=product.name,
            unit_price=variant.price,
            quantity=qty,
            variant_id=variant.id,
            variant_name=variant.name,
        )
    return LineItem(product_code=product.code, product_name=product.name, unit_price=product.price, quantity=qty)


class MemoryCatalog:
    """Dict-backed catalog for scripts and tests."""

    def __init__(self, products=()):
        self._products: dict[str, CatalogProduct] = {}
        for p in products:
            self.put(p)

    def put(self, product: CatalogProduct):
        self._products[str(product.code)] = product

    def add(self, code, name, price, category=None, variants=()):
        vs = tuple(CatalogVariant(str(vid), vname, D(vprice)) for vid, vname, vprice in variants)
        self.put(CatalogProduct(str(code), name, D(price), category, vs))

    def get_product(self, code):
        return self._products.get(str(code))

    def in_category(self, code, category_name):
        p = self._products.get(str(code))
        if not p or not p.category or not category_name:
            return False
        return p.category.strip().lower() == category_name.strip().lower()
