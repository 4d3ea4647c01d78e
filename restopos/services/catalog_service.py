# restopos/services/catalog_service.py
from sqlalchemy import func, or_

from ..extensions import db
from ..model import Category, Product
from ..pos.catalog import CatalogProduct, line_item_for


class SqlCatalog:
    """
    Catalog provider over the product tables.

    Products are loaded once per instance, so one instance gives a stable
    view for the duration of a request (a promotion evaluation never sees a
    price change half way through).
    """

    def __init__(self, session=None):
        self.session = session or db.session
        self._cache: dict[str, CatalogProduct | None] = {}

    def get_product(self, code) -> CatalogProduct | None:
        code = str(code).strip()
        if code not in self._cache:
            row = self.session.query(Product).filter(Product.code == code, Product.status.is_(True)).first()
            self._cache[code] = row.to_catalog() if row else None
        return self._cache[code]

    def in_category(self, code, category_name) -> bool:
        product = self.get_product(code)
        if not product or not product.category or not category_name:
            return False
        return product.category.strip().lower() == category_name.strip().lower()

    def line_item(self, code, variant_id=None, qty=1):
        return line_item_for(self, code, variant_id, qty)


# ---- read-only listing used by the product grid ------------------------------

def list_categories():
    return Category.query.order_by(Category.sort_order.asc(), Category.name.asc()).all()


def search_products(q=None, category=None):
    query = Product.query.filter(Product.status.is_(True))
    q = (q or "").strip()
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.code.ilike(like)))
    category = (category or "").strip()
    if category and category.lower() != "all":
        query = query.join(Category).filter(func.lower(Category.name) == category.lower())
    return query.order_by(Product.sort_order.asc(), Product.code.asc()).all()


def get_product_row(code):
    return Product.query.filter(Product.code == str(code).strip()).first()
