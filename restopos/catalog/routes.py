# --- restopos/catalog/routes.py ---
# Read-only catalog for the product grid; catalog editing lives elsewhere.
from flask import request

from ..services.catalog_service import list_categories, search_products, get_product_row
from ..utils.api import ok, err
from . import bp


@bp.get("/categories")
def categories():
    rows = list_categories()
    return ok("categories", {"items": [c.as_dict() for c in rows]})


@bp.get("/products")
def products():
    """
    q        -> substring match on name or code
    category -> category name ("All" or empty = every category)
    """
    rows = search_products(request.args.get("q"), request.args.get("category"))
    return ok("products", {"items": [p.as_api() for p in rows]})


@bp.get("/products/<code>")
def product(code):
    p = get_product_row(code)
    if not p:
        return err("product not found", 404)
    return ok("product", {"product": p.as_api()})
