# ------ restopos/model/__init__.py ------

from .category import Category
from .product import Product, ProductVariant
from .promotion import Promotion
from .sale import Sale, SaleItem, InvoiceSequence

__all__ = [
    "Category",
    "Product",
    "ProductVariant",
    "Promotion",
    "Sale",
    "SaleItem",
    "InvoiceSequence",
]
