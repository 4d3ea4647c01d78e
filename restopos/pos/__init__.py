# restopos/pos/__init__.py
"""
Order composition and promotion pricing core.

Pure Python: no Flask, no database. The app layer supplies the catalog,
rule and invoice stores and calls into these modules.
"""
from .cart import Cart, LineItem, make_key
from .catalog import Catalog, CatalogProduct, MemoryCatalog
from .errors import (
    PosError,
    RuleConfigError,
    EmptyCartError,
    StalePromotionError,
    InvoiceStateError,
    UnknownProductError,
)
from .evaluator import evaluate, PromotionResult, BreakdownEntry, FreeItem
from .invoice import Invoice, InvoiceLine, finalize, cancel, zero_tax, FlatRateTax
from .kitchen import KitchenLine, project
from .promotion import PromotionRule, Trigger, rule_from_payload, normalize_code

__all__ = [
    "Cart", "LineItem", "make_key",
    "Catalog", "CatalogProduct", "MemoryCatalog",
    "PosError", "RuleConfigError", "EmptyCartError", "StalePromotionError",
    "InvoiceStateError", "UnknownProductError",
    "evaluate", "PromotionResult", "BreakdownEntry", "FreeItem",
    "Invoice", "InvoiceLine", "finalize", "cancel", "zero_tax", "FlatRateTax",
    "KitchenLine", "project",
    "PromotionRule", "Trigger", "rule_from_payload", "normalize_code",
]
