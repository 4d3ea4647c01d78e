# restopos/pos/errors.py
"""Exceptions raised by the order composition and pricing core."""


class PosError(Exception):
    """Base class for core errors. ``status`` is the HTTP status the API maps it to."""
    status = 400


class RuleConfigError(PosError, ValueError):
    """A promotion definition that can never be evaluated (rejected at save time)."""
    status = 422


class EmptyCartError(PosError):
    status = 422

    def __init__(self, message="cart is empty"):
        super().__init__(message)


class StalePromotionError(PosError):
    """The promotion result was computed against a different set of cart lines."""
    status = 409

    def __init__(self, message="promotion was computed for a different cart; apply the code again"):
        super().__init__(message)


class InvoiceStateError(PosError):
    status = 409


class UnknownProductError(PosError, LookupError):
    status = 404
