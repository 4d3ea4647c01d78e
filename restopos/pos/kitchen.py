# restopos/pos/kitchen.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class KitchenLine:
    product_code: str
    name: str
    quantity: int
    variant_id: str | None = None
    variant_name: str | None = None

    def as_api(self):
        return {
            "code": self.product_code,
            "name": self.name,
            "variantId": self.variant_id,
            "variantName": self.variant_name,
            "qty": self.quantity,
        }


def project(items) -> list[KitchenLine]:
    """
    Kitchen view of cart or invoice lines: one row per product+variant in
    first-seen order, quantities summed, no prices. Free lines merge with a
    purchased line of the same identity.
    """
    grouped: dict[str, KitchenLine] = {}
    for it in items:
        prev = grouped.get(it.key)
        if prev is None:
            grouped[it.key] = KitchenLine(
                product_code=it.product_code,
                name=it.product_name,
                quantity=it.quantity,
                variant_id=it.variant_id,
                variant_name=it.variant_name,
            )
        else:
            grouped[it.key] = KitchenLine(
                prev.product_code, prev.name, prev.quantity + it.quantity, prev.variant_id, prev.variant_name
            )
    return list(grouped.values())
