from decimal import Decimal
from itertools import permutations

from restopos.pos.cart import Cart, LineItem
from restopos.pos.invoice import InvoiceLine
from restopos.pos.kitchen import project


def test_one_row_per_identity_in_first_seen_order():
    lines = [
        InvoiceLine("301", "Veg Biryani", Decimal("80"), 1, "1", "Half"),
        InvoiceLine("101", "Tea", Decimal("10"), 2),
        InvoiceLine("301", "Veg Biryani", Decimal("80"), 2, "1", "Half"),
        InvoiceLine("301", "Veg Biryani", Decimal("140"), 1, "2", "Full"),
    ]
    rows = project(lines)
    assert [(r.product_code, r.variant_name, r.quantity) for r in rows] == [
        ("301", "Half", 3),
        ("101", None, 2),
        ("301", "Full", 1),
    ]


def test_free_line_merges_with_paid_line():
    lines = [
        InvoiceLine("500", "Gulab Jamun", Decimal("25"), 1),
        InvoiceLine("500", "Gulab Jamun", Decimal("0"), 2, free=True),
    ]
    assert [r.quantity for r in project(lines)] == [3]


def test_no_prices_in_ticket():
    row = project(Cart([LineItem("101", "Tea", Decimal("10"), 2)]))[0]
    assert row.as_api() == {"code": "101", "name": "Tea", "variantId": None, "variantName": None, "qty": 2}


def test_totals_match_lines():
    lines = [InvoiceLine("101", "Tea", Decimal("10"), q) for q in (1, 4, 2)]
    assert sum(r.quantity for r in project(lines)) == 7


def test_empty():
    assert project([]) == []


def test_per_key_totals_do_not_depend_on_line_order():
    lines = [
        InvoiceLine("101", "Tea", Decimal("10"), 2),
        InvoiceLine("301", "Veg Biryani", Decimal("80"), 1, "1", "Half"),
        InvoiceLine("101", "Tea", Decimal("10"), 1),
        InvoiceLine("301", "Veg Biryani", Decimal("140"), 2, "2", "Full"),
        InvoiceLine("500", "Gulab Jamun", Decimal("0"), 1, free=True),
    ]
    expected = {"101:base": 3, "301:1": 1, "301:2": 2, "500:base": 1}
    for order in permutations(lines):
        rows = project(order)
        assert {f"{r.product_code}:{r.variant_id or 'base'}": r.quantity for r in rows} == expected
        assert len(rows) == len(expected)
