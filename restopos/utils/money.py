# restopos/utils/money.py

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

Money = Decimal

ZERO = Decimal("0")
CENT = Decimal("0.01")

def D(x) -> Money:
    if isinstance(x, Decimal):
        return x
    if isinstance(x, float):
        # go through repr so 0.1 stays 0.1
        return Decimal(repr(x))
    try:
        return Decimal(str(x if x not in (None, "") else "0"))
    except InvalidOperation:
        raise ValueError(f"not a number: {x!r}")

def round_money(x) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)

def to_float(x) -> float:
    return float(round_money(x))

def fmt_number(x) -> str:
    """10 -> '10', 12.50 -> '12.5'"""
    d = D(x).normalize()
    if d == d.to_integral_value():
        return str(d.quantize(Decimal("1")))
    return format(d, "f")
