# restaurant_pos/utils/pricing.py
"""Order pricing: subtotal -> discount -> tax -> total.

The same functions back the server (source of truth when an order is
created or edited) and the client (live preview while an order is built).
"""
from typing import Iterable, NamedTuple, Tuple

DISCOUNT_TYPES = ("none", "percentage", "fixed")


class OrderTotals(NamedTuple):
    subtotal: float
    discount_amount: float
    tax_amount: float
    total: float


def compute_subtotal(lines: Iterable[Tuple[float, int]]) -> float:
    # lines: (price_at_order, quantity) pairs
    return sum(price * quantity for price, quantity in lines)


def derive_discount_amount(subtotal: float, discount_type: str, discount_value: float) -> float:
    """Discount in money, clamped to ``[0, subtotal]``."""
    if discount_type not in DISCOUNT_TYPES:
        raise ValueError(f"Unknown discount type: {discount_type}")

    value = discount_value or 0.0
    if discount_type == "percentage":
        amount = subtotal * (value / 100)
    elif discount_type == "fixed":
        amount = value
    else:
        amount = 0.0
    return min(subtotal, max(0.0, amount))


def compute_order_totals(
    lines: Iterable[Tuple[float, int]],
    discount_type: str,
    discount_value: float,
    tax_rate: float,
) -> OrderTotals:
    subtotal = compute_subtotal(lines)
    discount_amount = derive_discount_amount(subtotal, discount_type, discount_value)
    taxable = subtotal - discount_amount
    tax_amount = taxable * ((tax_rate or 0.0) / 100)
    return OrderTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total=taxable + tax_amount,
    )
