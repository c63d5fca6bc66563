import pytest

from restaurant_pos.utils.pricing import (
    compute_order_totals, compute_subtotal, derive_discount_amount,
)


def test_subtotal_sums_price_times_quantity():
    assert compute_subtotal([(10.0, 2), (2.5, 4)]) == pytest.approx(30.0)
    assert compute_subtotal([]) == 0


@pytest.mark.parametrize("discount_type, value, expected", [
    ("none", 15, 0.0),
    ("percentage", 10, 5.0),
    ("percentage", 150, 50.0),
    ("fixed", 7.5, 7.5),
    ("fixed", 80, 50.0),
    ("fixed", -5, 0.0),
    ("percentage", -10, 0.0),
])
def test_discount_is_clamped_to_subtotal(discount_type, value, expected):
    assert derive_discount_amount(50.0, discount_type, value) == pytest.approx(expected)


def test_unknown_discount_type_is_rejected():
    with pytest.raises(ValueError):
        derive_discount_amount(10.0, "bogus", 1)


def test_tax_applies_after_discount():
    totals = compute_order_totals([(10.0, 2), (5.0, 1)], "percentage", 20, 10)
    assert totals.subtotal == pytest.approx(25.0)
    assert totals.discount_amount == pytest.approx(5.0)
    assert totals.tax_amount == pytest.approx(2.0)
    assert totals.total == pytest.approx(22.0)


def test_total_matches_invariant():
    subtotal, rate = 37.4, 8.25
    totals = compute_order_totals([(subtotal, 1)], "fixed", 4.4, rate)
    assert totals.total == pytest.approx((subtotal - 4.4) * (1 + rate / 100))


def test_full_discount_means_zero_total():
    totals = compute_order_totals([(12.0, 1)], "fixed", 100, 21)
    assert totals.discount_amount == pytest.approx(12.0)
    assert totals.tax_amount == 0
    assert totals.total == 0


def test_zero_tax_rate():
    totals = compute_order_totals([(3.0, 3)], "none", 0, 0)
    assert totals.tax_amount == 0
    assert totals.total == pytest.approx(9.0)
