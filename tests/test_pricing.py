"""Fixed-cost allocation and suggested price tests."""

from types import SimpleNamespace

import pytest

from services import (
    fixed_cost_percent,
    psychological_round,
    suggest_price,
    suggest_product_price,
    product_metrics,
    apply_suggested_price,
    price_breakdown,
    PricingInfeasible,
)


def cost(amount):
    return SimpleNamespace(amount=amount)


def test_fixed_cost_percent():
    assert fixed_cost_percent([cost(3000), cost(1000)], 20000) == 20.0


@pytest.mark.parametrize('billing', [0, -100, None])
def test_fixed_cost_percent_without_billing_is_zero(billing):
    assert fixed_cost_percent([cost(3000)], billing) == 0


def test_suggested_price_example():
    result = suggest_price(10, 20, 12, 20)
    assert result['price'] == 20.90
    assert result['clamped'] is False
    assert result['raw_price'] == pytest.approx(10 / 0.48)
    assert result['deduction_percent'] == 52


def test_exact_round_price_steps_down():
    # 6 / 0.5 = 12.00 exactly
    assert suggest_price(6, 20, 10, 20)['price'] == 11.90


@pytest.mark.parametrize('value,expected', [
    (20.8333, 20.9),
    (12.0, 11.9),
    (11.95, 11.9),
    (12.01, 12.1),
    (0.04, 0.1),
    (12.000000000000002, 11.9),
    (3.1, 3.1),
])
def test_psychological_round(value, expected):
    assert psychological_round(value) == expected


@pytest.mark.parametrize('unit_cost', [0.37, 1, 2.5, 4.8, 9.99, 10, 13.2, 47.5, 120])
def test_price_never_ends_in_zero_cents(unit_cost):
    price = suggest_price(unit_cost, 15, 8, 25)['price']
    cents = round(price * 100)
    assert cents % 10 == 0
    assert cents % 100 != 0


def test_huge_prices_are_still_rounded():
    # 1e19 / 0.7 needs more digits than the default decimal context holds
    result = suggest_price(1e19, 10, 10, 10)
    assert result['price'] == pytest.approx(1e19 / 0.7)
    assert psychological_round(1e300) == pytest.approx(1e300)


def test_unsustainable_targets_use_floor_margin():
    # 30 + 20 + 60 = 110% -> 30 + 20 + 10 = 60%
    result = suggest_price(10, 30, 20, 60)
    assert result['clamped'] is True
    assert result['margin_used'] == 10
    assert result['deduction_percent'] == 60
    assert result['price'] == 24.90


def test_floor_margin_still_infeasible():
    # 50 + 40 + 30 = 120% -> floor gives 50 + 40 + 10 = 100%
    with pytest.raises(PricingInfeasible) as exc:
        suggest_price(10, 50, 40, 30)
    err = exc.value
    assert err.clamped is True
    assert err.margin_used == 10
    assert err.deduction_percent == 100
    assert err.to_dict()['target_margin'] == 30


def test_zero_cost_suggests_zero():
    assert suggest_price(0, 20, 10, 20)['price'] == 0.0


def test_price_breakdown():
    parts = price_breakdown(20.0, 20, 12, 20)
    assert parts == {'fixed': 4.0, 'variable': 2.4, 'margin': 4.0}


def _product_and_catalog():
    flour = SimpleNamespace(id=1, name='Flour', purchase_unit='kg', purchase_quantity=1,
                            purchase_price=10.0, yield_percent=100)
    product = SimpleNamespace(id=7, current_price=25.0, recipe=[
        SimpleNamespace(ingredient_id=1, quantity_used=1000, unit_used='g'),
    ])
    return product, {1: flour}


SETTINGS = {'target_margin': 20.0, 'tax_and_loss_percent': 12.0, 'estimated_monthly_billing': 20000.0}


def test_suggest_product_price():
    product, catalog = _product_and_catalog()
    suggestion = suggest_product_price(product, catalog, [cost(4000)], SETTINGS)
    assert suggestion['unit_cost'] == 10.0
    assert suggestion['fixed_cost_percent'] == 20.0
    assert suggestion['price'] == 20.90
    assert suggestion['current_price'] == 25.0
    # never applied automatically
    assert product.current_price == 25.0


def test_product_metrics():
    product, catalog = _product_and_catalog()
    metrics = product_metrics(product, catalog, [cost(4000)], SETTINGS)
    assert metrics['cost_ingredients'] == 10.0
    assert metrics['cost_fixed'] == pytest.approx(5.0)
    assert metrics['cost_variable'] == pytest.approx(3.0)
    assert metrics['total_cost'] == pytest.approx(18.0)
    assert metrics['current_margin'] == pytest.approx(28.0)
    assert metrics['is_profitable'] is True
    assert metrics['suggested_price'] == 20.90


def test_product_metrics_reports_infeasible_pricing():
    product, catalog = _product_and_catalog()
    settings = dict(SETTINGS, tax_and_loss_percent=70.0)
    metrics = product_metrics(product, catalog, [cost(4000)], settings)
    assert metrics['suggested_price'] is None
    assert metrics['pricing_error']['error'] == 'PricingInfeasible'
    assert metrics['is_profitable'] is False


def test_apply_suggested_price():
    product, _ = _product_and_catalog()
    apply_suggested_price(product, 20.9)
    assert product.current_price == 20.9
    with pytest.raises(ValueError):
        apply_suggested_price(product, -1)
