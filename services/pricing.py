"""
Pricing Service

Fixed-cost allocation and suggested sale prices using markup-inside pricing:
fixed costs, tax/loss and margin are shares of the final price, so

    price = unit_cost / (1 - deductions / 100)

Fixed costs are spread as one flat percentage of estimated monthly billing,
applied identically to every product regardless of its sales volume or
preparation time. This is not activity-based costing.
"""

from decimal import Decimal, ROUND_CEILING, localcontext

from constants import FLOOR_MARGIN_PERCENT, PRICE_STEP
from .cost import product_unit_cost
from .errors import PricingInfeasible

_STEP = Decimal(PRICE_STEP)
# Float noise below this is dropped before rounding up (12.000000000000002 -> 12)
_NOISE = Decimal('1e-9')
# Enough digits for any finite float quantized to _NOISE
_PRECISION = 330


def fixed_cost_percent(fixed_costs, estimated_monthly_billing):
    """Monthly fixed costs as a percentage of estimated monthly billing."""
    if not estimated_monthly_billing or estimated_monthly_billing <= 0:
        return 0.0
    total = sum(cost.amount for cost in fixed_costs)
    return 100 * total / estimated_monthly_billing


def psychological_round(value):
    """
    Round a price up to the next 0.10, never ending in .00.

    20.83 -> 20.90, 12.00 -> 11.90, 11.95 -> 11.90 (12.00 minus 0.10).
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        amount = Decimal(repr(float(value))).quantize(_NOISE)
        rounded = amount.quantize(_STEP, rounding=ROUND_CEILING)
        if rounded > 0 and rounded % 1 == 0:
            rounded -= _STEP
        return float(rounded)


def suggest_price(unit_cost, fixed_cost_percent, tax_and_loss_percent, target_margin):
    """
    Suggest a sale price for a product.

    When fixed costs, tax/loss and margin add up to 100% or more, the margin
    is replaced by FLOOR_MARGIN_PERCENT and the result is flagged as clamped.
    If the floor still leaves no room, PricingInfeasible is raised with the
    raw numbers.

    Returns:
        dict with price, clamped, raw_price, deduction_percent, margin_used
    """
    margin_used = target_margin
    clamped = False
    deductions = fixed_cost_percent + tax_and_loss_percent + target_margin

    if deductions >= 100:
        clamped = True
        margin_used = FLOOR_MARGIN_PERCENT
        deductions = fixed_cost_percent + tax_and_loss_percent + FLOOR_MARGIN_PERCENT
        if deductions >= 100:
            raise PricingInfeasible(
                fixed_cost_percent, tax_and_loss_percent, target_margin,
                margin_used=margin_used, deduction_percent=deductions, clamped=clamped,
            )

    raw_price = unit_cost / (1 - deductions / 100)

    return {
        'price': psychological_round(raw_price) if raw_price > 0 else 0.0,
        'clamped': clamped,
        'raw_price': raw_price,
        'deduction_percent': deductions,
        'margin_used': margin_used,
    }


def price_breakdown(price, fixed_cost_percent, tax_and_loss_percent, margin_percent):
    """Split a price into the amounts covering fixed costs, tax/loss and margin."""
    return {
        'fixed': price * fixed_cost_percent / 100,
        'variable': price * tax_and_loss_percent / 100,
        'margin': price * margin_percent / 100,
    }


def suggest_product_price(product, catalog, fixed_costs, settings):
    """
    Cost a product and suggest its price from the current pricing settings.

    Calculation errors (unit mismatch, bad yield, infeasible targets)
    propagate to the caller.
    """
    unit_cost = product_unit_cost(product, catalog)
    fixed_percent = fixed_cost_percent(fixed_costs, settings['estimated_monthly_billing'])
    suggestion = suggest_price(
        unit_cost, fixed_percent,
        settings['tax_and_loss_percent'], settings['target_margin'],
    )
    suggestion.update({
        'product_id': product.id,
        'unit_cost': unit_cost,
        'fixed_cost_percent': fixed_percent,
        'tax_and_loss_percent': settings['tax_and_loss_percent'],
        'target_margin': settings['target_margin'],
        'current_price': product.current_price,
        'breakdown': price_breakdown(
            suggestion['price'], fixed_percent,
            settings['tax_and_loss_percent'], suggestion['margin_used'],
        ),
    })
    return suggestion


def product_metrics(product, catalog, fixed_costs, settings):
    """
    Cost and profitability of a product at its current price.

    Fixed and variable costs are charged as shares of the current price.
    A suggestion that cannot be computed is reported as None with the error.
    """
    cost_ingredients = product_unit_cost(product, catalog)
    fixed_percent = fixed_cost_percent(fixed_costs, settings['estimated_monthly_billing'])
    price = product.current_price or 0.0

    cost_fixed = price * fixed_percent / 100
    cost_variable = price * settings['tax_and_loss_percent'] / 100
    total_cost = cost_ingredients + cost_fixed + cost_variable
    profit = price - total_cost

    try:
        suggested = suggest_price(
            cost_ingredients, fixed_percent,
            settings['tax_and_loss_percent'], settings['target_margin'],
        )['price']
        pricing_error = None
    except PricingInfeasible as e:
        suggested = None
        pricing_error = e.to_dict()

    return {
        'product_id': product.id,
        'cost_ingredients': cost_ingredients,
        'cost_fixed': cost_fixed,
        'cost_variable': cost_variable,
        'total_cost': total_cost,
        'profit': profit,
        'current_margin': (profit / price * 100) if price > 0 else 0.0,
        'is_profitable': profit > 0,
        'suggested_price': suggested,
        'pricing_error': pricing_error,
    }


def apply_suggested_price(product, price):
    """Set a product's current price. Suggestions are never applied automatically."""
    if price is None or price < 0:
        raise ValueError(f'Invalid price: {price}')
    product.current_price = price
    return product
