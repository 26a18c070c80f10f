"""
Cost Calculation Service

Functions for calculating ingredient and recipe costs.
"""

from .errors import InvalidYield, InvalidPackageSize, UnknownIngredient
from .units import convert


def price_per_unit(ingredient):
    """Price of one purchase unit, before yield loss."""
    if ingredient.purchase_quantity is None or ingredient.purchase_quantity <= 0:
        raise InvalidPackageSize(ingredient.id, ingredient.purchase_quantity)
    return ingredient.purchase_price / ingredient.purchase_quantity


def real_unit_cost(ingredient):
    """
    Yield-adjusted cost of one purchase unit.

    A 1 kg bag at 10.00 with 80% yield costs 12.50 per usable kg.
    """
    yield_percent = ingredient.yield_percent
    if yield_percent is None or yield_percent <= 0 or yield_percent > 100:
        raise InvalidYield(ingredient.id, yield_percent)

    pricing = price_per_unit(ingredient)
    return pricing / (yield_percent / 100)


def recipe_line_cost(item, ingredient):
    """Cost of one recipe line, converting the recipe unit to the purchase unit."""
    quantity = convert(item.quantity_used, item.unit_used, ingredient.purchase_unit)
    return real_unit_cost(ingredient) * quantity


def _lookup(catalog, ingredient_id):
    ingredient = catalog.get(ingredient_id)
    if ingredient is None:
        raise UnknownIngredient(ingredient_id)
    return ingredient


def product_unit_cost(product, catalog):
    """
    Calculate ingredient cost of one unit of a product.

    Args:
        product: object with a `recipe` list of recipe items
        catalog: mapping of ingredient id -> ingredient

    Returns:
        Sum of every recipe line's cost. An empty recipe costs 0.
    """
    return sum(
        (recipe_line_cost(item, _lookup(catalog, item.ingredient_id)) for item in product.recipe),
        0.0,
    )


def recipe_cost_breakdown(product, catalog):
    """Per-line cost contributions of a product's recipe, in recipe order."""
    lines = []
    for item in product.recipe:
        ingredient = _lookup(catalog, item.ingredient_id)
        lines.append({
            'ingredient_id': ingredient.id,
            'name': ingredient.name,
            'quantity_used': item.quantity_used,
            'unit_used': item.unit_used,
            'purchase_quantity': convert(item.quantity_used, item.unit_used, ingredient.purchase_unit),
            'purchase_unit': ingredient.purchase_unit,
            'cost': recipe_line_cost(item, ingredient),
        })
    return lines
