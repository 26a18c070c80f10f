"""
Services Package

Business logic modules for recipe costing, pricing and stock.

Database-backed modules (repository, settings, orders) import the models
and are imported directly, e.g. `from services.orders import create_order`.
"""

from .errors import (
    CostingError,
    InvalidUnit,
    DimensionMismatch,
    InvalidYield,
    InvalidPackageSize,
    UnknownIngredient,
    MissingRecipe,
    PricingInfeasible,
    PersistenceFailure,
    InvalidStockAdjustment,
)

from .units import (
    parse_unit,
    dimension_of,
    same_dimension,
    convert,
)

from .cost import (
    price_per_unit,
    real_unit_cost,
    recipe_line_cost,
    product_unit_cost,
    recipe_cost_breakdown,
)

from .pricing import (
    fixed_cost_percent,
    psychological_round,
    suggest_price,
    price_breakdown,
    suggest_product_price,
    product_metrics,
    apply_suggested_price,
)

from .stock import (
    clamp_stock,
    apply_stock_change,
    deduct_for_order,
    adjust_stock,
    check_stock_availability,
    inventory_summary,
)

__all__ = [
    # Errors
    'CostingError',
    'InvalidUnit',
    'DimensionMismatch',
    'InvalidYield',
    'InvalidPackageSize',
    'UnknownIngredient',
    'MissingRecipe',
    'PricingInfeasible',
    'PersistenceFailure',
    'InvalidStockAdjustment',
    # Units
    'parse_unit',
    'dimension_of',
    'same_dimension',
    'convert',
    # Cost
    'price_per_unit',
    'real_unit_cost',
    'recipe_line_cost',
    'product_unit_cost',
    'recipe_cost_breakdown',
    # Pricing
    'fixed_cost_percent',
    'psychological_round',
    'suggest_price',
    'price_breakdown',
    'suggest_product_price',
    'product_metrics',
    'apply_suggested_price',
    # Stock
    'clamp_stock',
    'apply_stock_change',
    'deduct_for_order',
    'adjust_stock',
    'check_stock_availability',
    'inventory_summary',
]
