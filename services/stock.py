"""
Stock Service

Stock deduction for completed sales, manual stock adjustments, stock
availability checks and inventory metrics.

All stock writes go through apply_stock_change(), which reads the current
value and writes the new one with compare-and-swap on the ingredient's row
version, retrying when another writer got there first. Deduction is
best-effort: problems with one item or ingredient are logged and the rest
of the order is still deducted.
"""

import logging

from constants import (
    STOCK_DECIMALS,
    MOVEMENT_SALE,
    MOVEMENT_ENTRY,
    MOVEMENT_ADJUSTMENT,
    ADJUST_IN,
    ADJUST_OUT,
    VALID_ADJUST_DIRECTIONS,
    VALID_MOVEMENT_TYPES,
)
from .cost import price_per_unit
from .errors import (
    CostingError,
    InvalidStockAdjustment,
    MissingRecipe,
    PersistenceFailure,
    UnknownIngredient,
)
from .units import convert

log = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5


def clamp_stock(value):
    """Floor a stock value at zero and drop floating-point noise."""
    return round(max(0.0, value), STOCK_DECIMALS)


def apply_stock_change(repository, ingredient_id, compute, movement_type, reason='',
                       order_id=None, max_retries=DEFAULT_MAX_RETRIES, start_tracking=False):
    """
    Read-modify-write one ingredient's stock with compare-and-swap.

    Args:
        repository: catalog store (see services.repository.CatalogRepository)
        ingredient_id: ingredient to change
        compute: function(current_stock) -> new stock
        movement_type: sale, entry, adjustment or loss
        start_tracking: treat untracked stock as 0 instead of skipping

    Returns:
        (old_stock, new_stock), or None when the ingredient has no stock tracking

    Raises:
        UnknownIngredient: ingredient does not exist
        PersistenceFailure: write failed or kept conflicting after max_retries
    """
    for attempt in range(1, max_retries + 1):
        ingredient = repository.get_ingredient(ingredient_id)
        if ingredient is None:
            raise UnknownIngredient(ingredient_id)

        current = ingredient.current_stock
        if current is None:
            if not start_tracking:
                return None
            current = 0.0

        new_stock = compute(current)
        written = repository.write_stock(
            ingredient_id,
            expected_version=ingredient.version,
            new_stock=new_stock,
            movement={
                'type': movement_type,
                'quantity': round(new_stock - current, STOCK_DECIMALS),
                'unit': ingredient.purchase_unit,
                'reason': reason,
                'order_id': order_id,
            },
        )
        if written:
            return current, new_stock

        log.debug('Stock write conflict on ingredient %s (attempt %d/%d)',
                  ingredient_id, attempt, max_retries)

    raise PersistenceFailure(ingredient_id, f'version conflict after {max_retries} attempts')


def _deduct_item(item, repository, order_id, max_retries, summary):
    recipe = repository.get_recipe(item.product_id)
    if not recipe:
        err = MissingRecipe(item.product_id)
        log.warning('Skipping stock deduction: %s', err.message)
        summary['skipped'].append({'product_id': item.product_id, 'reason': err.to_dict()})
        return

    for recipe_item in recipe:
        ingredient = repository.get_ingredient(recipe_item.ingredient_id)
        if ingredient is None:
            err = UnknownIngredient(recipe_item.ingredient_id)
            log.warning('Skipping stock deduction for product %s: %s', item.product_id, err.message)
            summary['skipped'].append({'product_id': item.product_id, 'reason': err.to_dict()})
            continue
        if ingredient.current_stock is None:
            log.info('Ingredient %s (%s) has no stock tracking, not deducting',
                     ingredient.id, ingredient.name)
            continue

        try:
            quantity = convert(
                recipe_item.quantity_used * item.quantity,
                recipe_item.unit_used,
                ingredient.purchase_unit,
            )
            result = apply_stock_change(
                repository, ingredient.id,
                lambda current: clamp_stock(current - quantity),
                MOVEMENT_SALE,
                reason=f'Sale of product {item.product_id} x{item.quantity}',
                order_id=order_id,
                max_retries=max_retries,
            )
        except PersistenceFailure as e:
            log.error('Stock deduction failed for ingredient %s: %s', ingredient.id, e.message)
            summary['failed'].append({'product_id': item.product_id, 'reason': e.to_dict()})
            continue
        except CostingError as e:
            log.warning('Skipping stock deduction for ingredient %s: %s', ingredient.id, e.message)
            summary['skipped'].append({'product_id': item.product_id, 'reason': e.to_dict()})
            continue

        if result is None:
            continue
        old_stock, new_stock = result
        log.info('Stock of %s: %s -> %s %s (-%s)', ingredient.name, old_stock, new_stock,
                 ingredient.purchase_unit, round(quantity, STOCK_DECIMALS))
        summary['applied'].append({
            'product_id': item.product_id,
            'ingredient_id': ingredient.id,
            'quantity': quantity,
            'unit': ingredient.purchase_unit,
            'old_stock': old_stock,
            'new_stock': new_stock,
        })


def deduct_for_order(order_items, repository, order_id=None, max_retries=DEFAULT_MAX_RETRIES):
    """
    Deduct ingredient stock for the items of a completed order.

    Recipes and ingredients are re-read for every item, so recipe changes
    made after the order was placed are honored. Missing recipes, unknown
    or untracked ingredients and unit mismatches are logged and skipped;
    a failed write for one ingredient does not stop the others.

    Returns:
        dict with 'applied', 'skipped' and 'failed' lists
    """
    summary = {'applied': [], 'skipped': [], 'failed': []}
    if not order_items:
        log.info('No items to deduct for order %s', order_id)
        return summary

    for item in order_items:
        _deduct_item(item, repository, order_id, max_retries, summary)

    log.info('Stock deduction for order %s: %d applied, %d skipped, %d failed',
             order_id, len(summary['applied']), len(summary['skipped']), len(summary['failed']))
    return summary


def adjust_stock(repository, ingredient_id, direction, amount, reason='',
                 movement_type=None, max_retries=DEFAULT_MAX_RETRIES):
    """
    Manually add or remove stock, in the ingredient's purchase unit.

    'in' adds the amount; 'out' removes it, floored at zero. Untracked
    ingredients start tracking from zero.

    Returns:
        (old_stock, new_stock)
    """
    if direction not in VALID_ADJUST_DIRECTIONS:
        raise InvalidStockAdjustment(f'Invalid direction: {direction!r}', direction=direction)
    if amount is None or amount <= 0:
        raise InvalidStockAdjustment(f'Adjustment amount must be positive, got {amount}', amount=amount)
    if movement_type is None:
        movement_type = MOVEMENT_ENTRY if direction == ADJUST_IN else MOVEMENT_ADJUSTMENT
    if movement_type not in VALID_MOVEMENT_TYPES:
        raise InvalidStockAdjustment(f'Invalid movement type: {movement_type!r}', movement_type=movement_type)

    if direction == ADJUST_OUT:
        def compute(current):
            return clamp_stock(current - amount)
    else:
        def compute(current):
            return clamp_stock(current + amount)

    old_stock, new_stock = apply_stock_change(
        repository, ingredient_id, compute, movement_type,
        reason=reason, max_retries=max_retries, start_tracking=True,
    )
    log.info('Manual stock %s on ingredient %s: %s -> %s', direction, ingredient_id, old_stock, new_stock)
    return old_stock, new_stock


def check_stock_availability(order_items, repository):
    """
    Check whether tracked stock covers every ingredient the items need.

    Consumption is summed per ingredient across all items before comparing,
    so two dishes sharing an ingredient are checked together.

    Returns:
        dict with 'available' (bool) and 'missing' list
    """
    needed = {}
    ingredients = {}
    for item in order_items or []:
        for recipe_item in repository.get_recipe(item.product_id) or []:
            ingredient = repository.get_ingredient(recipe_item.ingredient_id)
            if ingredient is None or ingredient.current_stock is None:
                continue
            quantity = convert(
                recipe_item.quantity_used * item.quantity,
                recipe_item.unit_used,
                ingredient.purchase_unit,
            )
            ingredients[ingredient.id] = ingredient
            needed[ingredient.id] = needed.get(ingredient.id, 0.0) + quantity

    missing = []
    for ingredient_id, total in needed.items():
        ingredient = ingredients[ingredient_id]
        if ingredient.current_stock < total:
            missing.append({
                'ingredient_id': ingredient_id,
                'name': ingredient.name,
                'needed': round(total, STOCK_DECIMALS),
                'available': ingredient.current_stock,
                'unit': ingredient.purchase_unit,
            })

    return {'available': not missing, 'missing': missing}


def inventory_summary(ingredients):
    """Stock value, item count and low-stock list for stock-controlled ingredients."""
    total_value = 0.0
    low_stock = []
    tracked = [ing for ing in ingredients if ing.current_stock is not None]

    for ing in tracked:
        try:
            total_value += ing.current_stock * price_per_unit(ing)
        except CostingError as e:
            log.warning('Excluding ingredient %s from stock value: %s', ing.id, e.message)
        if ing.current_stock <= (ing.min_stock or 0):
            low_stock.append({
                'ingredient_id': ing.id,
                'name': ing.name,
                'current_stock': ing.current_stock,
                'min_stock': ing.min_stock,
                'unit': ing.purchase_unit,
            })

    return {
        'total_value': round(total_value, 2),
        'items_count': len(tracked),
        'low_stock_count': len(low_stock),
        'low_stock': low_stock,
    }
