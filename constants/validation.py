"""
Validation Constants

Contains whitelist values for validating user input and keeping
stored data consistent.
"""

# Order lifecycle states
ORDER_OPEN = 'open'
ORDER_COMPLETED = 'completed'
ORDER_CANCELED = 'canceled'
VALID_ORDER_STATUSES = {ORDER_OPEN, ORDER_COMPLETED, ORDER_CANCELED}

# Stock movement types
MOVEMENT_SALE = 'sale'
MOVEMENT_ENTRY = 'entry'
MOVEMENT_ADJUSTMENT = 'adjustment'
MOVEMENT_LOSS = 'loss'
VALID_MOVEMENT_TYPES = {MOVEMENT_SALE, MOVEMENT_ENTRY, MOVEMENT_ADJUSTMENT, MOVEMENT_LOSS}

# Manual stock adjustment directions
ADJUST_IN = 'in'
ADJUST_OUT = 'out'
VALID_ADJUST_DIRECTIONS = {ADJUST_IN, ADJUST_OUT}

# Decimal places kept on stock values (about 1 g / 1 ml for kg/l stock)
STOCK_DECIMALS = 3

# Maximum field lengths
MAX_LENGTHS = {
    'ingredient_name': 100,
    'product_name': 100,
    'category': 50,
    'fixed_cost_name': 100,
    'movement_reason': 200,
}
