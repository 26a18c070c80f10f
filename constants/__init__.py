"""
Constants Package

Unit tables, pricing defaults and validation whitelists.
"""

from .units import (
    Unit,
    MASS,
    VOLUME,
    COUNT,
    UNIT_DIMENSIONS,
    UNIT_CONVERSIONS,
    UNIT_LABELS,
    VALID_UNITS,
)

from .pricing import (
    FLOOR_MARGIN_PERCENT,
    PRICE_STEP,
    SETTING_TARGET_MARGIN,
    SETTING_TAX_AND_LOSS,
    SETTING_MONTHLY_BILLING,
    SETTING_BUSINESS_NAME,
    PRICING_DEFAULTS,
)

from .validation import (
    ORDER_OPEN,
    ORDER_COMPLETED,
    ORDER_CANCELED,
    VALID_ORDER_STATUSES,
    MOVEMENT_SALE,
    MOVEMENT_ENTRY,
    MOVEMENT_ADJUSTMENT,
    MOVEMENT_LOSS,
    VALID_MOVEMENT_TYPES,
    ADJUST_IN,
    ADJUST_OUT,
    VALID_ADJUST_DIRECTIONS,
    STOCK_DECIMALS,
    MAX_LENGTHS,
)
