"""
Pricing Constants

Defaults for pricing settings and the rules of the suggested-price formula.
"""

# Minimum margin used when the configured targets add up to 100% or more
FLOOR_MARGIN_PERCENT = 10

# Psychological rounding step (prices are rounded up to the next 0.10)
PRICE_STEP = '0.1'

# Settings keys and their defaults (Settings is a key-value table)
SETTING_TARGET_MARGIN = 'target_margin'
SETTING_TAX_AND_LOSS = 'tax_and_loss_percent'
SETTING_MONTHLY_BILLING = 'estimated_monthly_billing'
SETTING_BUSINESS_NAME = 'business_name'

PRICING_DEFAULTS = {
    SETTING_TARGET_MARGIN: 20.0,
    SETTING_TAX_AND_LOSS: 0.0,
    SETTING_MONTHLY_BILLING: 0.0,
}
