"""
Settings Service

Typed access to the key-value Settings table for pricing settings.
"""

import logging

from constants import PRICING_DEFAULTS
from models import db, Settings

log = logging.getLogger(__name__)


def get_setting(key, default=None):
    row = Settings.query.filter_by(key=key).first()
    return row.value if row else default


def set_setting(key, value):
    """Create or update a setting. Caller commits."""
    row = Settings.query.filter_by(key=key).first()
    if row is None:
        row = Settings(key=key)
        db.session.add(row)
    row.value = str(value)
    return row


def get_pricing_settings():
    """
    Pricing settings with defaults for anything unset.

    Returns:
        dict with target_margin, tax_and_loss_percent, estimated_monthly_billing
    """
    settings = {}
    for key, default in PRICING_DEFAULTS.items():
        raw = get_setting(key)
        try:
            settings[key] = float(raw) if raw not in (None, '') else default
        except ValueError:
            log.warning('Setting %s has non-numeric value %r, using default %s', key, raw, default)
            settings[key] = default
    return settings


def update_pricing_settings(values):
    """Store numeric pricing settings from a dict; unknown keys are ignored."""
    for key in PRICING_DEFAULTS:
        if key in values and values[key] is not None:
            set_setting(key, float(values[key]))
    db.session.commit()
    return get_pricing_settings()
