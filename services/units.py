"""
Unit Conversion Service

Converts quantities between units of the same physical dimension.
"""

from constants import Unit, UNIT_DIMENSIONS, UNIT_CONVERSIONS
from .errors import InvalidUnit, DimensionMismatch


def parse_unit(value):
    """
    Validate a unit string and return the matching Unit.

    Accepts a Unit or a case-insensitive string; anything outside
    kg, g, l, ml, un raises InvalidUnit.
    """
    if isinstance(value, Unit):
        return value
    try:
        return Unit(str(value).strip().lower())
    except ValueError:
        raise InvalidUnit(value) from None


def dimension_of(unit):
    """Return the physical dimension (mass, volume, count) of a unit."""
    return UNIT_DIMENSIONS[parse_unit(unit)]


def same_dimension(unit_a, unit_b):
    return dimension_of(unit_a) == dimension_of(unit_b)


def convert(quantity, from_unit, to_unit):
    """
    Convert quantity from one unit to another.

    Same-unit input is returned unchanged. Pairs outside the conversion
    table raise DimensionMismatch instead of defaulting to 1:1.
    """
    from_unit = parse_unit(from_unit)
    to_unit = parse_unit(to_unit)

    if from_unit == to_unit:
        return quantity

    from_base, from_factor = UNIT_CONVERSIONS[from_unit]
    to_base, to_factor = UNIT_CONVERSIONS[to_unit]

    # Only convert if same base unit type (mass, volume or count)
    if from_base != to_base:
        raise DimensionMismatch(from_unit.value, to_unit.value)

    # Convert: from_unit -> base -> to_unit
    return quantity * from_factor / to_factor
