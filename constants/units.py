"""
Unit Constants and Conversion Tables

Contains the closed set of units accepted for purchasing, recipes and stock,
their physical dimensions, and the conversion factors between them.
"""

from enum import Enum


class Unit(str, Enum):
    """Units accepted everywhere in the costing engine."""
    KG = 'kg'
    G = 'g'
    L = 'l'
    ML = 'ml'
    UN = 'un'


# Physical dimensions
MASS = 'mass'
VOLUME = 'volume'
COUNT = 'count'

UNIT_DIMENSIONS = {
    Unit.KG: MASS,
    Unit.G: MASS,
    Unit.L: VOLUME,
    Unit.ML: VOLUME,
    Unit.UN: COUNT,
}

# Unit conversion factors (unit -> (base_unit, factor))
# Units only convert when they share a base unit.
UNIT_CONVERSIONS = {
    # Weight: base = G
    Unit.KG: (Unit.G, 1000),
    Unit.G: (Unit.G, 1),
    # Volume: base = ML
    Unit.L: (Unit.ML, 1000),
    Unit.ML: (Unit.ML, 1),
    # Count: base = UN
    Unit.UN: (Unit.UN, 1),
}

VALID_UNITS = {unit.value for unit in Unit}

# Display labels for stock reports
UNIT_LABELS = {
    Unit.KG: 'kg',
    Unit.G: 'g',
    Unit.L: 'L',
    Unit.ML: 'ml',
    Unit.UN: 'un',
}
