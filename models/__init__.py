"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db

from .ingredient import Ingredient
from .product import Product, RecipeItem
from .costs import FixedCost
from .order import Order, OrderItem
from .stock import StockMovement
from .settings import Settings

__all__ = [
    'db',
    'Ingredient',
    'Product',
    'RecipeItem',
    'FixedCost',
    'Order',
    'OrderItem',
    'StockMovement',
    'Settings',
]
