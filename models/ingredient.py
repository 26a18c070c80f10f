"""
Ingredient Model

Contains the Ingredient model: purchase data used for costing and the
optional stock level tracked in the purchase unit.
"""

from sqlalchemy.orm import validates

from .base import db
from services.units import parse_unit


class Ingredient(db.Model):
    """
    Purchasable raw material.

    Cost fields:
    - purchase_unit:     kg, g, l, ml or un
    - purchase_quantity: amount in one purchased package, in purchase_unit
    - purchase_price:    price paid for one package
    - yield_percent:     usable share left after trimming/prep loss

    Stock fields (only for stock-controlled ingredients, in purchase_unit):
    - current_stock, min_stock: NULL when the ingredient is not tracked
    - version: bumped on every stock write, used for compare-and-swap
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)

    purchase_unit = db.Column(db.String(10), nullable=False, default='un')
    purchase_quantity = db.Column(db.Float, nullable=False, default=1.0)
    purchase_price = db.Column(db.Float, nullable=False, default=0.0)
    yield_percent = db.Column(db.Float, nullable=False, default=100.0)

    current_stock = db.Column(db.Float, nullable=True)
    min_stock = db.Column(db.Float, nullable=True)
    version = db.Column(db.Integer, nullable=False, default=0)

    @validates('purchase_unit')
    def _validate_purchase_unit(self, key, value):
        return parse_unit(value).value

    @property
    def tracks_stock(self):
        return self.current_stock is not None

    @property
    def is_low_stock(self):
        if not self.tracks_stock:
            return False
        return self.current_stock <= (self.min_stock or 0)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'purchase_unit': self.purchase_unit,
            'purchase_quantity': self.purchase_quantity,
            'purchase_price': self.purchase_price,
            'yield_percent': self.yield_percent,
            'current_stock': self.current_stock,
            'min_stock': self.min_stock,
        }
