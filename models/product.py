"""
Product Models

Contains the Product model and the RecipeItem rows that make up its
bill of materials.
"""

from sqlalchemy.orm import validates

from .base import db
from services.units import parse_unit


class Product(db.Model):
    """Dish on the menu. Its cost is derived from the recipe, never stored."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    category = db.Column(db.String(50), default='', index=True)
    current_price = db.Column(db.Float, nullable=False, default=0.0)
    recipe = db.relationship(
        'RecipeItem', backref='product', lazy=True,
        cascade='all, delete-orphan', order_by='RecipeItem.position',
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'current_price': self.current_price,
            'recipe': [item.to_dict() for item in self.recipe],
        }


class RecipeItem(db.Model):
    """One recipe line: quantity of an ingredient used per unit of product sold."""
    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    # No FK cascade: a deleted ingredient leaves the line behind so it shows up as unknown
    ingredient_id = db.Column(db.Integer, nullable=False, index=True)
    quantity_used = db.Column(db.Float, nullable=False)
    unit_used = db.Column(db.String(10), nullable=False)
    position = db.Column(db.Integer, default=0)  # display order only

    @validates('unit_used')
    def _validate_unit_used(self, key, value):
        return parse_unit(value).value

    def to_dict(self):
        return {
            'ingredient_id': self.ingredient_id,
            'quantity_used': self.quantity_used,
            'unit_used': self.unit_used,
        }
