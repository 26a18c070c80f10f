"""
Stock Movement Model

Contains the StockMovement model: one row per change applied to an
ingredient's stock (sales, purchases, manual adjustments, losses).
"""

from datetime import datetime, timezone

from .base import db


class StockMovement(db.Model):
    """Stock change history. quantity is signed and in the ingredient's purchase unit."""
    id = db.Column(db.Integer, primary_key=True)
    ingredient_id = db.Column(db.Integer, db.ForeignKey('ingredient.id', ondelete='CASCADE'), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False, index=True)  # sale, entry, adjustment, loss
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(10), nullable=False)
    reason = db.Column(db.String(200), default='')
    order_id = db.Column(db.Integer, nullable=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    ingredient = db.relationship('Ingredient')

    def to_dict(self):
        return {
            'id': self.id,
            'ingredient_id': self.ingredient_id,
            'ingredient_name': self.ingredient.name if self.ingredient else None,
            'type': self.type,
            'quantity': self.quantity,
            'unit': self.unit,
            'reason': self.reason,
            'order_id': self.order_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
