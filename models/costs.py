"""
Fixed Cost Model

Contains the FixedCost model for monthly overheads (rent, salaries, ...).
"""

from .base import db


class FixedCost(db.Model):
    """Fixed monthly charge spread over all products."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    amount = db.Column(db.Float, nullable=False, default=0.0)
    category = db.Column(db.String(50), default='Other')

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'amount': self.amount, 'category': self.category}
