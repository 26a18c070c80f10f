"""
Order Models

Contains the Order and OrderItem models. Orders are owned by the order
lifecycle; this application only reads them and guards the stock deduction.
"""

from datetime import datetime, timezone

from .base import db


def _utcnow():
    return datetime.now(timezone.utc)


class Order(db.Model):
    """Sale with a status of open, completed or canceled."""
    id = db.Column(db.Integer, primary_key=True)
    status = db.Column(db.String(20), nullable=False, default='open', index=True)
    date = db.Column(db.DateTime, nullable=False, default=_utcnow)
    total_amount = db.Column(db.Float, default=0.0)
    # Set exactly once, by whoever wins the transition into 'completed'
    stock_deducted = db.Column(db.Boolean, nullable=False, default=False)
    items = db.relationship('OrderItem', backref='order', lazy=True, cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'status': self.status,
            'date': self.date.isoformat() if self.date else None,
            'total_amount': self.total_amount,
            'stock_deducted': self.stock_deducted,
            'items': [item.to_dict() for item in self.items],
        }


class OrderItem(db.Model):
    """Line of an order: units of one product sold."""
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('order.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False, index=True)
    quantity = db.Column(db.Float, nullable=False, default=1)
    unit_price = db.Column(db.Float, nullable=False, default=0.0)
    total = db.Column(db.Float, nullable=False, default=0.0)

    def to_dict(self):
        return {
            'product_id': self.product_id,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total': self.total,
        }
