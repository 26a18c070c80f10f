"""
Pricing settings stored as key/value rows.

Keys are listed in constants.pricing; values are stored as text and
parsed by services.settings.
"""

from .base import db


class Settings(db.Model):
    """One pricing setting (target margin, tax and loss %, monthly billing)."""
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(50), unique=True, nullable=False, index=True)
    value = db.Column(db.String(100))

    def __repr__(self):
        return f'<Settings {self.key}={self.value}>'
