"""
Database instance shared by every costing model.

Kept in its own module so models and services can import it without
pulling in the app factory.
"""

from flask_sqlalchemy import SQLAlchemy

# Bound to the Flask app by create_app()
db = SQLAlchemy()
