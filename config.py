"""
Application Configuration

Centralizes all Flask, database and logging configuration settings.
"""

import logging
import os

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')
    JSON_SORT_KEYS = False

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///menu_costing.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Stock writes: compare-and-swap attempts before giving up on one ingredient
    STOCK_WRITE_MAX_RETRIES = int(os.environ.get('STOCK_WRITE_MAX_RETRIES', '5'))


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG').upper()


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])


def configure_logging(level='INFO'):
    """Configure root logging once; module-level loggers inherit it."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
