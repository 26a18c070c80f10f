"""
Shared fixtures: an app on in-memory SQLite and a small seeded catalog.
"""

import os
import sys
from types import SimpleNamespace

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from models import db, Ingredient, Product, RecipeItem, FixedCost
from services.repository import CatalogRepository


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def repository(app):
    return CatalogRepository()


@pytest.fixture
def catalog(app):
    """Flour (kg, tracked), tomato (kg, 80% yield, untracked), milk (l), eggs (un)."""
    flour = Ingredient(name='Flour', purchase_unit='kg', purchase_quantity=1, purchase_price=5.0,
                       current_stock=5.0, min_stock=1.0)
    tomato = Ingredient(name='Tomato', purchase_unit='kg', purchase_quantity=1, purchase_price=8.0,
                        yield_percent=80)
    milk = Ingredient(name='Milk', purchase_unit='l', purchase_quantity=1, purchase_price=4.0,
                      current_stock=2.0, min_stock=3.0)
    eggs = Ingredient(name='Eggs', purchase_unit='un', purchase_quantity=12, purchase_price=6.0,
                      current_stock=24.0, min_stock=6.0)
    db.session.add_all([flour, tomato, milk, eggs])
    db.session.commit()
    return SimpleNamespace(flour=flour, tomato=tomato, milk=milk, eggs=eggs)


@pytest.fixture
def bread(catalog):
    """Bread: 200 g flour per unit."""
    product = Product(name='Bread', current_price=6.0, recipe=[
        RecipeItem(ingredient_id=catalog.flour.id, quantity_used=200, unit_used='g'),
    ])
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def pancakes(catalog):
    """Pancakes: 150 g flour, 250 ml milk, 2 eggs, 50 g tomato."""
    product = Product(name='Pancakes', current_price=12.0, recipe=[
        RecipeItem(ingredient_id=catalog.flour.id, quantity_used=150, unit_used='g', position=0),
        RecipeItem(ingredient_id=catalog.milk.id, quantity_used=250, unit_used='ml', position=1),
        RecipeItem(ingredient_id=catalog.eggs.id, quantity_used=2, unit_used='un', position=2),
        RecipeItem(ingredient_id=catalog.tomato.id, quantity_used=50, unit_used='g', position=3),
    ])
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def fixed_costs(app):
    costs = [FixedCost(name='Rent', amount=3000.0), FixedCost(name='Salaries', amount=1000.0)]
    db.session.add_all(costs)
    db.session.commit()
    return costs
