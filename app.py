"""
Menu Costing Application

Flask JSON API over the costing, pricing and stock services.
"""

import logging
import sqlite3
from types import SimpleNamespace

from flask import Flask, Blueprint, current_app, jsonify, request, abort
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import get_config, configure_logging
from constants import MAX_LENGTHS, ORDER_OPEN
from models import db, Ingredient, Product, RecipeItem, FixedCost, Order
from services import (
    CostingError,
    UnknownIngredient,
    parse_unit,
    price_per_unit,
    real_unit_cost,
    product_unit_cost,
    recipe_cost_breakdown,
    suggest_product_price,
    product_metrics,
    apply_suggested_price,
    adjust_stock,
    check_stock_availability,
    inventory_summary,
)
from services.orders import InvalidOrderItem, InvalidOrderTransition, create_order, update_order_status
from services.repository import CatalogRepository
from services.settings import get_pricing_settings, update_pricing_settings
from utils import FormError, parse_float, parse_int, sanitize_name, sanitize_text

log = logging.getLogger(__name__)

migrate = Migrate()
api = Blueprint('api', __name__)


@event.listens_for(Engine, 'connect')
def set_sqlite_pragma(dbapi_connection, connection_record):
    # Enable SQLite foreign key enforcement
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def _payload():
    return request.get_json(silent=True) or {}


def _max_retries():
    return current_app.config['STOCK_WRITE_MAX_RETRIES']


def _name(data, field, kind):
    name = sanitize_name(data.get(field, ''), max_length=MAX_LENGTHS[kind])
    if not name:
        raise FormError(field, 'is required')
    return name


# ============================================
# INGREDIENTS
# ============================================

@api.route('/ingredients')
def ingredients_list():
    ingredients = Ingredient.query.order_by(Ingredient.name).all()
    return jsonify([ing.to_dict() for ing in ingredients])


@api.route('/ingredients', methods=['POST'])
def ingredient_add():
    data = _payload()
    name = _name(data, 'name', 'ingredient_name')
    if Ingredient.query.filter(Ingredient.name.ilike(name)).first():
        return jsonify({'error': 'Conflict', 'message': f'"{name}" already exists'}), 409

    ingredient = Ingredient(
        name=name,
        purchase_unit=parse_unit(data.get('purchase_unit', 'un')).value,
        purchase_quantity=parse_float(data, 'purchase_quantity', required=True),
        purchase_price=parse_float(data, 'purchase_price', required=True, min_val=0),
        yield_percent=parse_float(data, 'yield_percent', default=100.0),
        current_stock=parse_float(data, 'current_stock', min_val=0),
        min_stock=parse_float(data, 'min_stock', min_val=0),
    )
    # Reject bad package size / yield before storing
    real_unit_cost(ingredient)

    db.session.add(ingredient)
    db.session.commit()
    return jsonify(ingredient.to_dict()), 201


@api.route('/ingredients/<int:id>', methods=['DELETE'])
def ingredient_delete(id):
    ingredient = db.get_or_404(Ingredient, id)
    db.session.delete(ingredient)
    db.session.commit()
    return '', 204


@api.route('/ingredients/<int:id>/cost')
def ingredient_cost(id):
    ingredient = db.get_or_404(Ingredient, id)
    return jsonify({
        'ingredient_id': ingredient.id,
        'unit': ingredient.purchase_unit,
        'price_per_unit': price_per_unit(ingredient),
        'real_unit_cost': real_unit_cost(ingredient),
    })


@api.route('/ingredients/<int:id>/stock', methods=['POST'])
def ingredient_adjust_stock(id):
    data = _payload()
    old_stock, new_stock = adjust_stock(
        CatalogRepository(), id,
        direction=data.get('direction'),
        amount=parse_float(data, 'amount', required=True),
        reason=sanitize_text(data.get('reason', ''), max_length=MAX_LENGTHS['movement_reason']),
        movement_type=data.get('type'),
        max_retries=_max_retries(),
    )
    return jsonify({'ingredient_id': id, 'old_stock': old_stock, 'new_stock': new_stock})


@api.route('/inventory')
def inventory():
    return jsonify(inventory_summary(Ingredient.query.all()))


@api.route('/stock/movements')
def stock_movements():
    movements = CatalogRepository().list_movements(
        movement_type=request.args.get('type'),
        ingredient_id=request.args.get('ingredient_id', type=int),
        limit=request.args.get('limit', default=100, type=int),
    )
    return jsonify([m.to_dict() for m in movements])


# ============================================
# PRODUCTS & PRICING
# ============================================

def _build_recipe(lines):
    recipe = []
    for position, line in enumerate(lines or []):
        ingredient_id = parse_int(line, 'ingredient_id', required=True)
        if db.session.get(Ingredient, ingredient_id) is None:
            raise UnknownIngredient(ingredient_id)
        recipe.append(RecipeItem(
            ingredient_id=ingredient_id,
            quantity_used=parse_float(line, 'quantity_used', required=True, min_val=0),
            unit_used=parse_unit(line.get('unit_used')).value,
            position=position,
        ))
    return recipe


def _catalog(product):
    return CatalogRepository().catalog_for(product)


@api.route('/products', methods=['POST'])
def product_add():
    data = _payload()
    product = Product(
        name=_name(data, 'name', 'product_name'),
        category=sanitize_text(data.get('category', ''), max_length=MAX_LENGTHS['category']),
        current_price=parse_float(data, 'current_price', default=0.0, min_val=0),
    )
    product.recipe = _build_recipe(data.get('recipe'))
    # Recipe units must match their ingredients' dimensions
    product_unit_cost(product, _catalog(product))

    db.session.add(product)
    db.session.commit()
    return jsonify(product.to_dict()), 201


@api.route('/products/<int:id>')
def product_view(id):
    return jsonify(db.get_or_404(Product, id).to_dict())


@api.route('/products/<int:id>/recipe', methods=['PUT'])
def product_recipe_update(id):
    product = db.get_or_404(Product, id)
    product.recipe = _build_recipe(_payload().get('recipe'))
    product_unit_cost(product, _catalog(product))
    db.session.commit()
    return jsonify(product.to_dict())


@api.route('/products/<int:id>/cost')
def product_cost(id):
    product = db.get_or_404(Product, id)
    catalog = _catalog(product)
    if not product.recipe:
        log.warning('Product %s has an empty recipe, costing at 0', product.id)
    return jsonify({
        'product_id': product.id,
        'unit_cost': product_unit_cost(product, catalog),
        'lines': recipe_cost_breakdown(product, catalog),
        'empty_recipe': not product.recipe,
    })


@api.route('/products/<int:id>/price-suggestion')
def product_price_suggestion(id):
    product = db.get_or_404(Product, id)
    suggestion = suggest_product_price(
        product, _catalog(product),
        CatalogRepository().get_fixed_costs(), get_pricing_settings(),
    )
    suggestion['empty_recipe'] = not product.recipe
    return jsonify(suggestion)


@api.route('/products/<int:id>/price', methods=['POST'])
def product_apply_price(id):
    product = db.get_or_404(Product, id)
    apply_suggested_price(product, parse_float(_payload(), 'price', required=True, min_val=0))
    db.session.commit()
    return jsonify(product.to_dict())


@api.route('/products/<int:id>/metrics')
def product_metrics_view(id):
    product = db.get_or_404(Product, id)
    return jsonify(product_metrics(
        product, _catalog(product),
        CatalogRepository().get_fixed_costs(), get_pricing_settings(),
    ))


# ============================================
# FIXED COSTS & SETTINGS
# ============================================

@api.route('/fixed-costs')
def fixed_costs_list():
    return jsonify([cost.to_dict() for cost in FixedCost.query.order_by(FixedCost.name).all()])


@api.route('/fixed-costs', methods=['POST'])
def fixed_cost_add():
    data = _payload()
    cost = FixedCost(
        name=_name(data, 'name', 'fixed_cost_name'),
        amount=parse_float(data, 'amount', required=True, min_val=0),
        category=sanitize_text(data.get('category', 'Other'), max_length=MAX_LENGTHS['category']) or 'Other',
    )
    db.session.add(cost)
    db.session.commit()
    return jsonify(cost.to_dict()), 201


@api.route('/settings/pricing')
def pricing_settings():
    return jsonify(get_pricing_settings())


@api.route('/settings/pricing', methods=['PUT'])
def pricing_settings_update():
    data = _payload()
    values = {
        key: parse_float(data, key, min_val=0)
        for key in ('target_margin', 'tax_and_loss_percent', 'estimated_monthly_billing')
    }
    return jsonify(update_pricing_settings(values))


# ============================================
# ORDERS
# ============================================

def _order_lines(data):
    items = data.get('items') or []
    for item in items:
        parse_int(item, 'product_id', required=True)
        parse_float(item, 'quantity', default=1, min_val=0)
    return items


@api.route('/orders', methods=['POST'])
def order_add():
    data = _payload()
    order, summary = create_order(
        _order_lines(data), status=data.get('status', ORDER_OPEN),
        max_retries=_max_retries(),
    )
    return jsonify({'order': order.to_dict(), 'stock': summary}), 201


@api.route('/orders/<int:id>/status', methods=['POST'])
def order_status(id):
    order, summary = update_order_status(id, _payload().get('status'), max_retries=_max_retries())
    if order is None:
        abort(404)
    return jsonify({'order': order.to_dict(), 'stock': summary})


@api.route('/orders/check-stock', methods=['POST'])
def order_check_stock():
    lines = [
        SimpleNamespace(product_id=int(item['product_id']), quantity=float(item.get('quantity', 1)))
        for item in _order_lines(_payload())
    ]
    return jsonify(check_stock_availability(lines, CatalogRepository()))


@api.route('/orders/<int:id>')
def order_view(id):
    return jsonify(db.get_or_404(Order, id).to_dict())


# ============================================
# ERROR HANDLERS
# ============================================

@api.errorhandler(CostingError)
def handle_costing_error(e):
    log.warning('Request rejected: %s', e.message)
    return jsonify(e.to_dict()), 400


@api.errorhandler(FormError)
def handle_form_error(e):
    return jsonify(e.to_dict()), 400


@api.errorhandler(InvalidOrderItem)
def handle_order_item(e):
    return jsonify({'error': 'InvalidOrderItem', 'message': str(e)}), 400


@api.errorhandler(InvalidOrderTransition)
def handle_order_transition(e):
    return jsonify({'error': 'InvalidOrderTransition', 'message': str(e)}), 409


@api.errorhandler(404)
def handle_not_found(e):
    return jsonify({'error': 'NotFound', 'message': 'Record not found'}), 404


# ============================================
# APP FACTORY & DATABASE
# ============================================

def create_app(env=None, **overrides):
    """Create the Flask app for an environment (development, production, testing)."""
    app = Flask(__name__)
    app.config.from_object(get_config(env))
    app.config.update(overrides)

    configure_logging(app.config['LOG_LEVEL'])

    db.init_app(app)
    migrate.init_app(app, db)
    app.register_blueprint(api)
    return app


def init_db(app):
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    app = create_app()
    init_db(app)
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=True, host='0.0.0.0', port=5000, use_reloader=False)
