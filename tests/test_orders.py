"""Order transition tests: stock is deducted once per completion, never on re-save."""

import threading

import pytest

from app import create_app
from models import db, Ingredient, Order, Product, RecipeItem, StockMovement
from services.orders import (
    InvalidOrderItem,
    InvalidOrderTransition,
    _change_status,
    create_order,
    normalize_items,
    update_order_status,
)


def flour_stock(catalog):
    return db.session.get(Ingredient, catalog.flour.id, populate_existing=True).current_stock


def test_open_order_does_not_deduct(catalog, bread):
    order, summary = create_order([{'product_id': bread.id, 'quantity': 2, 'unit_price': 6.0}])

    assert order.status == 'open'
    assert summary is None
    assert flour_stock(catalog) == 5.0


def test_completing_an_order_deducts_once(catalog, bread):
    order, _ = create_order([{'product_id': bread.id, 'quantity': 2}])

    _, summary = update_order_status(order.id, 'completed')
    assert len(summary['applied']) == 1
    assert flour_stock(catalog) == 4.6

    # re-saving a completed order is a no-op
    _, again = update_order_status(order.id, 'completed')
    assert again is None
    assert flour_stock(catalog) == 4.6
    assert db.session.get(Order, order.id).stock_deducted is True


def test_counter_sale_created_completed_deducts_at_creation(catalog, bread):
    order, summary = create_order([{'product_id': bread.id, 'quantity': 3}], status='completed')

    assert summary['applied'][0]['new_stock'] == 4.4
    assert flour_stock(catalog) == 4.4

    update_order_status(order.id, 'completed')
    assert flour_stock(catalog) == 4.4
    assert StockMovement.query.filter_by(order_id=order.id).count() == 1


def test_canceled_order_never_deducts(catalog, bread):
    order, _ = create_order([{'product_id': bread.id, 'quantity': 2}])

    _, summary = update_order_status(order.id, 'canceled')

    assert summary is None
    assert flour_stock(catalog) == 5.0
    with pytest.raises(InvalidOrderTransition):
        update_order_status(order.id, 'completed')


def test_invalid_status_is_rejected(bread):
    with pytest.raises(InvalidOrderTransition):
        create_order([{'product_id': bread.id}], status='shipped')


def test_unknown_order(app):
    assert update_order_status(12345, 'completed') == (None, None)


def test_order_with_missing_product_still_completes(catalog, bread):
    order, summary = create_order(
        [{'product_id': 999, 'quantity': 1}, {'product_id': bread.id, 'quantity': 1}],
        status='completed',
    )

    assert order.status == 'completed'
    assert summary['skipped'][0]['product_id'] == 999
    assert flour_stock(catalog) == 4.8


def test_negative_quantity_is_rejected_before_saving(catalog, bread):
    with pytest.raises(InvalidOrderItem):
        create_order([{'product_id': bread.id, 'quantity': -10}], status='completed')

    assert flour_stock(catalog) == 5.0
    assert Order.query.count() == 0
    assert StockMovement.query.count() == 0


@pytest.mark.parametrize('quantity', [-1, float('nan'), '-0.5'])
def test_normalize_items_rejects_bad_quantities(quantity):
    with pytest.raises(InvalidOrderItem):
        normalize_items([{'product_id': 1, 'quantity': quantity}])


def test_status_change_requires_the_checked_status(catalog, bread):
    order, _ = create_order([{'product_id': bread.id, 'quantity': 1}])
    update_order_status(order.id, 'completed')

    # a cancel that saw the order while it was still open
    with pytest.raises(InvalidOrderTransition):
        _change_status(order.id, 'open', 'canceled')

    assert db.session.get(Order, order.id, populate_existing=True).status == 'completed'


def test_normalize_items_merges_same_product():
    items = normalize_items([
        {'product_id': 1, 'quantity': 1, 'unit_price': 5.0},
        {'product_id': '2', 'quantity': 2, 'unit_price': 3.0},
        {'product_id': 1, 'quantity': 2, 'unit_price': 5.0},
    ])
    assert items == [
        {'product_id': 1, 'quantity': 3.0, 'unit_price': 5.0, 'total': 15.0},
        {'product_id': 2, 'quantity': 2.0, 'unit_price': 3.0, 'total': 6.0},
    ]


# ============ concurrency ============

@pytest.fixture
def file_app(tmp_path):
    app = create_app(
        'testing',
        SQLALCHEMY_DATABASE_URI=f'sqlite:///{tmp_path / "orders.db"}',
        SQLALCHEMY_ENGINE_OPTIONS={'connect_args': {'timeout': 30}},
    )
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def _seed(app, initial_stock):
    with app.app_context():
        flour = Ingredient(name='Flour', purchase_unit='kg', purchase_quantity=1,
                           purchase_price=5.0, current_stock=initial_stock)
        db.session.add(flour)
        db.session.commit()
        bread = Product(name='Bread', recipe=[
            RecipeItem(ingredient_id=flour.id, quantity_used=100, unit_used='g'),
        ])
        db.session.add(bread)
        db.session.commit()
        return flour.id, bread.id


def _complete_concurrently(app, product_id, workers):
    errors = []
    barrier = threading.Barrier(workers)

    def complete():
        try:
            with app.app_context():
                barrier.wait()
                create_order([{'product_id': product_id, 'quantity': 1}],
                             status='completed', max_retries=100)
        except Exception as e:  # surfaced by the assertion below
            errors.append(e)

    threads = [threading.Thread(target=complete) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return errors


@pytest.mark.parametrize('initial_stock,expected', [
    (2.0, 1.2),   # 8 x 0.1 kg
    (0.5, 0.0),   # overshoots, floored at zero
])
def test_concurrent_completions_lose_no_updates(file_app, initial_stock, expected):
    ingredient_id, product_id = _seed(file_app, initial_stock)

    errors = _complete_concurrently(file_app, product_id, workers=8)

    assert errors == []
    with file_app.app_context():
        ingredient = db.session.get(Ingredient, ingredient_id)
        assert ingredient.current_stock == pytest.approx(max(0.0, initial_stock - 8 * 0.1), abs=1e-9)
        assert ingredient.current_stock == expected
        assert StockMovement.query.filter_by(ingredient_id=ingredient_id).count() == 8


def _race_complete_and_cancel(app, order_id):
    errors = []
    barrier = threading.Barrier(2)

    def move(status):
        try:
            with app.app_context():
                barrier.wait()
                update_order_status(order_id, status, max_retries=100)
        except Exception as e:  # surfaced by the assertions below
            errors.append(e)

    threads = [threading.Thread(target=move, args=(status,)) for status in ('completed', 'canceled')]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return errors


def test_concurrent_complete_and_cancel_apply_one_transition(file_app):
    ingredient_id, product_id = _seed(file_app, 10.0)
    with file_app.app_context():
        order_ids = [create_order([{'product_id': product_id, 'quantity': 1}])[0].id for _ in range(5)]

    for order_id in order_ids:
        errors = _race_complete_and_cancel(file_app, order_id)
        assert len(errors) == 1
        assert isinstance(errors[0], InvalidOrderTransition)

    with file_app.app_context():
        orders = [db.session.get(Order, order_id) for order_id in order_ids]
        completed = [o for o in orders if o.status == 'completed']
        for o in orders:
            # only completed orders ever deduct
            assert o.stock_deducted is (o.status == 'completed')
        stock = db.session.get(Ingredient, ingredient_id).current_stock
        assert stock == pytest.approx(10.0 - 0.1 * len(completed), abs=1e-9)
        assert StockMovement.query.filter_by(ingredient_id=ingredient_id).count() == len(completed)
