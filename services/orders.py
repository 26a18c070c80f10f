"""
Order Transition Service

Hooks the order lifecycle into stock deduction. Deduction is triggered by
the transition into 'completed' (or creating an order already completed),
never by the state itself: the Order.stock_deducted flag is claimed with a
conditional UPDATE, so only one caller per order ever deducts.
"""

import logging

from sqlalchemy import update

from constants import ORDER_OPEN, ORDER_COMPLETED, ORDER_CANCELED, VALID_ORDER_STATUSES
from models import db, Order, OrderItem
from .repository import CatalogRepository
from .stock import deduct_for_order

log = logging.getLogger(__name__)

# Allowed status transitions (re-saving the same status is always allowed)
TRANSITIONS = {
    ORDER_OPEN: {ORDER_COMPLETED, ORDER_CANCELED},
    ORDER_COMPLETED: set(),
    ORDER_CANCELED: set(),
}


class InvalidOrderTransition(ValueError):
    """Raised when an order is moved to a status it cannot reach."""
    pass


class InvalidOrderItem(ValueError):
    """Raised when an order line has an unusable quantity."""
    pass


def normalize_items(items):
    """
    Merge order lines for the same product.

    Args:
        items: iterable of dicts with product_id, quantity, unit_price

    Returns:
        list of dicts with product_id, quantity, unit_price, total

    Raises:
        InvalidOrderItem: a quantity is negative or not a number
    """
    merged = {}
    for item in items:
        product_id = int(item['product_id'])
        quantity = float(item.get('quantity', 1))
        if not quantity >= 0:
            raise InvalidOrderItem(f'Invalid quantity {quantity} for product {product_id}')
        unit_price = float(item.get('unit_price', 0.0))
        total = float(item.get('total', quantity * unit_price))
        if product_id in merged:
            merged[product_id]['quantity'] += quantity
            merged[product_id]['total'] += total
        else:
            merged[product_id] = {
                'product_id': product_id,
                'quantity': quantity,
                'unit_price': unit_price,
                'total': total,
            }
    return list(merged.values())


def _claim_deduction(order_id):
    """Atomically flip stock_deducted; True only for the single winning caller."""
    result = db.session.execute(
        update(Order)
        .where(
            Order.id == order_id,
            Order.status == ORDER_COMPLETED,
            Order.stock_deducted.is_(False),
        )
        .values(stock_deducted=True)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1


def _change_status(order_id, previous, new_status):
    """Move the order only if it still has the status the transition was checked against."""
    result = db.session.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == previous)
        .values(status=new_status)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise InvalidOrderTransition(
            f'Order {order_id} is no longer {previous}, cannot move it to {new_status}'
        )
    db.session.commit()


def _run_deduction(order, repository, max_retries):
    if not _claim_deduction(order.id):
        log.info('Order %s already deducted, skipping', order.id)
        return None
    return deduct_for_order(order.items, repository, order_id=order.id, max_retries=max_retries)


def create_order(items, status=ORDER_OPEN, repository=None, max_retries=5):
    """
    Persist a new order. Orders created already completed (counter sales)
    deduct stock immediately.

    Returns:
        (order, deduction summary or None)
    """
    if status not in VALID_ORDER_STATUSES:
        raise InvalidOrderTransition(f'Invalid order status: {status}')

    lines = normalize_items(items)
    order = Order(status=status, total_amount=sum(line['total'] for line in lines))
    order.items = [OrderItem(**line) for line in lines]
    db.session.add(order)
    db.session.commit()
    log.info('Created order %s with %d items (%s)', order.id, len(lines), status)

    summary = None
    if status == ORDER_COMPLETED:
        summary = _run_deduction(order, repository or CatalogRepository(), max_retries)
    return order, summary


def update_order_status(order_id, new_status, repository=None, max_retries=5):
    """
    Move an order to new_status and deduct stock on open -> completed.

    Re-saving a completed order, or canceling, never deducts. The status is
    written with a conditional UPDATE, so of two concurrent transitions out of
    the same status only one is applied.

    Returns:
        (order, deduction summary or None)

    Raises:
        InvalidOrderTransition: the move is not allowed, or the order left
            its status while this call was running
    """
    if new_status not in VALID_ORDER_STATUSES:
        raise InvalidOrderTransition(f'Invalid order status: {new_status}')

    order = db.session.get(Order, order_id, populate_existing=True)
    if order is None:
        return None, None

    previous = order.status
    if new_status != previous and new_status not in TRANSITIONS[previous]:
        raise InvalidOrderTransition(f'Cannot move order {order_id} from {previous} to {new_status}')

    if new_status != previous:
        _change_status(order_id, previous, new_status)

    summary = None
    if new_status == ORDER_COMPLETED:
        summary = _run_deduction(order, repository or CatalogRepository(), max_retries)
    return order, summary
