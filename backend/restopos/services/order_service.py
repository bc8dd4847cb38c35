# Overview: Service-layer operations for orders; line items, totals and status.

"""
Order Ledger

An order is a table's tab. Its totals are always derived from its items:

    item.subtotal  = item.price * item.quantity
    order.subtotal = sum(item.subtotal)
    tax_amount     = subtotal * tax_rate, rounded half-up to cents
    total          = subtotal + tax_amount

Every mutation of the items (add, change quantity, remove) recomputes the
totals and commits both in one transaction, so a stored order is never left
with stale totals.

Status is one of open, completed, cancelled. Any status may be set from any
other; completed_at is stamped each time an order moves to completed and is
left alone otherwise. Only open orders accept item changes.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from flask import current_app

from ..extensions import db
from ..models import Order, OrderItem, ORDER_STATUSES
from restopos.time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry
from .table_service import get_table


class OrderNotFoundError(Exception):
    """Raised when an order (or one of its items) does not exist."""
    pass


class OrderError(Exception):
    """Raised when an order operation is rejected."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def round_money(value: float) -> float:
    """Round to cents, half-up (2.675 -> 2.68)."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _parse_price(value) -> float:
    if isinstance(value, bool) or value is None:
        raise OrderError("price is required and must be a number")
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise OrderError("price must be a number")
    if price < 0:
        raise OrderError("price cannot be negative")
    return price


def _parse_quantity(value) -> int:
    if isinstance(value, bool):
        raise OrderError("quantity must be a positive integer")
    if isinstance(value, float) and not value.is_integer():
        raise OrderError("quantity must be a positive integer")
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise OrderError("quantity must be a positive integer")
    if quantity < 1:
        raise OrderError("quantity must be a positive integer")
    return quantity


def _parse_tax_rate(value) -> float:
    if value is None:
        return float(current_app.config["DEFAULT_TAX_RATE"])
    try:
        rate = float(value)
    except (TypeError, ValueError):
        raise OrderError("tax_rate must be a number")
    if rate < 0 or rate > 1:
        raise OrderError("tax_rate must be between 0 and 1")
    return rate


def _build_item(data: dict) -> OrderItem:
    name = (data.get("name") or "").strip()
    if not name:
        raise OrderError("item name is required")
    price = _parse_price(data.get("price"))
    quantity = _parse_quantity(data.get("quantity", 1))
    menu_item_id = data.get("menu_item_id")

    return OrderItem(
        menu_item_id=str(menu_item_id) if menu_item_id is not None else None,
        name=name,
        name_ar=data.get("name_ar"),
        price=price,
        quantity=quantity,
        subtotal=round_money(price * quantity),
        notes=data.get("notes"),
    )


def _get_order_locked(order_id: int) -> Order:
    order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
    if not order:
        raise OrderNotFoundError(f"Order {order_id} not found")
    return order


def _require_open(order: Order) -> None:
    if order.status != "open":
        raise OrderError(
            f"Cannot modify items of a {order.status} order",
            details={"order_id": order.id, "status": order.status},
        )


def recompute_totals(order: Order) -> Order:
    """
    Recalculate subtotal, tax and total from the order's items.

    Does not commit; callers commit together with the item change.
    """
    subtotal = round_money(sum(item.price * item.quantity for item in order.items))
    tax_amount = round_money(subtotal * order.tax_rate)

    order.subtotal = subtotal
    order.tax_amount = tax_amount
    order.total = round_money(subtotal + tax_amount)
    order.updated_at = utcnow()
    return order


def create_order(
    table_id: int,
    tax_rate: float | None = None,
    items: list[dict] | None = None,
    user_id: int | None = None,
) -> Order:
    """
    Open a new order on a table with zeroed totals.

    Items submitted with the order are inserted in the same transaction and
    the totals computed before the commit.
    """
    rate = _parse_tax_rate(tax_rate)
    if items is not None and not isinstance(items, list):
        raise OrderError("items must be a list")

    # Validate everything before touching the session
    new_items = [_build_item(data) for data in (items or [])]
    get_table(table_id)

    def _op():
        now = utcnow()
        order = Order(
            table_id=table_id,
            subtotal=0.0,
            tax_rate=rate,
            tax_amount=0.0,
            total=0.0,
            status="open",
            created_by_user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        db.session.add(order)
        for item in new_items:
            order.items.append(item)
        recompute_totals(order)

        db.session.commit()
        return order

    return run_with_retry(_op)


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if not order:
        raise OrderNotFoundError(f"Order {order_id} not found")
    return order


def list_orders(status: str | None = None, table_id: int | None = None) -> list[Order]:
    """List orders newest first, optionally filtered by status and table."""
    if status is not None and status not in ORDER_STATUSES:
        raise OrderError(f"status must be one of: {', '.join(ORDER_STATUSES)}")

    query = db.session.query(Order)
    if status:
        query = query.filter(Order.status == status)
    if table_id is not None:
        query = query.filter(Order.table_id == table_id)

    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def add_item(order_id: int, item: dict) -> OrderItem:
    """Append a line item to an open order and recompute its totals."""
    new_item = _build_item(item)

    def _op():
        order = _get_order_locked(order_id)
        _require_open(order)

        order.items.append(new_item)
        recompute_totals(order)

        db.session.commit()
        return new_item

    return run_with_retry(_op)


def _get_item(order: Order, item_id: int) -> OrderItem:
    for item in order.items:
        if item.id == item_id:
            return item
    raise OrderNotFoundError(f"Item {item_id} not found on order {order.id}")


def update_item_quantity(order_id: int, item_id: int, quantity) -> OrderItem:
    """Change the quantity of one line and recompute the order's totals."""
    new_quantity = _parse_quantity(quantity)

    def _op():
        order = _get_order_locked(order_id)
        _require_open(order)

        item = _get_item(order, item_id)
        item.quantity = new_quantity
        item.subtotal = round_money(item.price * new_quantity)
        recompute_totals(order)

        db.session.commit()
        return item

    return run_with_retry(_op)


def remove_item(order_id: int, item_id: int) -> Order:
    """Remove one line from an open order and recompute its totals."""
    def _op():
        order = _get_order_locked(order_id)
        _require_open(order)

        item = _get_item(order, item_id)
        order.items.remove(item)
        recompute_totals(order)

        db.session.commit()
        return order

    return run_with_retry(_op)


def update_status(order_id: int, status: str) -> Order:
    """
    Set an order's status.

    No transition graph is enforced (a completed order can be reopened);
    only the value itself is validated.
    """
    if status not in ORDER_STATUSES:
        raise OrderError(f"status must be one of: {', '.join(ORDER_STATUSES)}")

    def _op():
        order = _get_order_locked(order_id)

        now = utcnow()
        order.status = status
        order.updated_at = now
        if status == "completed":
            order.completed_at = now

        db.session.commit()
        return order

    return run_with_retry(_op)
