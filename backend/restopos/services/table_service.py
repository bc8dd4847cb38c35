# Overview: Service-layer operations for floor tables; moving orders between tables.

"""
Table Operations

Orders belong to a table through Order.table_id. Two operations move them:

- transfer_orders: move the listed orders (or, with no list, every order
  currently at the source table) to the target table.
- split_table: move some of a table's orders to another table, e.g. when a
  party separates.

The selection and the reassignment happen in one transaction, with the
selected rows locked where the database supports it, so orders added to the
source table while a "transfer all" runs are either moved with it or wait
for it to commit.
"""

from __future__ import annotations

from ..extensions import db
from ..models import DiningTable, Order
from restopos.time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry


class TableNotFoundError(Exception):
    """Raised when a table does not exist."""
    pass


class TableError(Exception):
    """Raised when a table operation is rejected."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def get_table(table_id: int) -> DiningTable:
    table = db.session.get(DiningTable, table_id)
    if not table:
        raise TableNotFoundError(f"Table {table_id} not found")
    return table


def list_tables(include_inactive: bool = False) -> list[DiningTable]:
    query = db.session.query(DiningTable)
    if not include_inactive:
        query = query.filter(DiningTable.is_active.is_(True))
    return query.order_by(DiningTable.number).all()


def create_table(number: int, seats: int = 4, name: str | None = None) -> DiningTable:
    if isinstance(number, bool) or not isinstance(number, int) or number < 1:
        raise TableError("number must be a positive integer")
    if isinstance(seats, bool) or not isinstance(seats, int) or seats < 1:
        raise TableError("seats must be a positive integer")

    existing = db.session.query(DiningTable).filter_by(number=number).first()
    if existing:
        raise TableError(f"Table number {number} already exists")

    table = DiningTable(number=number, seats=seats, name=name, is_active=True)
    db.session.add(table)
    db.session.commit()
    return table


def _normalize_ids(order_ids) -> list[int]:
    if order_ids is None:
        return []
    if not isinstance(order_ids, (list, tuple)):
        raise TableError("order_ids must be a list")
    try:
        return list(dict.fromkeys(int(order_id) for order_id in order_ids))
    except (TypeError, ValueError):
        raise TableError("order_ids must be a list of integers")


def _move_orders(orders: list[Order], target_table_id: int) -> None:
    now = utcnow()
    for order in orders:
        order.table_id = target_table_id
        order.updated_at = now


def transfer_orders(
    source_table_id: int,
    target_table_id: int,
    order_ids: list[int] | None = None,
) -> dict:
    """
    Move orders from one table to another.

    With order_ids, exactly those orders are moved (wherever they currently
    sit); an unknown id aborts the whole transfer. Without order_ids (or with
    an empty list), every order at source_table_id is moved.

    Returns a summary dict with the ids that were moved.
    """
    if source_table_id == target_table_id:
        raise TableError("Cannot transfer orders to the same table")
    ids = _normalize_ids(order_ids)

    def _op():
        get_table(source_table_id)
        get_table(target_table_id)

        query = db.session.query(Order)
        if ids:
            query = query.filter(Order.id.in_(ids))
        else:
            query = query.filter(Order.table_id == source_table_id)
        orders = lock_for_update(query.order_by(Order.id)).all()

        if ids:
            missing = sorted(set(ids) - {order.id for order in orders})
            if missing:
                raise TableError("Some orders were not found", details={"missing_order_ids": missing})

        _move_orders(orders, target_table_id)
        db.session.commit()

        moved = [order.id for order in orders]
        return {
            "source_table": source_table_id,
            "target_table": target_table_id,
            "orders_transferred": len(moved),
            "order_ids": moved,
        }

    return run_with_retry(_op)


def split_table(original_table_id: int, new_table_id: int, order_ids: list[int]) -> dict:
    """
    Move selected orders of a table to another table.

    Every listed order must currently be at original_table_id.
    """
    if original_table_id == new_table_id:
        raise TableError("Cannot split a table onto itself")
    ids = _normalize_ids(order_ids)
    if not ids:
        raise TableError("order_ids is required to split a table")

    def _op():
        get_table(original_table_id)
        get_table(new_table_id)

        orders = lock_for_update(
            db.session.query(Order).filter(Order.id.in_(ids)).order_by(Order.id)
        ).all()

        missing = sorted(set(ids) - {order.id for order in orders})
        if missing:
            raise TableError("Some orders were not found", details={"missing_order_ids": missing})

        elsewhere = [order.id for order in orders if order.table_id != original_table_id]
        if elsewhere:
            raise TableError(
                "Some orders are not at the original table",
                details={"order_ids": elsewhere, "original_table_id": original_table_id},
            )

        _move_orders(orders, new_table_id)
        db.session.commit()

        return {
            "original_table_id": original_table_id,
            "new_table_id": new_table_id,
            "orders_moved": len(orders),
            "order_ids": [order.id for order in orders],
        }

    return run_with_retry(_op)
