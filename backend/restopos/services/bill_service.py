# Overview: Service-layer operations for split bills; dividing an order between guests.

"""
Bill Splitting

split_bill divides an order between N guests and writes one SplitBill per
guest (status pending):

- With items_per_split ({guest_index: [order_item_id, ...]}, guest_index
  0-based), a guest's amount is the sum of the prices of their assigned
  lines. Lines are not weighted by quantity and tax is not added. Guests
  without assigned lines owe 0. An item id from another order is rejected.
- Without it, every guest owes order.total / N. The division is not rounded,
  so the shares always add back up to the total (63.25 / 2 -> 31.625 each).

split_count is capped by MAX_SPLIT_COUNT. Computation and inserts commit
together. Splitting an order again appends a new set of rows; earlier rows
are left as they are.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Order, SplitBill, SPLIT_BILL_STATUSES
from restopos.time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry
from .order_service import OrderNotFoundError


class SplitBillNotFoundError(Exception):
    """Raised when a split bill does not exist."""
    pass


class SplitBillError(Exception):
    """Raised when a split request is invalid."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _parse_split_count(value, max_count: int) -> int:
    if isinstance(value, bool):
        raise SplitBillError("split_count must be a positive integer")
    if isinstance(value, float) and not value.is_integer():
        raise SplitBillError("split_count must be a positive integer")
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise SplitBillError("split_count must be a positive integer")
    if count < 1:
        raise SplitBillError("split_count must be a positive integer")
    if count > max_count:
        raise SplitBillError(
            f"split_count cannot exceed {max_count}",
            details={"split_count": count, "max_split_count": max_count},
        )
    return count


def _parse_assignments(items_per_split, split_count: int) -> dict[int, set[int]]:
    """Normalize {"0": [1, 2], "1": [3]} into {0: {1, 2}, 1: {3}}."""
    if not isinstance(items_per_split, dict):
        raise SplitBillError("items_per_split must be an object of guest index -> item ids")

    assignments: dict[int, set[int]] = {}
    for key, item_ids in items_per_split.items():
        try:
            guest_index = int(key)
        except (TypeError, ValueError):
            raise SplitBillError(f"Invalid guest index: {key!r}")
        if guest_index < 0 or guest_index >= split_count:
            raise SplitBillError(
                f"Guest index {guest_index} is outside 0..{split_count - 1}",
                details={"guest_index": guest_index, "split_count": split_count},
            )
        if not isinstance(item_ids, (list, tuple)):
            raise SplitBillError(f"Item ids for guest {guest_index} must be a list")
        try:
            assignments[guest_index] = {int(item_id) for item_id in item_ids}
        except (TypeError, ValueError):
            raise SplitBillError(f"Item ids for guest {guest_index} must be integers")
    return assignments


def _item_snapshot(item) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "price": item.price,
        "quantity": item.quantity,
    }


def compute_shares(order: Order, split_count: int, assignments: dict[int, set[int]] | None) -> list[dict]:
    """
    Work out each guest's share without writing anything.

    Returns one dict per guest: guest_number (1-based), amount, items.
    """
    shares = []
    if assignments is not None:
        for guest_index in range(split_count):
            item_ids = assignments.get(guest_index, set())
            items = [item for item in order.items if item.id in item_ids]
            shares.append({
                "guest_number": guest_index + 1,
                "amount": sum(item.price for item in items),
                "items": [_item_snapshot(item) for item in items],
            })
    else:
        amount_per_guest = order.total / split_count
        for guest_index in range(split_count):
            shares.append({
                "guest_number": guest_index + 1,
                "amount": amount_per_guest,
                "items": [],
            })
    return shares


def split_bill(order_id: int, split_count, items_per_split: dict | None = None) -> list[SplitBill]:
    """Split an order between guests and store one pending SplitBill per guest."""
    count = _parse_split_count(split_count, current_app.config["MAX_SPLIT_COUNT"])
    assignments = None
    if items_per_split is not None:
        assignments = _parse_assignments(items_per_split, count)

    def _op():
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found")

        if assignments:
            order_item_ids = {item.id for item in order.items}
            unknown = sorted(set().union(*assignments.values()) - order_item_ids)
            if unknown:
                raise SplitBillError(
                    "Some items do not belong to this order",
                    details={"unknown_item_ids": unknown},
                )

        bills = []
        for share in compute_shares(order, count, assignments):
            bill = SplitBill(
                order_id=order.id,
                guest_number=share["guest_number"],
                total_guests=count,
                amount=share["amount"],
                items=share["items"],
                status="pending",
            )
            db.session.add(bill)
            bills.append(bill)

        db.session.commit()
        return bills

    return run_with_retry(_op)


def list_split_bills(order_id: int) -> list[SplitBill]:
    if not db.session.get(Order, order_id):
        raise OrderNotFoundError(f"Order {order_id} not found")

    return (
        db.session.query(SplitBill)
        .filter_by(order_id=order_id)
        .order_by(SplitBill.id)
        .all()
    )


def settle_split_bill(bill_id: int, status: str) -> SplitBill:
    """
    Mark a split bill paid or pending.

    paid_at is stamped when status is "paid" and cleared otherwise.
    """
    if status not in SPLIT_BILL_STATUSES:
        raise SplitBillError(f"status must be one of: {', '.join(SPLIT_BILL_STATUSES)}")

    bill = db.session.get(SplitBill, bill_id)
    if not bill:
        raise SplitBillNotFoundError(f"Split bill {bill_id} not found")

    bill.status = status
    bill.paid_at = utcnow() if status == "paid" else None
    db.session.commit()
    return bill
