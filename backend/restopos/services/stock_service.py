# Overview: Service-layer operations for stock movements; the only writer of Product.quantity.

"""
Stock Movements

Every change to a product's on-hand quantity is an append-only
StockMovement row plus the same signed change applied to Product.quantity,
written in one transaction.

Sign rules by movement type:
- inbound:    always positive (deliveries, receipts); the sign the caller
              sent is ignored
- outbound:   always negative (usage, waste)
- adjustment: keeps the caller's sign (stock count corrections)

A zero change is rejected for every type. Quantities may go negative; the
ledger records what happened rather than refusing an outbound movement.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Product, StockMovement, MOVEMENT_TYPES
from restopos.time_utils import range_start, utcnow
from .concurrency import lock_for_update, run_with_retry
from .product_service import ProductNotFoundError


class StockMovementError(Exception):
    """Raised when a stock movement is invalid."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def signed_change(movement_type: str, quantity_change) -> int:
    """Normalize the sign of a quantity change for its movement type."""
    if movement_type not in MOVEMENT_TYPES:
        raise StockMovementError(f"movement_type must be one of: {', '.join(MOVEMENT_TYPES)}")
    if isinstance(quantity_change, bool):
        raise StockMovementError("quantity_change must be an integer")
    if isinstance(quantity_change, float) and not quantity_change.is_integer():
        raise StockMovementError("quantity_change must be an integer")
    try:
        change = int(quantity_change)
    except (TypeError, ValueError):
        raise StockMovementError("quantity_change must be an integer")
    if change == 0:
        raise StockMovementError("quantity_change cannot be zero")

    if movement_type == "inbound":
        return abs(change)
    if movement_type == "outbound":
        return -abs(change)
    return change


def apply_movement(
    product: Product,
    change: int,
    movement_type: str,
    reference_id: str | None = None,
    notes: str | None = None,
    user_id: int | None = None,
) -> StockMovement:
    """
    Stage a movement and the quantity change on an already-loaded product.

    Does not commit; callers commit together with whatever caused the
    movement (e.g. a purchase order receipt).
    """
    now = utcnow()
    movement = StockMovement(
        product_id=product.id,
        quantity_change=change,
        movement_type=movement_type,
        reference_id=str(reference_id) if reference_id is not None else None,
        notes=notes,
        created_by_user_id=user_id,
        created_at=now,
    )
    product.quantity = (product.quantity or 0) + change
    if change > 0 and movement_type == "inbound":
        product.last_restock_date = now

    db.session.add(movement)
    return movement


def record_movement(
    product_id: int,
    quantity_change,
    movement_type: str,
    reference_id: str | None = None,
    notes: str | None = None,
    user_id: int | None = None,
) -> StockMovement:
    """Append a movement and apply it to the product's quantity."""
    change = signed_change(movement_type, quantity_change)

    def _op():
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if not product:
            raise ProductNotFoundError(f"Product {product_id} not found")

        movement = apply_movement(product, change, movement_type, reference_id, notes, user_id)
        db.session.commit()
        return movement

    return run_with_retry(_op)


def list_movements(
    movement_type: str | None = None,
    date_range: str | None = None,
    product_id: int | None = None,
) -> list[StockMovement]:
    """
    Movements newest first.

    movement_type "all" (or None) means every type; date_range is one of
    today, week, month, all.
    """
    query = db.session.query(StockMovement)

    if movement_type and movement_type != "all":
        if movement_type not in MOVEMENT_TYPES:
            raise StockMovementError(f"movement_type must be one of: {', '.join(MOVEMENT_TYPES)}")
        query = query.filter(StockMovement.movement_type == movement_type)

    try:
        since = range_start(date_range)
    except ValueError as e:
        raise StockMovementError(str(e))
    if since is not None:
        query = query.filter(StockMovement.created_at >= since)

    if product_id is not None:
        query = query.filter(StockMovement.product_id == product_id)

    return query.order_by(StockMovement.created_at.desc(), StockMovement.id.desc()).all()
