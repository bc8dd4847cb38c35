# Overview: Service-layer operations for purchase orders; creation, status changes and receipts.

"""
Purchase Orders

- create_purchase_order: header and lines are inserted in one transaction;
  total_amount = sum(quantity * unit_cost) over the lines.
- update_purchase_order: status, notes and expected_delivery_date only.
  Moving an order to "received" books every line into stock (one inbound
  StockMovement per line, reference_id = purchase order id) in the same
  transaction as the status change. A received order cannot change status
  again, so stock is never booked twice.
- delete_purchase_order: hard delete of header and lines. Received orders
  cannot be deleted because their stock movements reference them.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Product, PurchaseOrder, PurchaseOrderItem, PURCHASE_ORDER_STATUSES
from ..validation import ValidationError
from restopos.time_utils import parse_iso_date, utcnow
from .concurrency import lock_for_update, run_with_retry
from .order_service import round_money
from .stock_service import apply_movement
from .supplier_service import get_supplier


class PurchaseOrderNotFoundError(Exception):
    """Raised when a purchase order is not found."""
    pass


class PurchaseOrderError(Exception):
    """Raised when a purchase order operation is rejected."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _parse_date(value):
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise PurchaseOrderError("expected_delivery_date must be an ISO-8601 date")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise PurchaseOrderError("expected_delivery_date must be an ISO-8601 date")


def _parse_line(index: int, data) -> dict:
    if not isinstance(data, dict):
        raise PurchaseOrderError(f"items[{index}] must be an object")

    try:
        product_id = int(data.get("product_id"))
    except (TypeError, ValueError):
        raise PurchaseOrderError(f"items[{index}].product_id is required")

    quantity = data.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise PurchaseOrderError(f"items[{index}].quantity must be a positive integer")

    unit_cost = data.get("unit_cost")
    if isinstance(unit_cost, bool) or not isinstance(unit_cost, (int, float)) or unit_cost < 0:
        raise PurchaseOrderError(f"items[{index}].unit_cost must be a non-negative number")

    return {"product_id": product_id, "quantity": quantity, "unit_cost": float(unit_cost)}


def get_purchase_order(po_id: int) -> PurchaseOrder:
    po = db.session.get(PurchaseOrder, po_id)
    if not po:
        raise PurchaseOrderNotFoundError(f"Purchase order {po_id} not found")
    return po


def list_purchase_orders(status: str | None = None, supplier_id: int | None = None) -> list[PurchaseOrder]:
    """Newest first, with supplier and lines loaded by to_dict()."""
    if status is not None and status not in PURCHASE_ORDER_STATUSES:
        raise PurchaseOrderError(f"status must be one of: {', '.join(PURCHASE_ORDER_STATUSES)}")

    query = db.session.query(PurchaseOrder)
    if status:
        query = query.filter(PurchaseOrder.status == status)
    if supplier_id is not None:
        query = query.filter(PurchaseOrder.supplier_id == supplier_id)
    return query.order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc()).all()


def create_purchase_order(
    supplier_id,
    items,
    expected_delivery_date: str | None = None,
    notes: str | None = None,
    user_id: int | None = None,
) -> PurchaseOrder:
    """Create a pending purchase order with its lines and computed total."""
    try:
        supplier_id = int(supplier_id)
    except (TypeError, ValueError):
        raise PurchaseOrderError("supplier_id is required")
    if not isinstance(items, list) or not items:
        raise PurchaseOrderError("items must be a non-empty list")

    lines = [_parse_line(i, data) for i, data in enumerate(items)]
    delivery_date = _parse_date(expected_delivery_date)

    supplier = get_supplier(supplier_id)
    if not supplier.is_active:
        raise PurchaseOrderError(f"Supplier {supplier_id} is inactive")

    product_ids = {line["product_id"] for line in lines}
    found = {
        p.id for p in db.session.query(Product).filter(Product.id.in_(product_ids)).all()
    }
    missing = sorted(product_ids - found)
    if missing:
        raise PurchaseOrderError("Some products were not found", details={"missing_product_ids": missing})

    def _op():
        now = utcnow()
        po = PurchaseOrder(
            supplier_id=supplier_id,
            total_amount=round_money(sum(line["quantity"] * line["unit_cost"] for line in lines)),
            status="pending",
            expected_delivery_date=delivery_date,
            notes=notes,
            created_by_user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            po.items.append(PurchaseOrderItem(**line))

        db.session.add(po)
        db.session.commit()
        return po

    return run_with_retry(_op)


def update_purchase_order(po_id: int, patch: dict, user_id: int | None = None) -> PurchaseOrder:
    """
    Update status, notes and/or expected_delivery_date.

    Only keys present in patch are changed.
    """
    if not isinstance(patch, dict):
        raise ValidationError("Invalid JSON payload")
    allowed = {"status", "notes", "expected_delivery_date"}
    unknown = sorted(set(patch) - allowed)
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(unknown)}")

    status = patch.get("status")
    if "status" in patch and status not in PURCHASE_ORDER_STATUSES:
        raise PurchaseOrderError(f"status must be one of: {', '.join(PURCHASE_ORDER_STATUSES)}")
    delivery_date = None
    if "expected_delivery_date" in patch:
        delivery_date = _parse_date(patch["expected_delivery_date"])

    def _op():
        po = lock_for_update(db.session.query(PurchaseOrder).filter_by(id=po_id)).first()
        if not po:
            raise PurchaseOrderNotFoundError(f"Purchase order {po_id} not found")

        if "status" in patch and status != po.status:
            if po.status == "received":
                raise PurchaseOrderError(
                    "A received purchase order cannot change status",
                    details={"purchase_order_id": po.id, "status": po.status},
                )
            if status == "received":
                _receive(po, user_id)
            po.status = status

        if "notes" in patch:
            po.notes = patch["notes"]
        if "expected_delivery_date" in patch:
            po.expected_delivery_date = delivery_date
        po.updated_at = utcnow()

        db.session.commit()
        return po

    return run_with_retry(_op)


def _receive(po: PurchaseOrder, user_id: int | None) -> None:
    product_ids = [item.product_id for item in po.items]
    products = {
        p.id: p
        for p in lock_for_update(
            db.session.query(Product).filter(Product.id.in_(product_ids))
        ).all()
    }
    for item in po.items:
        apply_movement(
            products[item.product_id],
            item.quantity,
            "inbound",
            reference_id=str(po.id),
            notes=f"Received PO #{po.id}",
            user_id=user_id,
        )
    po.received_at = utcnow()


def delete_purchase_order(po_id: int) -> None:
    po = get_purchase_order(po_id)
    if po.status == "received":
        raise PurchaseOrderError(
            "A received purchase order cannot be deleted",
            details={"purchase_order_id": po.id},
        )
    db.session.delete(po)
    db.session.commit()
