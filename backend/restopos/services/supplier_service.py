# Overview: Service-layer operations for suppliers; CRUD and purchasing metrics.

"""
Supplier Service

Suppliers are referenced by products and purchase orders, so deleting one
only deactivates it (is_active=False). Inactive suppliers are hidden from
listings by default but stay readable by id.

Metrics are derived from the supplier's purchase orders, grouped by the
calendar month the order was created in (newest month first, at most 12).
"""

from __future__ import annotations

from collections import OrderedDict

from ..extensions import db
from ..models import PurchaseOrder, Supplier
from ..validation import ModelValidationPolicy


SUPPLIER_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "contact_person", "email", "phone", "address", "city",
        "payment_terms", "lead_time_days", "min_order_quantity", "is_active",
    },
    required_on_create={"name"},
)

METRICS_MONTHS = 12


class SupplierNotFoundError(Exception):
    """Raised when a supplier is not found."""
    pass


class SupplierValidationError(Exception):
    """Raised when supplier data fails validation."""
    pass


def get_supplier(supplier_id: int) -> Supplier:
    supplier = db.session.get(Supplier, supplier_id)
    if not supplier:
        raise SupplierNotFoundError(f"Supplier {supplier_id} not found")
    return supplier


def list_suppliers(include_inactive: bool = False, search: str | None = None) -> list[Supplier]:
    query = db.session.query(Supplier)
    if not include_inactive:
        query = query.filter(Supplier.is_active.is_(True))
    if search:
        like = f"%{search.strip()}%"
        query = query.filter(db.or_(Supplier.name.ilike(like), Supplier.contact_person.ilike(like)))
    return query.order_by(Supplier.name.asc(), Supplier.id.asc()).all()


def create_supplier(*, patch: dict) -> Supplier:
    """Create an active supplier from a validated patch dict."""
    name = (patch.get("name") or "").strip()
    if not name:
        raise SupplierValidationError("Supplier name is required")

    supplier = Supplier(is_active=True)
    for k, v in patch.items():
        setattr(supplier, k, v)
    supplier.name = name

    db.session.add(supplier)
    db.session.commit()
    return supplier


def update_supplier(*, supplier_id: int, patch: dict) -> Supplier:
    supplier = get_supplier(supplier_id)

    if "name" in patch and not (patch["name"] or "").strip():
        raise SupplierValidationError("Supplier name cannot be empty")

    for k, v in patch.items():
        setattr(supplier, k, v)

    db.session.commit()
    return supplier


def delete_supplier(*, supplier_id: int) -> Supplier:
    """Soft delete: the supplier is deactivated, not removed."""
    supplier = get_supplier(supplier_id)
    if supplier.is_active:
        supplier.is_active = False
        db.session.commit()
    return supplier


def get_supplier_metrics(supplier_id: int) -> list[dict]:
    """
    Monthly purchasing figures for one supplier.

    Each row: month ("YYYY-MM"), order_count, received_count,
    cancelled_count, total_amount (excluding cancelled orders) and
    avg_delivery_days (created -> received, received orders only).
    """
    get_supplier(supplier_id)

    orders = (
        db.session.query(PurchaseOrder)
        .filter(PurchaseOrder.supplier_id == supplier_id)
        .order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc())
        .all()
    )

    months: OrderedDict[str, dict] = OrderedDict()
    for po in orders:
        month = po.created_at.strftime("%Y-%m")
        if month not in months:
            if len(months) >= METRICS_MONTHS:
                break
            months[month] = {
                "month": month,
                "order_count": 0,
                "received_count": 0,
                "cancelled_count": 0,
                "total_amount": 0.0,
                "_delivery_days": [],
            }
        row = months[month]
        row["order_count"] += 1
        if po.status == "cancelled":
            row["cancelled_count"] += 1
            continue
        row["total_amount"] += po.total_amount or 0.0
        if po.status == "received":
            row["received_count"] += 1
            if po.received_at:
                delta = po.received_at - po.created_at
                row["_delivery_days"].append(delta.total_seconds() / 86400)

    result = []
    for row in months.values():
        days = row.pop("_delivery_days")
        row["total_amount"] = round(row["total_amount"], 2)
        row["avg_delivery_days"] = round(sum(days) / len(days), 1) if days else None
        result.append(row)
    return result
