# Overview: Flask API routes for purchase orders.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..services import purchase_order_service
from ..services.activity_service import log_activity
from ..services.purchase_order_service import PurchaseOrderError, PurchaseOrderNotFoundError
from ..services.supplier_service import SupplierNotFoundError
from ..validation import ValidationError


purchase_orders_bp = Blueprint("purchase_orders", __name__, url_prefix="/api/purchase-orders")


@purchase_orders_bp.get("")
@require_auth
@require_permission("purchase_orders:read")
def list_purchase_orders_route():
    """Newest first, each with its supplier summary and lines."""
    try:
        orders = purchase_order_service.list_purchase_orders(
            status=request.args.get("status") or None,
            supplier_id=request.args.get("supplier_id", type=int),
        )
        return jsonify({"purchase_orders": [po.to_dict() for po in orders], "count": len(orders)}), 200
    except PurchaseOrderError as e:
        return jsonify({"error": str(e)}), 400


@purchase_orders_bp.post("")
@require_auth
@require_permission("purchase_orders:create")
def create_purchase_order_route():
    """
    Body: {"supplier_id": 1, "items": [{"product_id", "quantity", "unit_cost"}],
           "expected_delivery_date": "2026-11-02", "notes": "..."}
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        po = purchase_order_service.create_purchase_order(
            supplier_id=data.get("supplier_id"),
            items=data.get("items"),
            expected_delivery_date=data.get("expected_delivery_date"),
            notes=data.get("notes"),
            user_id=g.current_user.id,
        )
        log_activity(g.current_user.id, "create_purchase_order", f"Created PO #{po.id}", "purchase_orders", po.id)
        return jsonify(po.to_dict()), 201
    except SupplierNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PurchaseOrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create purchase order")
        return jsonify({"error": "Internal server error"}), 500


@purchase_orders_bp.get("/<int:po_id>")
@require_auth
@require_permission("purchase_orders:read")
def get_purchase_order_route(po_id: int):
    try:
        return jsonify(purchase_order_service.get_purchase_order(po_id).to_dict()), 200
    except PurchaseOrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404


@purchase_orders_bp.put("/<int:po_id>")
@require_auth
@require_permission("purchase_orders:update")
def update_purchase_order_route(po_id: int):
    """
    Body: any of {"status", "notes", "expected_delivery_date"}.

    status "received" books the lines into stock.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        po = purchase_order_service.update_purchase_order(po_id, data, user_id=g.current_user.id)
        description = f"Updated PO #{po_id}"
        if "status" in data:
            description = f"Updated PO #{po_id} status to {po.status}"
        log_activity(g.current_user.id, "update_purchase_order", description, "purchase_orders", po_id)
        return jsonify(po.to_dict()), 200
    except PurchaseOrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PurchaseOrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to update purchase order")
        return jsonify({"error": "Internal server error"}), 500


@purchase_orders_bp.delete("/<int:po_id>")
@require_auth
@require_permission("purchase_orders:delete")
def delete_purchase_order_route(po_id: int):
    try:
        purchase_order_service.delete_purchase_order(po_id)
        log_activity(g.current_user.id, "delete_purchase_order", f"Deleted PO #{po_id}", "purchase_orders", po_id)
        return jsonify({"message": "Purchase order deleted successfully"}), 200
    except PurchaseOrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except PurchaseOrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to delete purchase order")
        return jsonify({"error": "Internal server error"}), 500
