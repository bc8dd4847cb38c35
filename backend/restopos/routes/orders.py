# Overview: Flask API routes for orders; line items, status and bill splitting.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..services import bill_service, order_service
from ..services.activity_service import log_activity
from ..services.bill_service import SplitBillError
from ..services.order_service import OrderError, OrderNotFoundError
from ..services.table_service import TableNotFoundError


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
@require_permission("orders:read")
def list_orders_route():
    """
    List orders, newest first.

    Query params:
    - status: open | completed | cancelled (optional)
    - table_id: int (optional)
    - include_items: "true" to embed line items
    """
    status = request.args.get("status") or None
    table_id = request.args.get("table_id", type=int)
    include_items = request.args.get("include_items", "false").lower() == "true"

    try:
        orders = order_service.list_orders(status=status, table_id=table_id)
        return jsonify({
            "orders": [o.to_dict(include_items=include_items) for o in orders],
            "count": len(orders),
        }), 200
    except OrderError as e:
        return jsonify({"error": str(e)}), 400


@orders_bp.post("")
@require_auth
@require_permission("orders:create")
def create_order_route():
    """
    Open an order on a table.

    Body: {"table_id": 3, "tax_rate": 0.15, "items": [{"name", "price", "quantity", ...}]}
    tax_rate and items are optional.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    table_id = data.get("table_id")
    if table_id is None:
        return jsonify({"error": "table_id is required"}), 400
    try:
        table_id = int(table_id)
    except (TypeError, ValueError):
        return jsonify({"error": "table_id must be an integer"}), 400

    try:
        order = order_service.create_order(
            table_id=table_id,
            tax_rate=data.get("tax_rate"),
            items=data.get("items"),
            user_id=g.current_user.id,
        )
        log_activity(g.current_user.id, "create_order", f"Opened order #{order.id} on table {table_id}", "orders", order.id)
        return jsonify(order.to_dict(include_items=True)), 201
    except TableNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<int:order_id>")
@require_auth
@require_permission("orders:read")
def get_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id)
        return jsonify(order.to_dict(include_items=True)), 200
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404


@orders_bp.post("/<int:order_id>/items")
@require_auth
@require_permission("orders:update")
def add_item_route(order_id: int):
    """Append a line item; the response is the order with recomputed totals."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        item = order_service.add_item(order_id, data)
        order = order_service.get_order(order_id)
        return jsonify({
            "item": item.to_dict(),
            "order": order.to_dict(include_items=True),
        }), 201
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to add order item")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.patch("/<int:order_id>/items/<int:item_id>")
@require_auth
@require_permission("orders:update")
def update_item_route(order_id: int, item_id: int):
    """Body: {"quantity": 3}"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    if "quantity" not in data:
        return jsonify({"error": "quantity is required"}), 400

    try:
        order_service.update_item_quantity(order_id, item_id, data["quantity"])
        order = order_service.get_order(order_id)
        return jsonify(order.to_dict(include_items=True)), 200
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to update order item")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.delete("/<int:order_id>/items/<int:item_id>")
@require_auth
@require_permission("orders:update")
def remove_item_route(order_id: int, item_id: int):
    try:
        order = order_service.remove_item(order_id, item_id)
        return jsonify(order.to_dict(include_items=True)), 200
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to remove order item")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.patch("/<int:order_id>/status")
@require_auth
@require_permission("orders:update")
def update_status_route(order_id: int):
    """Body: {"status": "completed"}"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    status = data.get("status")
    if not status:
        return jsonify({"error": "status is required"}), 400

    try:
        order = order_service.update_status(order_id, status)
        log_activity(g.current_user.id, "update_order_status", f"Order #{order_id} -> {status}", "orders", order_id)
        return jsonify(order.to_dict(include_items=True)), 200
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except OrderError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to update order status")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<int:order_id>/split")
@require_auth
@require_permission("bills:split")
def split_bill_route(order_id: int):
    """
    Split an order's bill between guests.

    Body: {"split_count": 2, "items_per_split": {"0": [item ids], "1": [...]}}
    Without items_per_split every guest pays total / split_count.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    if data.get("split_count") is None:
        return jsonify({"error": "split_count is required"}), 400

    try:
        bills = bill_service.split_bill(
            order_id,
            data["split_count"],
            items_per_split=data.get("items_per_split"),
        )
        log_activity(g.current_user.id, "split_bill", f"Split order #{order_id} into {len(bills)} bills", "orders", order_id)
        return jsonify({
            "order_id": order_id,
            "split_bills": [b.to_dict() for b in bills],
        }), 201
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except SplitBillError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to split bill")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<int:order_id>/split-bills")
@require_auth
@require_permission("bills:read")
def list_split_bills_route(order_id: int):
    try:
        bills = bill_service.list_split_bills(order_id)
        return jsonify({
            "order_id": order_id,
            "split_bills": [b.to_dict() for b in bills],
        }), 200
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
