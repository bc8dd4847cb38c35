# Overview: Flask API routes for inventory; products and stock movements.

"""
Inventory routes

- /api/inventory: product CRUD (delete is a soft delete)
- /api/inventory/stock-movements: movement history and new movements;
  recording a movement is the only way to change a product's quantity
  after creation
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..models import Product
from ..services import product_service, stock_service
from ..services.activity_service import log_activity
from ..services.product_service import (
    PRODUCT_CREATE_POLICY,
    PRODUCT_UPDATE_POLICY,
    ProductNotFoundError,
)
from ..services.stock_service import StockMovementError
from ..validation import ConflictError, ValidationError, enforce_rules_product, validate_payload


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@require_auth
@require_permission("inventory:read")
def list_products_route():
    """
    Query params:
    - include_inactive: "true" to include soft-deleted products
    - category, supplier_id, search (name or SKU substring)
    """
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    products = product_service.list_products(
        include_inactive=include_inactive,
        category=request.args.get("category") or None,
        supplier_id=request.args.get("supplier_id", type=int),
        search=request.args.get("search"),
    )
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)}), 200


@inventory_bp.post("")
@require_auth
@require_permission("inventory:create")
def create_product_route():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_CREATE_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        product = product_service.create_product(patch=patch)
        log_activity(g.current_user.id, "create_product", f"Created product sku={product.sku}", "products", product.id)
        return jsonify(product.to_dict()), 201
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/<int:product_id>")
@require_auth
@require_permission("inventory:read")
def get_product_route(product_id: int):
    try:
        return jsonify(product_service.get_product(product_id).to_dict()), 200
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404


@inventory_bp.patch("/<int:product_id>")
@require_auth
@require_permission("inventory:update")
def update_product_route(product_id: int):
    """quantity is not writable here; record a stock movement instead."""
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        product = product_service.update_product(product_id=product_id, patch=patch)
        log_activity(
            g.current_user.id, "update_product",
            f"Updated fields: {', '.join(sorted(patch.keys()))}", "products", product_id,
        )
        return jsonify(product.to_dict()), 200
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.delete("/<int:product_id>")
@require_auth
@require_permission("inventory:delete")
def delete_product_route(product_id: int):
    try:
        product_service.delete_product(product_id=product_id)
        log_activity(g.current_user.id, "delete_product", f"Deactivated product #{product_id}", "products", product_id)
        return jsonify({"ok": True}), 200
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/stock-movements")
@require_auth
@require_permission("inventory:read")
def list_movements_route():
    """
    Query params:
    - type: inbound | outbound | adjustment | all (default all)
    - range: today | week | month | all (default all)
    - product_id: int (optional)
    """
    try:
        movements = stock_service.list_movements(
            movement_type=request.args.get("type") or None,
            date_range=request.args.get("range") or None,
            product_id=request.args.get("product_id", type=int),
        )
        return jsonify({"movements": [m.to_dict() for m in movements], "count": len(movements)}), 200
    except StockMovementError as e:
        return jsonify({"error": str(e)}), 400


@inventory_bp.post("/stock-movements")
@require_auth
@require_permission("inventory:adjust")
def record_movement_route():
    """
    Body: {"product_id": 1, "quantity_change": 5, "movement_type": "inbound",
           "reference_id": "INV-42", "notes": "..."}
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    for field in ("product_id", "quantity_change", "movement_type"):
        if data.get(field) is None:
            return jsonify({"error": f"{field} is required"}), 400
    try:
        product_id = int(data["product_id"])
    except (TypeError, ValueError):
        return jsonify({"error": "product_id must be an integer"}), 400

    try:
        movement = stock_service.record_movement(
            product_id=product_id,
            quantity_change=data["quantity_change"],
            movement_type=data["movement_type"],
            reference_id=data.get("reference_id"),
            notes=data.get("notes"),
            user_id=g.current_user.id,
        )
        log_activity(
            g.current_user.id, "record_stock_movement",
            f"{movement.movement_type} {movement.quantity_change:+d} for product #{product_id}",
            "stock_movements", movement.id,
        )
        return jsonify({
            "movement": movement.to_dict(),
            "product": product_service.get_product(product_id).to_dict(),
        }), 201
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except StockMovementError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to record stock movement")
        return jsonify({"error": "Internal server error"}), 500
