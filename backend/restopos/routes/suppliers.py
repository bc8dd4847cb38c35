# Overview: Flask API routes for suppliers; CRUD and purchasing metrics.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..models import Supplier
from ..services import supplier_service
from ..services.activity_service import log_activity
from ..services.supplier_service import (
    SUPPLIER_POLICY,
    SupplierNotFoundError,
    SupplierValidationError,
)
from ..validation import ValidationError, enforce_rules_supplier, validate_payload


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
@require_auth
@require_permission("suppliers:read")
def list_suppliers_route():
    """
    Query params:
    - include_inactive: "true" to include soft-deleted suppliers
    - search: substring of name or contact person
    """
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    suppliers = supplier_service.list_suppliers(
        include_inactive=include_inactive,
        search=request.args.get("search"),
    )
    return jsonify({"suppliers": [s.to_dict() for s in suppliers], "count": len(suppliers)}), 200


@suppliers_bp.post("")
@require_auth
@require_permission("suppliers:create")
def create_supplier_route():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        patch = validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=False)
        enforce_rules_supplier(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        supplier = supplier_service.create_supplier(patch=patch)
        log_activity(g.current_user.id, "create_supplier", f"Created supplier {supplier.name}", "suppliers", supplier.id)
        return jsonify(supplier.to_dict()), 201
    except SupplierValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create supplier")
        return jsonify({"error": "Internal server error"}), 500


@suppliers_bp.get("/<int:supplier_id>")
@require_auth
@require_permission("suppliers:read")
def get_supplier_route(supplier_id: int):
    try:
        return jsonify(supplier_service.get_supplier(supplier_id).to_dict()), 200
    except SupplierNotFoundError as e:
        return jsonify({"error": str(e)}), 404


@suppliers_bp.put("/<int:supplier_id>")
@require_auth
@require_permission("suppliers:update")
def update_supplier_route(supplier_id: int):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        patch = validate_payload(model=Supplier, payload=payload, policy=SUPPLIER_POLICY, partial=True)
        enforce_rules_supplier(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        supplier = supplier_service.update_supplier(supplier_id=supplier_id, patch=patch)
        log_activity(
            g.current_user.id, "update_supplier",
            f"Updated fields: {', '.join(sorted(patch.keys()))}", "suppliers", supplier_id,
        )
        return jsonify(supplier.to_dict()), 200
    except SupplierNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except SupplierValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update supplier")
        return jsonify({"error": "Internal server error"}), 500


@suppliers_bp.delete("/<int:supplier_id>")
@require_auth
@require_permission("suppliers:delete")
def delete_supplier_route(supplier_id: int):
    """Soft delete (is_active=false)."""
    try:
        supplier_service.delete_supplier(supplier_id=supplier_id)
        log_activity(g.current_user.id, "delete_supplier", f"Deactivated supplier #{supplier_id}", "suppliers", supplier_id)
        return jsonify({"ok": True}), 200
    except SupplierNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete supplier")
        return jsonify({"error": "Internal server error"}), 500


@suppliers_bp.get("/<int:supplier_id>/metrics")
@require_auth
@require_permission("suppliers:read")
def supplier_metrics_route(supplier_id: int):
    try:
        metrics = supplier_service.get_supplier_metrics(supplier_id)
        return jsonify({"supplier_id": supplier_id, "metrics": metrics}), 200
    except SupplierNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to compute supplier metrics")
        return jsonify({"error": "Internal server error"}), 500
