# Overview: Flask API routes for settling split bills.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..services import bill_service
from ..services.activity_service import log_activity
from ..services.bill_service import SplitBillError, SplitBillNotFoundError


bills_bp = Blueprint("bills", __name__, url_prefix="/api/split-bills")


@bills_bp.patch("/<int:bill_id>")
@require_auth
@require_permission("bills:settle")
def settle_split_bill_route(bill_id: int):
    """Body: {"status": "paid"} or {"status": "pending"}"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    status = data.get("status")
    if not status:
        return jsonify({"error": "status is required"}), 400

    try:
        bill = bill_service.settle_split_bill(bill_id, status)
        log_activity(
            g.current_user.id, "settle_split_bill",
            f"Split bill #{bill_id} of order #{bill.order_id} -> {status}", "split_bills", bill_id,
        )
        return jsonify(bill.to_dict()), 200
    except SplitBillNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except SplitBillError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to settle split bill")
        return jsonify({"error": "Internal server error"}), 500
