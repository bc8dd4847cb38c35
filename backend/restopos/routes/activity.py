# Overview: Flask API routes for the staff activity log.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..services import activity_service


activity_bp = Blueprint("activity", __name__, url_prefix="/api/activity")


@activity_bp.get("")
@require_auth
@require_permission("activity:read")
def list_activity_route():
    """
    Query params:
    - user_id: int (optional)
    - action: e.g. "create_purchase_order" (optional)
    - range: today | week | month | all (default all)
    - limit: int (default 100, max 500)
    """
    try:
        entries = activity_service.list_activity(
            user_id=request.args.get("user_id", type=int),
            action=request.args.get("action") or None,
            date_range=request.args.get("range") or None,
            limit=request.args.get("limit", 100, type=int),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"activity": [e.to_dict() for e in entries], "count": len(entries)}), 200
