# Overview: Flask API routes for dining tables; listing, creation and moving orders between tables.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..services import table_service
from ..services.activity_service import log_activity
from ..services.table_service import TableError, TableNotFoundError


tables_bp = Blueprint("tables", __name__, url_prefix="/api/tables")


def _int_field(data: dict, name: str) -> int:
    value = data.get(name)
    if value is None:
        raise TableError(f"{name} is required")
    if isinstance(value, bool):
        raise TableError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise TableError(f"{name} must be an integer")


@tables_bp.get("")
@require_auth
@require_permission("tables:read")
def list_tables_route():
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    tables = table_service.list_tables(include_inactive=include_inactive)
    return jsonify({"tables": [t.to_dict() for t in tables], "count": len(tables)}), 200


@tables_bp.post("")
@require_auth
@require_permission("tables:manage")
def create_table_route():
    """Body: {"number": 12, "seats": 4, "name": "Patio 2"}"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    try:
        table = table_service.create_table(
            number=data.get("number"),
            seats=data.get("seats", 4),
            name=data.get("name"),
        )
        log_activity(g.current_user.id, "create_table", f"Created table {table.number}", "tables", table.id)
        return jsonify(table.to_dict()), 201
    except TableError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create table")
        return jsonify({"error": "Internal server error"}), 500


@tables_bp.post("/transfer")
@require_auth
@require_permission("tables:transfer")
def transfer_orders_route():
    """
    Move orders between tables.

    Body: {"source_table": 1, "target_table": 2, "order_ids": [5, 6]}
    Without order_ids (or with an empty list) every order at the source
    table moves.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    try:
        source = _int_field(data, "source_table")
        target = _int_field(data, "target_table")
        result = table_service.transfer_orders(source, target, data.get("order_ids"))
        log_activity(
            g.current_user.id, "transfer_orders",
            f"Moved {result['orders_transferred']} orders from table {source} to {target}", "tables", target,
        )
        return jsonify(result), 200
    except TableNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except TableError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to transfer orders")
        return jsonify({"error": "Internal server error"}), 500


@tables_bp.post("/split")
@require_auth
@require_permission("tables:transfer")
def split_table_route():
    """Body: {"original_table": 1, "new_table": 4, "order_ids": [7]}"""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    try:
        original = _int_field(data, "original_table")
        new = _int_field(data, "new_table")
        result = table_service.split_table(original, new, data.get("order_ids"))
        log_activity(
            g.current_user.id, "split_table",
            f"Split {result['orders_moved']} orders from table {original} to {new}", "tables", new,
        )
        return jsonify(result), 200
    except TableNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except TableError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to split table")
        return jsonify({"error": "Internal server error"}), 500
