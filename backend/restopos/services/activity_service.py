# Overview: Service-layer operations for the staff activity log.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import ActivityLog
from restopos.time_utils import range_start


def log_activity(
    user_id: int | None,
    action: str,
    description: str | None = None,
    entity_type: str | None = None,
    target_id: int | None = None,
) -> ActivityLog | None:
    """
    Append an activity row and commit it.

    Called after the action itself has committed. A failure here is logged
    and rolled back, never raised: the caller's response does not depend on
    the audit insert.
    """
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        description=description,
        entity_type=entity_type,
        target_id=target_id,
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning("Failed to record activity %s", action, exc_info=True)
        return None
    return entry


def list_activity(
    user_id: int | None = None,
    action: str | None = None,
    date_range: str | None = None,
    limit: int = 100,
) -> list[ActivityLog]:
    """Newest first; date_range is one of today, week, month, all."""
    query = db.session.query(ActivityLog)
    if user_id is not None:
        query = query.filter(ActivityLog.user_id == user_id)
    if action:
        query = query.filter(ActivityLog.action == action)

    since = range_start(date_range)
    if since is not None:
        query = query.filter(ActivityLog.created_at >= since)

    limit = max(1, min(limit, 500))
    return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()
