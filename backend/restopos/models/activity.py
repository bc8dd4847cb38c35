from __future__ import annotations

from ..extensions import db
from restopos.time_utils import to_utc_z


class ActivityLog(db.Model):
    """
    Staff activity audit trail (who created/updated/deleted what).

    Append-only. Rows are written after the action they describe has
    committed, so a failed insert here never undoes the action itself.
    """
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_user_created", "user_id", "created_at"),
        db.Index("ix_activity_logs_entity", "entity_type", "target_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    action = db.Column(db.String(64), nullable=False, index=True)  # e.g. "create_purchase_order"
    description = db.Column(db.Text, nullable=True)
    entity_type = db.Column(db.String(64), nullable=True)  # e.g. "purchase_orders"
    target_id = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    user = db.relationship("User", backref=db.backref("activity_logs", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action,
            "description": self.description,
            "entity_type": self.entity_type,
            "target_id": self.target_id,
            "created_at": to_utc_z(self.created_at),
        }
