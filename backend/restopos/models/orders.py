from __future__ import annotations

from ..extensions import db
from restopos.time_utils import to_utc_z


ORDER_STATUSES = ("open", "completed", "cancelled")
SPLIT_BILL_STATUSES = ("pending", "paid")


class DiningTable(db.Model):
    """A table on the floor. Orders point at a table and can be moved between tables."""
    __tablename__ = "dining_tables"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    number = db.Column(db.Integer, nullable=False, unique=True)
    name = db.Column(db.String(64), nullable=True)  # e.g. "Takeaway", "Terrace 2"
    seats = db.Column(db.Integer, nullable=False, default=4)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<DiningTable id={self.id} number={self.number}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "name": self.name,
            "seats": self.seats,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Order(db.Model):
    """
    A table's tab: line items plus computed totals.

    Totals are derived from the items by order_service.recompute_totals and
    stored so listings do not need to join items:
        subtotal   = sum(item.price * item.quantity)
        tax_amount = round(subtotal * tax_rate, 2)
        total      = subtotal + tax_amount

    Orders are never deleted; status moves between open, completed and
    cancelled.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_table_status", "table_id", "status"),
        db.Index("ix_orders_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    table_id = db.Column(db.Integer, db.ForeignKey("dining_tables.id"), nullable=False, index=True)

    subtotal = db.Column(db.Float, nullable=False, default=0.0)
    tax_rate = db.Column(db.Float, nullable=False, default=0.15)
    tax_amount = db.Column(db.Float, nullable=False, default=0.0)
    total = db.Column(db.Float, nullable=False, default=0.0)

    status = db.Column(db.String(16), nullable=False, default="open", index=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    table = db.relationship("DiningTable", backref=db.backref("orders", lazy=True))
    items = db.relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id} table_id={self.table_id} status={self.status!r}>"

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "table_id": self.table_id,
            "subtotal": self.subtotal,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "total": self.total,
            "status": self.status,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "completed_at": to_utc_z(self.completed_at) if self.completed_at else None,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderItem(db.Model):
    """One line on an order. price is the unit price at the time of ordering."""
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    # Opaque menu reference; the menu itself is managed elsewhere
    menu_item_id = db.Column(db.String(64), nullable=True)
    name = db.Column(db.String(255), nullable=False)
    name_ar = db.Column(db.String(255), nullable=True)

    price = db.Column(db.Float, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    subtotal = db.Column(db.Float, nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    order = db.relationship("Order", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "name_ar": self.name_ar,
            "price": self.price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }


class SplitBill(db.Model):
    """
    One guest's share of an order.

    A split of an order into N guests writes N rows sharing total_guests=N.
    items holds a snapshot of the assigned order lines (empty for an even
    split). Each row is settled on its own.
    """
    __tablename__ = "split_bills"
    __table_args__ = (
        db.Index("ix_split_bills_order_guest", "order_id", "guest_number"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    guest_number = db.Column(db.Integer, nullable=False)  # 1-based
    total_guests = db.Column(db.Integer, nullable=False)
    amount = db.Column(db.Float, nullable=False)
    items = db.Column(db.JSON, nullable=False, default=list)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    order = db.relationship("Order", backref=db.backref("split_bills", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "guest_number": self.guest_number,
            "total_guests": self.total_guests,
            "amount": self.amount,
            "items": self.items or [],
            "status": self.status,
            "paid_at": to_utc_z(self.paid_at) if self.paid_at else None,
            "created_at": to_utc_z(self.created_at),
        }
