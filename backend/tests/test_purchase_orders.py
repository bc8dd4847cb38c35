"""
Purchase order tests.

Verifies:
- total_amount is computed from the lines
- Receiving books one inbound movement per line, exactly once
- Received orders are frozen (status) and cannot be deleted
"""

import pytest

from restopos.models import Product, PurchaseOrder, StockMovement
from restopos.services import purchase_order_service as po_service
from restopos.services.purchase_order_service import PurchaseOrderError, PurchaseOrderNotFoundError
from restopos.services.supplier_service import SupplierNotFoundError
from restopos.validation import ValidationError


@pytest.fixture
def po(db_session, supplier, products):
    tomatoes, oil = products
    return po_service.create_purchase_order(
        supplier_id=supplier.id,
        items=[
            {"product_id": tomatoes.id, "quantity": 20, "unit_cost": 1.25},
            {"product_id": oil.id, "quantity": 3, "unit_cost": 9.99},
        ],
        expected_delivery_date="2026-11-02",
        notes="Weekly order",
    )


class TestCreate:
    def test_total_and_lines(self, db_session, po):
        assert po.status == "pending"
        assert po.total_amount == 54.97
        assert len(po.items) == 2
        assert po.expected_delivery_date.isoformat() == "2026-11-02"

    def test_unknown_supplier(self, db_session, products):
        with pytest.raises(SupplierNotFoundError):
            po_service.create_purchase_order(
                supplier_id=999,
                items=[{"product_id": products[0].id, "quantity": 1, "unit_cost": 1.0}],
            )

    def test_inactive_supplier(self, db_session, supplier, products):
        supplier.is_active = False
        db_session.commit()
        with pytest.raises(PurchaseOrderError):
            po_service.create_purchase_order(
                supplier_id=supplier.id,
                items=[{"product_id": products[0].id, "quantity": 1, "unit_cost": 1.0}],
            )

    def test_missing_products(self, db_session, supplier, products):
        with pytest.raises(PurchaseOrderError) as exc:
            po_service.create_purchase_order(
                supplier_id=supplier.id,
                items=[
                    {"product_id": products[0].id, "quantity": 1, "unit_cost": 1.0},
                    {"product_id": 404, "quantity": 1, "unit_cost": 1.0},
                ],
            )
        assert exc.value.details["missing_product_ids"] == [404]
        assert db_session.query(PurchaseOrder).count() == 0

    @pytest.mark.parametrize("items", [
        [],
        None,
        [{"product_id": 1, "quantity": 0, "unit_cost": 1.0}],
        [{"product_id": 1, "quantity": 1, "unit_cost": -1}],
        [{"quantity": 1, "unit_cost": 1.0}],
    ])
    def test_rejects_bad_lines(self, db_session, supplier, items):
        with pytest.raises(PurchaseOrderError):
            po_service.create_purchase_order(supplier_id=supplier.id, items=items)

    def test_rejects_bad_date(self, db_session, supplier, products):
        with pytest.raises(PurchaseOrderError):
            po_service.create_purchase_order(
                supplier_id=supplier.id,
                items=[{"product_id": products[0].id, "quantity": 1, "unit_cost": 1.0}],
                expected_delivery_date="next tuesday",
            )


class TestReceive:
    def test_receiving_books_stock(self, db_session, po, products):
        tomatoes, oil = products

        updated = po_service.update_purchase_order(po.id, {"status": "received"})

        assert updated.status == "received"
        assert updated.received_at is not None
        assert db_session.get(Product, tomatoes.id).quantity == 30
        assert db_session.get(Product, oil.id).quantity == 7

        movements = db_session.query(StockMovement).filter_by(reference_id=str(po.id)).all()
        assert len(movements) == 2
        assert all(m.movement_type == "inbound" for m in movements)

    def test_received_order_cannot_change_status(self, db_session, po, products):
        po_service.update_purchase_order(po.id, {"status": "received"})

        with pytest.raises(PurchaseOrderError):
            po_service.update_purchase_order(po.id, {"status": "pending"})

        # Stock was booked once
        assert db_session.get(Product, products[0].id).quantity == 30

    def test_setting_received_again_is_a_no_op(self, db_session, po, products):
        po_service.update_purchase_order(po.id, {"status": "received"})
        po_service.update_purchase_order(po.id, {"status": "received", "notes": "checked"})

        assert db_session.get(Product, products[0].id).quantity == 30
        assert db_session.query(StockMovement).count() == 2

    def test_other_statuses_do_not_touch_stock(self, db_session, po, products):
        po_service.update_purchase_order(po.id, {"status": "approved"})
        assert db_session.get(Product, products[0].id).quantity == 10
        assert db_session.query(StockMovement).count() == 0


class TestUpdateAndDelete:
    def test_update_notes_and_date(self, db_session, po):
        updated = po_service.update_purchase_order(
            po.id, {"notes": "Call before delivery", "expected_delivery_date": None}
        )
        assert updated.notes == "Call before delivery"
        assert updated.expected_delivery_date is None
        assert updated.status == "pending"

    def test_rejects_unknown_fields(self, db_session, po):
        with pytest.raises(ValidationError):
            po_service.update_purchase_order(po.id, {"total_amount": 1})

    def test_rejects_unknown_status(self, db_session, po):
        with pytest.raises(PurchaseOrderError):
            po_service.update_purchase_order(po.id, {"status": "lost"})

    def test_update_unknown(self, db_session):
        with pytest.raises(PurchaseOrderNotFoundError):
            po_service.update_purchase_order(999, {"notes": "x"})

    def test_delete_pending(self, db_session, po):
        po_id = po.id
        po_service.delete_purchase_order(po_id)
        assert db_session.get(PurchaseOrder, po_id) is None

    def test_received_cannot_be_deleted(self, db_session, po):
        po_service.update_purchase_order(po.id, {"status": "received"})
        with pytest.raises(PurchaseOrderError):
            po_service.delete_purchase_order(po.id)

    def test_list_filters(self, db_session, po, supplier):
        assert len(po_service.list_purchase_orders(status="pending")) == 1
        assert po_service.list_purchase_orders(status="received") == []
        assert len(po_service.list_purchase_orders(supplier_id=supplier.id)) == 1
