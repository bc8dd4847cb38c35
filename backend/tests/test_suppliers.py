"""
Supplier and product catalogue tests (services plus payload validation).
"""

from datetime import timedelta

import pytest

from restopos.models import Product, PurchaseOrder, Supplier
from restopos.services import product_service, supplier_service
from restopos.services import purchase_order_service as po_service
from restopos.services.product_service import PRODUCT_CREATE_POLICY, PRODUCT_UPDATE_POLICY
from restopos.services.supplier_service import (
    SUPPLIER_POLICY,
    SupplierNotFoundError,
    SupplierValidationError,
)
from restopos.validation import (
    ConflictError,
    ValidationError,
    enforce_rules_product,
    enforce_rules_supplier,
    validate_payload,
)


class TestSupplierService:
    def test_create_trims_name(self, db_session):
        supplier = supplier_service.create_supplier(patch={"name": "  Gulf Dairy ", "city": "Riyadh"})
        assert supplier.name == "Gulf Dairy"
        assert supplier.is_active is True

    def test_create_requires_name(self, db_session):
        with pytest.raises(SupplierValidationError):
            supplier_service.create_supplier(patch={"name": "   "})

    def test_update(self, db_session, supplier):
        updated = supplier_service.update_supplier(
            supplier_id=supplier.id, patch={"payment_terms": "Net 30", "lead_time_days": 3}
        )
        assert updated.payment_terms == "Net 30"
        assert updated.lead_time_days == 3

    def test_update_rejects_empty_name(self, db_session, supplier):
        with pytest.raises(SupplierValidationError):
            supplier_service.update_supplier(supplier_id=supplier.id, patch={"name": ""})

    def test_delete_is_soft(self, db_session, supplier):
        supplier_service.delete_supplier(supplier_id=supplier.id)

        assert db_session.get(Supplier, supplier.id).is_active is False
        assert supplier_service.list_suppliers() == []
        assert len(supplier_service.list_suppliers(include_inactive=True)) == 1

    def test_search(self, db_session, supplier):
        supplier_service.create_supplier(patch={"name": "Baker Street Bakery"})
        assert [s.name for s in supplier_service.list_suppliers(search="fresh")] == ["Fresh Farms"]

    def test_unknown(self, db_session):
        with pytest.raises(SupplierNotFoundError):
            supplier_service.get_supplier(999)


class TestSupplierMetrics:
    def test_monthly_rollup(self, db_session, supplier, products):
        line = [{"product_id": products[0].id, "quantity": 10, "unit_cost": 2.0}]
        received = po_service.create_purchase_order(supplier_id=supplier.id, items=line)
        po_service.create_purchase_order(supplier_id=supplier.id, items=line)
        cancelled = po_service.create_purchase_order(supplier_id=supplier.id, items=line)

        # Backdate so the delivery time is measurable
        po = db_session.get(PurchaseOrder, received.id)
        po.created_at = po.created_at - timedelta(days=2)
        db_session.commit()
        po_service.update_purchase_order(received.id, {"status": "received"})
        po_service.update_purchase_order(cancelled.id, {"status": "cancelled"})

        metrics = supplier_service.get_supplier_metrics(supplier.id)

        total_orders = sum(row["order_count"] for row in metrics)
        assert total_orders == 3
        assert sum(row["received_count"] for row in metrics) == 1
        assert sum(row["cancelled_count"] for row in metrics) == 1
        assert sum(row["total_amount"] for row in metrics) == 40.0

        received_row = next(row for row in metrics if row["received_count"])
        assert received_row["avg_delivery_days"] == pytest.approx(2.0, abs=0.1)

    def test_received_order_is_counted(self, db_session, supplier, products):
        line = [{"product_id": products[0].id, "quantity": 1, "unit_cost": 3.0}]
        po = po_service.create_purchase_order(supplier_id=supplier.id, items=line)
        po_service.update_purchase_order(po.id, {"status": "received"})

        [row] = supplier_service.get_supplier_metrics(supplier.id)
        assert row["order_count"] == 1
        assert row["received_count"] == 1
        assert row["avg_delivery_days"] is not None

    def test_no_orders(self, db_session, supplier):
        assert supplier_service.get_supplier_metrics(supplier.id) == []

    def test_unknown_supplier(self, db_session):
        with pytest.raises(SupplierNotFoundError):
            supplier_service.get_supplier_metrics(999)


class TestProductService:
    def test_create(self, db_session, supplier):
        product = product_service.create_product(patch={
            "sku": "RICE-5KG", "name": "Basmati Rice", "quantity": 8,
            "unit_price": 31.5, "supplier_id": supplier.id,
        })
        assert product.quantity == 8
        assert product.is_active is True

    def test_duplicate_sku(self, db_session, products):
        with pytest.raises(ConflictError):
            product_service.create_product(patch={"sku": "TOM-001", "name": "More tomatoes"})

    def test_unknown_supplier(self, db_session):
        with pytest.raises(ValidationError):
            product_service.create_product(patch={"sku": "X-1", "name": "X", "supplier_id": 999})

    def test_update_sku_conflict(self, db_session, products):
        with pytest.raises(ConflictError):
            product_service.update_product(product_id=products[1].id, patch={"sku": "TOM-001"})

    def test_update_ignores_quantity(self, db_session, products):
        product_service.update_product(product_id=products[0].id, patch={"quantity": 99, "name": "Roma Tomatoes"})
        product = db_session.get(Product, products[0].id)
        assert product.name == "Roma Tomatoes"
        # quantity only changes through stock movements
        assert product.quantity == 10

    def test_delete_is_soft(self, db_session, products):
        product_service.delete_product(product_id=products[0].id)
        assert db_session.get(Product, products[0].id).is_active is False
        assert [p.sku for p in product_service.list_products()] == ["OIL-001"]

    def test_list_filters(self, db_session, products):
        assert [p.sku for p in product_service.list_products(category="Produce")] == ["TOM-001"]
        assert [p.sku for p in product_service.list_products(search="oil")] == ["OIL-001"]


class TestPayloadValidation:
    def test_product_create_requires_sku_and_name(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload={"name": "X"}, policy=PRODUCT_CREATE_POLICY, partial=False)

    def test_product_update_rejects_quantity(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload={"quantity": 5}, policy=PRODUCT_UPDATE_POLICY, partial=True)

    def test_coerces_numbers(self):
        patch = validate_payload(
            model=Product,
            payload={"sku": "A", "name": "B", "quantity": "4", "unit_price": "2.50"},
            policy=PRODUCT_CREATE_POLICY,
            partial=False,
        )
        assert patch["quantity"] == 4
        assert patch["unit_price"] == 2.5

    def test_rejects_decimal_quantity(self):
        with pytest.raises(ValidationError):
            validate_payload(
                model=Product, payload={"sku": "A", "name": "B", "quantity": 1.5},
                policy=PRODUCT_CREATE_POLICY, partial=False,
            )

    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Supplier, payload={"rating": 5}, policy=SUPPLIER_POLICY, partial=True)

    def test_rejects_overlong_string(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Supplier, payload={"name": "x" * 300}, policy=SUPPLIER_POLICY, partial=True)

    @pytest.mark.parametrize("patch", [{"unit_price": -1.0}, {"unit_price": 10_000_000.0}, {"quantity": -2}])
    def test_product_rules(self, patch):
        with pytest.raises(ValidationError):
            enforce_rules_product(patch)

    @pytest.mark.parametrize("patch", [{"email": "not-an-email"}, {"lead_time_days": -1}])
    def test_supplier_rules(self, patch):
        with pytest.raises(ValidationError):
            enforce_rules_supplier(patch)
