"""
Bill splitting tests.

Verifies:
- Even splits divide the order total without rounding
- Item splits charge each guest the prices of their assigned lines
- Re-splitting appends rows; settling stamps and clears paid_at
"""

import pytest

from restopos.models import SplitBill
from restopos.services import bill_service, order_service
from restopos.services.bill_service import SplitBillError, SplitBillNotFoundError
from restopos.services.order_service import OrderNotFoundError


@pytest.fixture
def order(db_session, tables):
    # subtotal 55.00, tax 8.25, total 63.25
    return order_service.create_order(
        table_id=tables[0].id,
        items=[
            {"name": "Hummus", "price": 25.0, "quantity": 1},
            {"name": "Shawarma", "price": 15.0, "quantity": 2},
        ],
    )


class TestEvenSplit:
    def test_two_guests(self, db_session, order):
        bills = bill_service.split_bill(order.id, 2)

        assert len(bills) == 2
        assert [b.guest_number for b in bills] == [1, 2]
        assert all(b.total_guests == 2 for b in bills)
        assert all(b.amount == 31.625 for b in bills)
        assert all(b.status == "pending" for b in bills)
        assert all(b.items == [] for b in bills)

    def test_shares_add_up_to_total(self, db_session, order):
        bills = bill_service.split_bill(order.id, 3)
        assert sum(b.amount for b in bills) == pytest.approx(order.total)

    def test_single_guest_pays_everything(self, db_session, order):
        bills = bill_service.split_bill(order.id, 1)
        assert bills[0].amount == 63.25

    @pytest.mark.parametrize("count", [0, -2, "two", 1.5, True])
    def test_rejects_bad_count(self, db_session, order, count):
        with pytest.raises(SplitBillError):
            bill_service.split_bill(order.id, count)

    def test_count_is_capped(self, app, db_session, order):
        cap = app.config["MAX_SPLIT_COUNT"]
        assert len(bill_service.split_bill(order.id, cap)) == cap

        with pytest.raises(SplitBillError) as exc:
            bill_service.split_bill(order.id, cap + 1)
        assert exc.value.details["max_split_count"] == cap

    def test_unknown_order(self, db_session):
        with pytest.raises(OrderNotFoundError):
            bill_service.split_bill(999, 2)


class TestItemSplit:
    def test_guest_pays_assigned_prices(self, db_session, order):
        hummus, shawarma = order.items

        bills = bill_service.split_bill(
            order.id, 2, items_per_split={"0": [hummus.id], "1": [shawarma.id]}
        )

        # Line prices are not weighted by quantity and tax is not added
        assert bills[0].amount == 25.0
        assert bills[1].amount == 15.0
        assert [i["name"] for i in bills[0].items] == ["Hummus"]
        assert [i["name"] for i in bills[1].items] == ["Shawarma"]

    def test_guest_without_items_owes_nothing(self, db_session, order):
        hummus = order.items[0]
        bills = bill_service.split_bill(order.id, 3, items_per_split={"1": [hummus.id]})

        assert [b.amount for b in bills] == [0, 25.0, 0]

    def test_guest_index_out_of_range(self, db_session, order):
        with pytest.raises(SplitBillError):
            bill_service.split_bill(order.id, 2, items_per_split={"2": [order.items[0].id]})

    def test_items_must_be_lists(self, db_session, order):
        with pytest.raises(SplitBillError):
            bill_service.split_bill(order.id, 2, items_per_split={"0": order.items[0].id})

    def test_item_from_another_order(self, db_session, order, tables):
        other = order_service.create_order(
            table_id=tables[1].id,
            items=[{"name": "Tea", "price": 5.0, "quantity": 1}],
        )
        foreign_id = other.items[0].id

        with pytest.raises(SplitBillError) as exc:
            bill_service.split_bill(
                order.id, 2, items_per_split={"0": [order.items[0].id], "1": [foreign_id]}
            )

        assert exc.value.details["unknown_item_ids"] == [foreign_id]
        assert db_session.query(SplitBill).count() == 0


class TestResplitAndSettle:
    def test_resplit_appends(self, db_session, order):
        bill_service.split_bill(order.id, 2)
        bill_service.split_bill(order.id, 3)

        bills = bill_service.list_split_bills(order.id)
        assert len(bills) == 5
        assert db_session.query(SplitBill).filter_by(total_guests=3).count() == 3

    def test_settle_and_reopen(self, db_session, order):
        bill = bill_service.split_bill(order.id, 2)[0]

        paid = bill_service.settle_split_bill(bill.id, "paid")
        assert paid.status == "paid"
        assert paid.paid_at is not None

        pending = bill_service.settle_split_bill(bill.id, "pending")
        assert pending.status == "pending"
        assert pending.paid_at is None

    def test_settle_rejects_unknown_status(self, db_session, order):
        bill = bill_service.split_bill(order.id, 2)[0]
        with pytest.raises(SplitBillError):
            bill_service.settle_split_bill(bill.id, "refunded")

    def test_settle_unknown_bill(self, db_session):
        with pytest.raises(SplitBillNotFoundError):
            bill_service.settle_split_bill(999, "paid")

    def test_list_unknown_order(self, db_session):
        with pytest.raises(OrderNotFoundError):
            bill_service.list_split_bills(999)
