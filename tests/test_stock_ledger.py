"""Unit tests for the stock ledger primitives."""

from datetime import date
from decimal import Decimal

import pytest

from crud import stock
from exceptions import ItemNotFound, NegativeQuantity, PurchaseNotFound, StockNotFound, ValidationError
from schemas.inventory import StockLotCreate


class TestListAvailableLots:

    def test_ordered_by_purchase_date(self, db, make_item, make_purchase):
        item = make_item()
        late = make_purchase(item, 5, date(2024, 3, 1))
        early = make_purchase(item, 5, date(2024, 1, 1))
        middle = make_purchase(item, 5, date(2024, 2, 1))

        lots = stock.list_available_lots(db, item.id)

        assert [lot.id for lot in lots] == [early.stock_id, middle.stock_id, late.stock_id]

    def test_same_date_ties_broken_by_stock_id(self, db, make_item, make_purchase):
        item = make_item()
        first = make_purchase(item, 5, date(2024, 1, 1))
        second = make_purchase(item, 5, date(2024, 1, 1))

        lots = stock.list_available_lots(db, item.id)

        assert [lot.id for lot in lots] == [first.stock_id, second.stock_id]

    def test_empty_lots_excluded(self, db, make_item, make_purchase):
        item = make_item()
        drained = make_purchase(item, 3, date(2024, 1, 1))
        kept = make_purchase(item, 4, date(2024, 1, 2))
        stock.decrement(db, drained.stock_id, 3)
        db.commit()

        lots = stock.list_available_lots(db, item.id)

        assert [lot.id for lot in lots] == [kept.stock_id]

    def test_other_items_not_listed(self, db, make_item, make_purchase):
        item = make_item()
        other = make_item()
        make_purchase(other, 5)

        assert stock.list_available_lots(db, item.id) == []


class TestTotalAvailable:

    def test_sums_all_lots(self, db, make_item, make_purchase):
        item = make_item()
        make_purchase(item, 5)
        make_purchase(item, 7)

        assert stock.total_available(db, item.id) == 12

    def test_item_without_lots_is_zero(self, db, make_item):
        item = make_item()
        assert stock.total_available(db, item.id) == 0

    def test_empty_lots_contribute_zero(self, db, make_item, make_purchase):
        item = make_item()
        drained = make_purchase(item, 2)
        make_purchase(item, 3)
        stock.decrement(db, drained.stock_id, 2)
        db.commit()

        assert stock.total_available(db, item.id) == 3


class TestDecrement:

    def test_returns_remaining(self, db, make_item, make_purchase):
        lot_id = make_purchase(make_item(), 10).stock_id
        assert stock.decrement(db, lot_id, 4) == 6
        assert stock.get_stock_lot(db, lot_id).available_qty == 6

    def test_down_to_zero_allowed(self, db, make_item, make_purchase):
        lot_id = make_purchase(make_item(), 10).stock_id
        assert stock.decrement(db, lot_id, 10) == 0

    def test_below_zero_rejected(self, db, make_item, make_purchase):
        lot_id = make_purchase(make_item(), 3).stock_id

        with pytest.raises(NegativeQuantity) as exc_info:
            stock.decrement(db, lot_id, 4)

        assert exc_info.value.shortfall == 1
        assert exc_info.value.context["stock_id"] == lot_id
        assert stock.get_stock_lot(db, lot_id).available_qty == 3

    def test_unknown_lot(self, db):
        with pytest.raises(StockNotFound):
            stock.decrement(db, 999, 1)

    @pytest.mark.parametrize("amount", [0, -2])
    def test_non_positive_amount_rejected(self, db, make_item, make_purchase, amount):
        lot_id = make_purchase(make_item(), 3).stock_id
        with pytest.raises(ValidationError):
            stock.decrement(db, lot_id, amount)


class TestIncrement:

    def test_adds_to_lot(self, db, make_item, make_purchase):
        lot_id = make_purchase(make_item(), 3).stock_id
        assert stock.increment(db, lot_id, 2) == 5

    def test_unknown_lot(self, db):
        with pytest.raises(StockNotFound):
            stock.increment(db, 999, 1)


class TestStockStatus:

    def test_lists_lots_fifo_with_total(self, db, make_item, make_purchase):
        item = make_item()
        newer = make_purchase(item, 4, date(2024, 2, 1), buying_price="6.00", selling_price="9.50")
        older = make_purchase(item, 2, date(2024, 1, 1))

        status = stock.get_stock_status(db, item.id)

        assert status["total_available"] == 6
        assert [lot["stock_id"] for lot in status["lots"]] == [older.stock_id, newer.stock_id]
        assert status["lots"][1]["buying_price"] == Decimal("6.00")
        assert status["lots"][1]["selling_price"] == Decimal("9.50")
        assert status["lots"][1]["purchase_date"] == date(2024, 2, 1)

    def test_unknown_item(self, db):
        with pytest.raises(ItemNotFound):
            stock.get_stock_status(db, 42)


class TestAddStock:

    def test_manual_lot_without_purchase(self, db, make_item):
        item = make_item()

        lot = stock.add_stock(db, StockLotCreate(item_id=item.id, available_qty=8, selling_price=Decimal("3.00")))

        assert lot.purchase_id is None
        assert lot.purchase_date == date.today()
        assert stock.total_available(db, item.id) == 8

    def test_inherits_from_linked_purchase(self, db, make_item, make_purchase):
        item = make_item()
        p = make_purchase(item, 5, date(2024, 1, 15), buying_price="4.25")
        # detach the lot the purchase created so it can be re-linked by hand
        db.delete(p.stock_lot)
        db.commit()

        lot = stock.add_stock(db, StockLotCreate(
            item_id=item.id, available_qty=5, selling_price=Decimal("7.00"), purchase_id=p.id
        ))

        assert lot.purchase_date == date(2024, 1, 15)
        assert lot.buying_price == Decimal("4.25")

    def test_purchase_for_other_item_rejected(self, db, make_item, make_purchase):
        item = make_item()
        p = make_purchase(make_item(), 5)

        with pytest.raises(ValidationError, match="does not match"):
            stock.add_stock(db, StockLotCreate(
                item_id=item.id, available_qty=5, selling_price=Decimal("7.00"), purchase_id=p.id
            ))

    def test_unknown_purchase(self, db, make_item):
        item = make_item()
        with pytest.raises(PurchaseNotFound):
            stock.add_stock(db, StockLotCreate(
                item_id=item.id, available_qty=5, selling_price=Decimal("7.00"), purchase_id=77
            ))


class TestLowStock:

    def test_items_at_or_below_restock_level(self, db, make_item, make_purchase):
        low = make_item(restock_level=5)
        make_purchase(low, 3)
        empty = make_item(restock_level=0)
        healthy = make_item(restock_level=2)
        make_purchase(healthy, 10)

        result = {row["item_id"]: row["total_available"] for row in stock.get_low_stock_items(db)}

        assert result == {low.id: 3, empty.id: 0}
