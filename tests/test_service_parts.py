"""Service records drawing parts from stock lots."""

from datetime import date

import pytest

from crud import release, service, stock
from exceptions import (
    InsufficientStock,
    ItemNotFound,
    NegativeQuantity,
    ServicePartNotFound,
    ServiceRecordNotFound,
    StockNotFound,
)
from models.inventory import InventoryRelease, Purchase
from models.invoice import Invoice
from models.service import ServicePartUsage, ServiceRecord
from schemas.service import ServicePartFIFORequest, ServicePartRequest


def part(stock_id, quantity):
    return ServicePartRequest(stock_id=stock_id, quantity_used=quantity)


def usages(db, service_id):
    return {u.stock_id: u.quantity_used for u in service.get_service_parts(db, service_id)}


class TestCreateServiceRecord:

    def test_parts_decrement_their_lots(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        b = make_purchase(make_item(), 5)

        record = make_service(parts=[part(a.stock_id, 2), part(b.stock_id, 5)])

        assert usages(db, record.id) == {a.stock_id: 2, b.stock_id: 5}
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 3
        assert stock.get_stock_lot(db, b.stock_id).available_qty == 0
        assert record.parts_count == 2

    def test_one_short_part_aborts_the_whole_record(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        b = make_purchase(make_item(), 1)

        with pytest.raises(NegativeQuantity) as exc_info:
            make_service(parts=[part(a.stock_id, 2), part(b.stock_id, 3)])

        assert exc_info.value.shortfall == 2
        assert db.query(ServiceRecord).count() == 0
        assert db.query(ServicePartUsage).count() == 0
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 5
        assert stock.get_stock_lot(db, b.stock_id).available_qty == 1

    def test_unknown_lot(self, db, make_service):
        with pytest.raises(StockNotFound):
            make_service(parts=[part(123, 1)])

        assert db.query(ServiceRecord).count() == 0

    def test_same_lot_twice_in_one_list_merges(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)

        record = make_service(parts=[part(a.stock_id, 1), part(a.stock_id, 2)])

        assert usages(db, record.id) == {a.stock_id: 3}


class TestAttachParts:

    def test_repeat_attach_merges_into_one_row(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 4)
        record = make_service()
        service.attach_service_parts(db, record.id, [part(a.stock_id, 2)])

        with pytest.raises(InsufficientStock) as exc_info:
            service.attach_service_parts(db, record.id, [part(a.stock_id, 3)])

        assert exc_info.value.shortfall == 1
        assert usages(db, record.id) == {a.stock_id: 2}
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 2

        service.attach_service_parts(db, record.id, [part(a.stock_id, 2)])

        assert usages(db, record.id) == {a.stock_id: 4}
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 0

    def test_unknown_service(self, db, make_item, make_purchase):
        a = make_purchase(make_item(), 4)

        with pytest.raises(ServiceRecordNotFound):
            service.attach_service_parts(db, 9, [part(a.stock_id, 1)])

        assert stock.get_stock_lot(db, a.stock_id).available_qty == 4

    def test_fifo_attach_spans_lots(self, db, make_item, make_purchase, make_service):
        item = make_item()
        old = make_purchase(item, 2, date(2024, 1, 1))
        new = make_purchase(item, 5, date(2024, 2, 1))
        record = make_service()

        service.attach_service_parts_fifo(db, record.id, [ServicePartFIFORequest(item_id=item.id, quantity=4)])

        assert usages(db, record.id) == {old.stock_id: 2, new.stock_id: 2}
        assert stock.total_available(db, item.id) == 3
        # service consumption is tracked through usage rows only
        assert db.query(InventoryRelease).count() == 0

    def test_fifo_attach_unknown_item(self, db, make_service):
        record = make_service()
        with pytest.raises(ItemNotFound):
            service.attach_service_parts_fifo(db, record.id, [ServicePartFIFORequest(item_id=5, quantity=1)])

    def test_fifo_attach_short_item_rolls_back_earlier_items(self, db, make_item, make_purchase, make_service):
        plenty = make_item()
        scarce = make_item()
        make_purchase(plenty, 10)
        make_purchase(scarce, 1)
        record = make_service()

        with pytest.raises(InsufficientStock):
            service.attach_service_parts_fifo(db, record.id, [
                ServicePartFIFORequest(item_id=plenty.id, quantity=4),
                ServicePartFIFORequest(item_id=scarce.id, quantity=2),
            ])

        assert stock.total_available(db, plenty.id) == 10
        assert usages(db, record.id) == {}


class TestDetachParts:

    def test_replace_restores_then_applies(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        b = make_purchase(make_item(), 5)
        record = make_service(parts=[part(a.stock_id, 3)])

        service.replace_service_parts(db, record.id, [part(a.stock_id, 5), part(b.stock_id, 1)])

        assert usages(db, record.id) == {a.stock_id: 5, b.stock_id: 1}
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 0
        assert stock.get_stock_lot(db, b.stock_id).available_qty == 4

    def test_failed_replace_keeps_old_parts(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        record = make_service(parts=[part(a.stock_id, 3)])

        with pytest.raises(InsufficientStock):
            service.replace_service_parts(db, record.id, [part(a.stock_id, 6)])

        assert usages(db, record.id) == {a.stock_id: 3}
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 2

    def test_delete_parts_restores_every_lot(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        b = make_purchase(make_item(), 5)
        record = make_service(parts=[part(a.stock_id, 3), part(b.stock_id, 4)])

        service.delete_service_parts(db, record.id)

        assert usages(db, record.id) == {}
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 5
        assert stock.get_stock_lot(db, b.stock_id).available_qty == 5

    def test_remove_single_part(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        b = make_purchase(make_item(), 5)
        record = make_service(parts=[part(a.stock_id, 3), part(b.stock_id, 4)])

        service.remove_service_part(db, record.id, a.stock_id)

        assert usages(db, record.id) == {b.stock_id: 4}
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 5

    def test_remove_part_not_on_service(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        record = make_service()

        with pytest.raises(ServicePartNotFound):
            service.remove_service_part(db, record.id, a.stock_id)


class TestDeleteServiceRecord:

    def test_restores_stock_and_drops_invoice(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        record = make_service(parts=[part(a.stock_id, 2)], service_charge="20.00")
        assert db.query(Invoice).count() == 1

        service.delete_service_record(db, record.id)

        assert service.get_service_record(db, record.id) is None
        assert db.query(Invoice).count() == 0
        assert db.query(ServicePartUsage).count() == 0
        assert stock.get_stock_lot(db, a.stock_id).available_qty == 5

    def test_unknown_record(self, db):
        with pytest.raises(ServiceRecordNotFound):
            service.delete_service_record(db, 1)


class TestServiceQueries:

    def test_filter_by_vehicle_and_dates(self, db, make_service):
        make_service(vehicle_number="CAB-1", service_date=date(2024, 1, 1))
        wanted = make_service(vehicle_number="CAB-1", service_date=date(2024, 3, 1))
        make_service(vehicle_number="CAB-2", service_date=date(2024, 3, 2))

        result = service.get_service_records(db, vehicle_number="CAB-1", start_date=date(2024, 2, 1))

        assert [r.id for r in result] == [wanted.id]

    def test_detail_lists_part_lines(self, db, make_item, make_purchase, make_service):
        item = make_item(name="Brake Pad")
        a = make_purchase(item, 5, selling_price="12.50")
        record = make_service(parts=[part(a.stock_id, 2)])

        detail = service.get_service_record_detail(db, record.id)

        assert detail["parts_count"] == 1
        [line] = detail["parts_used"]
        assert line["item_name"] == "Brake Pad"
        assert line["quantity_used"] == 2
        assert str(line["line_total"]) == "25.00"

    def test_usage_history_of_a_lot(self, db, make_item, make_purchase, make_service):
        a = make_purchase(make_item(), 5)
        first = make_service(service_date=date(2024, 1, 1), parts=[part(a.stock_id, 1)])
        second = make_service(service_date=date(2024, 2, 1), parts=[part(a.stock_id, 2)])

        history = stock.get_stock_usage_history(db, a.stock_id)

        assert [(h["service_id"], h["quantity_used"]) for h in history] == [(second.id, 2), (first.id, 1)]


def test_quantities_are_conserved(db, make_item, make_purchase, make_service):
    item = make_item()
    make_purchase(item, 6, date(2024, 1, 1))
    b = make_purchase(item, 4, date(2024, 1, 2))
    make_purchase(item, 5, date(2024, 1, 3))

    record = make_service(parts=[part(b.stock_id, 3)])
    release.release_stock(db, item.id, 7)
    service.attach_service_parts_fifo(db, record.id, [ServicePartFIFORequest(item_id=item.id, quantity=2)])
    service.remove_service_part(db, record.id, b.stock_id)

    purchased = sum(p.quantity for p in db.query(Purchase).filter(Purchase.item_id == item.id))
    used = sum(u.quantity_used for u in db.query(ServicePartUsage).filter(ServicePartUsage.item_id == item.id))
    released = sum(r.quantity for r in db.query(InventoryRelease).filter(InventoryRelease.item_id == item.id))

    assert stock.total_available(db, item.id) + used + released == purchased
