"""Service records and the stock lots their parts were taken from.

Every change to a service's parts moves the matching lots in the same
transaction: attaching a part decrements its lot, detaching restores it. A
parts list is applied entirely or not at all.
"""
import logging
from sqlalchemy.orm import Session
from datetime import date
from typing import Iterable, List, Optional
from crud import invoice, stock
from crud.inventory import require_inventory_item
from database import transaction
from exceptions import ServicePartNotFound, ServiceRecordNotFound, ValidationError
from models.invoice import Invoice
from models.service import ServicePartUsage, ServiceRecord
from schemas.service import ServicePartFIFORequest, ServicePartRequest, ServiceRecordCreate

logger = logging.getLogger(__name__)


def get_service_record(db: Session, service_id: int) -> Optional[ServiceRecord]:
    return db.query(ServiceRecord).filter(ServiceRecord.id == service_id).first()

def require_service_record(db: Session, service_id: int, lock: bool = False) -> ServiceRecord:
    query = db.query(ServiceRecord).filter(ServiceRecord.id == service_id)
    if lock:
        query = query.with_for_update()
    record = query.first()
    if record is None:
        raise ServiceRecordNotFound(service_id)
    return record

def get_service_records(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    vehicle_number: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[ServiceRecord]:
    query = db.query(ServiceRecord)

    if vehicle_number:
        query = query.filter(ServiceRecord.vehicle_number == vehicle_number)
    if start_date:
        query = query.filter(ServiceRecord.service_date >= start_date)
    if end_date:
        query = query.filter(ServiceRecord.service_date <= end_date)

    return query.order_by(ServiceRecord.service_date.desc(), ServiceRecord.id.desc()).offset(skip).limit(limit).all()

def get_service_record_detail(db: Session, service_id: int) -> dict:
    record = require_service_record(db, service_id)
    return {
        "id": record.id,
        "vehicle_number": record.vehicle_number,
        "service_description": record.service_description,
        "service_date": record.service_date,
        "mileage": record.mileage,
        "next_service_date": record.next_service_date,
        "parts_count": record.parts_count,
        "parts_used": invoice.get_part_lines(db, service_id),
    }

def get_service_parts(db: Session, service_id: int) -> List[ServicePartUsage]:
    return db.query(ServicePartUsage).filter(
        ServicePartUsage.service_id == service_id
    ).order_by(ServicePartUsage.stock_id).all()

def _record_usage(db: Session, service_id: int, stock_id: int, item_id: int, quantity: int) -> ServicePartUsage:
    # one row per (service, lot): repeated additions add up
    db.flush()
    usage = db.get(ServicePartUsage, (service_id, stock_id))
    if usage is None:
        usage = ServicePartUsage(
            service_id=service_id,
            stock_id=stock_id,
            item_id=item_id,
            quantity_used=quantity
        )
        db.add(usage)
    else:
        usage.quantity_used += quantity
    # invoice totals are read back with a query, so the row must be in the database
    db.flush()
    return usage

def _attach_part(db: Session, service_id: int, stock_id: int, quantity: int) -> ServicePartUsage:
    if quantity <= 0:
        raise ValidationError("Quantity used must be positive", stock_id=stock_id, quantity_used=quantity)
    lot = stock.require_stock_lot(db, stock_id)
    stock.decrement(db, stock_id, quantity)
    return _record_usage(db, service_id, stock_id, lot.item_id, quantity)

def _attach_parts(db: Session, service_id: int, parts: Iterable[ServicePartRequest]) -> List[ServicePartUsage]:
    return [_attach_part(db, service_id, part.stock_id, part.quantity_used) for part in parts]

def _restore_parts(db: Session, service_id: int) -> int:
    """Give every attached lot back its quantity and drop the usage rows."""
    usages = get_service_parts(db, service_id)
    for usage in usages:
        stock.increment(db, usage.stock_id, usage.quantity_used)
    for usage in usages:
        db.delete(usage)
    db.flush()
    return len(usages)

def create_service_record(db: Session, record: ServiceRecordCreate) -> ServiceRecord:
    """Create a service record with its parts and, given a charge, its invoice."""
    with transaction(db):
        db_record = ServiceRecord(**record.model_dump(exclude={'parts', 'service_charge'}))
        db.add(db_record)
        db.flush()

        _attach_parts(db, db_record.id, record.parts)
        if record.service_charge is not None:
            invoice.apply_invoice(db, db_record, record.service_charge)
    db.refresh(db_record)
    logger.info(
        "Created service record %s for vehicle %s with %s part lines",
        db_record.id, db_record.vehicle_number, len(record.parts)
    )
    return db_record

def attach_service_parts(db: Session, service_id: int, parts: List[ServicePartRequest]) -> List[ServicePartUsage]:
    """Take parts from named lots, merging into rows the service already has."""
    with transaction(db):
        require_service_record(db, service_id, lock=True)
        _attach_parts(db, service_id, parts)
        invoice.refresh_invoice_totals(db, service_id)
    logger.info("Attached %s part lines to service record %s", len(parts), service_id)
    return get_service_parts(db, service_id)

def attach_service_parts_fifo(db: Session, service_id: int, parts: List[ServicePartFIFORequest]) -> List[ServicePartUsage]:
    """Take parts by item, drawing each from the item's oldest lots."""
    with transaction(db):
        require_service_record(db, service_id, lock=True)
        for part in parts:
            require_inventory_item(db, part.item_id)
            for deduction in stock.consume_fifo(db, part.item_id, part.quantity):
                _record_usage(db, service_id, deduction.stock_id, part.item_id, deduction.deducted)
        invoice.refresh_invoice_totals(db, service_id)
    logger.info("Attached %s items to service record %s oldest lots first", len(parts), service_id)
    return get_service_parts(db, service_id)

def replace_service_parts(db: Session, service_id: int, parts: List[ServicePartRequest]) -> List[ServicePartUsage]:
    """Swap the service's whole parts list for ``parts``."""
    with transaction(db):
        require_service_record(db, service_id, lock=True)
        restored = _restore_parts(db, service_id)
        _attach_parts(db, service_id, parts)
        invoice.refresh_invoice_totals(db, service_id)
    logger.info(
        "Replaced parts of service record %s: %s lines restored, %s attached",
        service_id, restored, len(parts)
    )
    return get_service_parts(db, service_id)

def delete_service_parts(db: Session, service_id: int) -> None:
    with transaction(db):
        require_service_record(db, service_id, lock=True)
        restored = _restore_parts(db, service_id)
        invoice.refresh_invoice_totals(db, service_id)
    logger.info("Restored %s part lines of service record %s", restored, service_id)

def remove_service_part(db: Session, service_id: int, stock_id: int) -> None:
    with transaction(db):
        require_service_record(db, service_id, lock=True)
        usage = db.get(ServicePartUsage, (service_id, stock_id))
        if usage is None:
            raise ServicePartNotFound(service_id, stock_id)
        stock.increment(db, stock_id, usage.quantity_used)
        db.delete(usage)
        db.flush()
        invoice.refresh_invoice_totals(db, service_id)
    logger.info("Removed stock lot %s from service record %s", stock_id, service_id)

def delete_service_record(db: Session, service_id: int) -> None:
    """Delete a service record, returning its parts to stock."""
    with transaction(db):
        record = require_service_record(db, service_id, lock=True)
        restored = _restore_parts(db, service_id)
        db.query(Invoice).filter(Invoice.service_id == service_id).delete(synchronize_session=False)
        db.expire(record)
        db.delete(record)
    logger.info("Deleted service record %s, %s part lines restored", service_id, restored)
