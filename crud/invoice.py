import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from decimal import Decimal
from config import settings
# circular with crud.service, referenced at call time only
from crud import service
from database import transaction
from exceptions import InvoiceNotFound
from models.inventory import InventoryItem, StockLot
from models.invoice import Invoice
from models.service import ServicePartUsage, ServiceRecord

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def invoice_id_for(service_id: int) -> str:
    return f"{settings.INVOICE_PREFIX}{service_id:0{settings.INVOICE_ID_WIDTH}d}"

def get_part_lines(db: Session, service_id: int) -> List[dict]:
    rows = db.query(ServicePartUsage, StockLot, InventoryItem).join(
        StockLot, ServicePartUsage.stock_id == StockLot.id
    ).join(
        InventoryItem, ServicePartUsage.item_id == InventoryItem.id
    ).filter(
        ServicePartUsage.service_id == service_id
    ).order_by(ServicePartUsage.stock_id).all()

    return [
        {
            "stock_id": usage.stock_id,
            "item_id": item.id,
            "item_name": item.name,
            "brand": item.brand,
            "category": item.category,
            "unit": item.unit,
            "quantity_used": usage.quantity_used,
            "buying_price": lot.buying_price,
            "selling_price": lot.selling_price,
            "line_total": (usage.quantity_used * Decimal(lot.selling_price)).quantize(CENTS),
        }
        for usage, lot, item in rows
    ]

def compute_parts_total(db: Session, service_id: int) -> Decimal:
    """Sum of quantity_used x selling_price over the service's current parts."""
    db.flush()
    return sum(
        (line["line_total"] for line in get_part_lines(db, service_id)),
        Decimal("0.00")
    )

def apply_invoice(db: Session, record: ServiceRecord, service_charge: Decimal) -> Invoice:
    """Create or update the invoice of ``record`` from the current parts.

    Does not commit; the caller's transaction covers the read and the write.
    """
    service_charge = Decimal(service_charge).quantize(CENTS)
    parts_total = compute_parts_total(db, record.id)
    total = service_charge + parts_total

    db_invoice = db.query(Invoice).filter(Invoice.service_id == record.id).first()
    if db_invoice is None:
        db_invoice = Invoice(
            id=invoice_id_for(record.id),
            service_id=record.id,
            description=record.service_description,
            created_date=date.today()
        )
        db.add(db_invoice)

    db_invoice.service_charge = service_charge
    db_invoice.parts_total_price = parts_total
    db_invoice.total_price = total
    db.flush()
    return db_invoice

def refresh_invoice_totals(db: Session, service_id: int) -> Optional[Invoice]:
    """Recompute an existing invoice after the service's parts changed."""
    db_invoice = db.query(Invoice).filter(Invoice.service_id == service_id).first()
    if db_invoice is None:
        return None
    return apply_invoice(db, db_invoice.service_record, db_invoice.service_charge)

def _invoice_detail(db: Session, db_invoice: Invoice) -> dict:
    record = db_invoice.service_record
    return {
        "id": db_invoice.id,
        "service_id": db_invoice.service_id,
        "description": db_invoice.description,
        "service_charge": db_invoice.service_charge,
        "parts_total_price": db_invoice.parts_total_price,
        "total_price": db_invoice.total_price,
        "created_date": db_invoice.created_date,
        "vehicle_number": record.vehicle_number,
        "service_date": record.service_date,
        "parts_used": get_part_lines(db, db_invoice.service_id),
    }

def generate_invoice(db: Session, service_id: int, service_charge: Decimal) -> dict:
    with transaction(db):
        record = service.require_service_record(db, service_id, lock=True)
        db_invoice = apply_invoice(db, record, service_charge)
        invoice_id = db_invoice.id
    logger.info("Generated invoice %s for service record %s", invoice_id, service_id)
    return get_invoice(db, invoice_id)

def get_invoice(db: Session, invoice_id: str) -> dict:
    db_invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
    if db_invoice is None:
        raise InvoiceNotFound(invoice_id)
    return _invoice_detail(db, db_invoice)

def get_invoice_by_service(db: Session, service_id: int) -> dict:
    db_invoice = db.query(Invoice).filter(Invoice.service_id == service_id).first()
    if db_invoice is None:
        raise InvoiceNotFound(invoice_id_for(service_id))
    return _invoice_detail(db, db_invoice)

def get_invoices(db: Session, skip: int = 0, limit: int = 100) -> List[Invoice]:
    return db.query(Invoice).order_by(
        Invoice.created_date.desc(),
        Invoice.id.desc()
    ).offset(skip).limit(limit).all()
