import logging
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from crud import stock
from crud.inventory import require_inventory_item
from database import transaction
from exceptions import PurchaseNotFound, ReferenceInUse
from models.inventory import InventoryRelease, Purchase, StockLot
from models.service import ServicePartUsage
from schemas.purchase import PurchaseCreate, PurchaseUpdate

logger = logging.getLogger(__name__)


def record_purchase(db: Session, purchase: PurchaseCreate) -> Purchase:
    """Record a purchase together with the stock lot it brings in."""
    with transaction(db):
        require_inventory_item(db, purchase.item_id)

        db_purchase = Purchase(**purchase.model_dump(exclude={'selling_price'}))
        db.add(db_purchase)
        db.flush()

        db.add(StockLot(
            item_id=purchase.item_id,
            purchase_id=db_purchase.id,
            available_qty=purchase.quantity,
            selling_price=purchase.selling_price,
            buying_price=purchase.buying_price,
            purchase_date=purchase.purchase_date
        ))
    db.refresh(db_purchase)
    logger.info(
        "Recorded purchase %s: %s x item %s from %s",
        db_purchase.id, db_purchase.quantity, db_purchase.item_id, db_purchase.supplier
    )
    return db_purchase

def get_purchase(db: Session, purchase_id: int) -> Optional[Purchase]:
    return db.query(Purchase).filter(Purchase.id == purchase_id).first()

def require_purchase(db: Session, purchase_id: int) -> Purchase:
    db_purchase = get_purchase(db, purchase_id)
    if db_purchase is None:
        raise PurchaseNotFound(purchase_id)
    return db_purchase

def get_purchases(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    item_id: Optional[int] = None,
    supplier: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[Purchase]:
    query = db.query(Purchase)

    if item_id:
        query = query.filter(Purchase.item_id == item_id)
    if supplier:
        query = query.filter(Purchase.supplier.ilike(f"%{supplier}%"))
    if start_date:
        query = query.filter(Purchase.purchase_date >= start_date)
    if end_date:
        query = query.filter(Purchase.purchase_date <= end_date)

    return query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc()).offset(skip).limit(limit).all()

def update_purchase(db: Session, purchase_id: int, purchase_update: PurchaseUpdate) -> Purchase:
    """Edit a purchase and mirror the change onto its stock lot.

    A new quantity moves the lot's availability by the difference, so units
    already consumed from the lot stay consumed.
    """
    with transaction(db):
        db_purchase = require_purchase(db, purchase_id)
        update_data = purchase_update.model_dump(exclude_unset=True)
        selling_price = update_data.pop('selling_price', None)
        old_quantity = db_purchase.quantity

        for field, value in update_data.items():
            setattr(db_purchase, field, value)

        lot = db_purchase.stock_lot
        if lot is not None:
            if 'purchase_date' in update_data:
                lot.purchase_date = db_purchase.purchase_date
            if 'buying_price' in update_data:
                lot.buying_price = db_purchase.buying_price
            if selling_price is not None:
                lot.selling_price = selling_price

            delta = db_purchase.quantity - old_quantity
            if delta > 0:
                stock.increment(db, lot.id, delta)
            elif delta < 0:
                # fails with NegativeQuantity once more than the new quantity was consumed
                stock.decrement(db, lot.id, -delta)
    db.refresh(db_purchase)
    logger.info("Updated purchase %s", purchase_id)
    return db_purchase

def delete_purchase(db: Session, purchase_id: int) -> None:
    """Delete a purchase and its lot, provided nothing was drawn from the lot."""
    with transaction(db):
        db_purchase = require_purchase(db, purchase_id)
        lot = db_purchase.stock_lot

        if lot is not None:
            used = db.query(ServicePartUsage).filter(ServicePartUsage.stock_id == lot.id).count()
            released = db.query(InventoryRelease).filter(InventoryRelease.stock_id == lot.id).count()
            if used or released or lot.available_qty < db_purchase.quantity:
                raise ReferenceInUse(
                    "Cannot delete purchase: its stock has already been consumed",
                    purchase_id=purchase_id,
                    stock_id=lot.id,
                )
            db.delete(lot)
            db.flush()

        db.delete(db_purchase)
    logger.info("Deleted purchase %s", purchase_id)
