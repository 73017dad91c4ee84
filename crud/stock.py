"""Stock ledger: per-lot availability and the primitives that move it.

Quantities only ever change through ``decrement`` and ``increment``. Both are
single conditional UPDATE statements, so a decrement computed from a stale
read cannot push a lot below zero: the row simply does not match and the
caller gets ``NegativeQuantity``.

None of the functions here commit. Callers wrap them in
``database.transaction`` so that a multi-lot operation is applied as a whole
or not at all.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from crud.inventory import require_inventory_item
from database import transaction
from exceptions import (
    Conflict,
    NegativeQuantity,
    InsufficientStock,
    PurchaseNotFound,
    StockNotFound,
    ValidationError,
)
from models.inventory import InventoryItem, Purchase, StockLot
from models.service import ServicePartUsage, ServiceRecord
from schemas.inventory import StockLotCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LotDeduction:
    stock_id: int
    deducted: int
    remaining: int


def get_stock_lot(db: Session, stock_id: int) -> Optional[StockLot]:
    return db.query(StockLot).filter(StockLot.id == stock_id).first()

def require_stock_lot(db: Session, stock_id: int) -> StockLot:
    lot = get_stock_lot(db, stock_id)
    if lot is None:
        raise StockNotFound(stock_id)
    return lot

def list_stock(db: Session, item_id: Optional[int] = None, skip: int = 0, limit: int = 100) -> List[StockLot]:
    query = db.query(StockLot)
    if item_id is not None:
        query = query.filter(StockLot.item_id == item_id)
    return query.order_by(StockLot.item_id, StockLot.purchase_date, StockLot.id).offset(skip).limit(limit).all()

def list_available_lots(db: Session, item_id: int, lock: bool = False) -> List[StockLot]:
    """Lots of ``item_id`` with stock left, oldest first.

    With ``lock`` the rows are selected FOR UPDATE and held until the
    surrounding transaction ends.
    """
    query = db.query(StockLot).filter(
        StockLot.item_id == item_id,
        StockLot.available_qty > 0
    ).order_by(StockLot.purchase_date.asc(), StockLot.id.asc()).populate_existing()
    if lock:
        query = query.with_for_update()
    return query.all()

def total_available(db: Session, item_id: int) -> int:
    total = db.query(func.coalesce(func.sum(StockLot.available_qty), 0)).filter(
        StockLot.item_id == item_id
    ).scalar()
    return int(total)

def _current_qty(db: Session, stock_id: int) -> int:
    lot = db.get(StockLot, stock_id, populate_existing=True)
    if lot is None:
        raise StockNotFound(stock_id)
    return lot.available_qty

def decrement(db: Session, stock_id: int, amount: int) -> int:
    """Take ``amount`` off a lot and return what is left on it."""
    if amount <= 0:
        raise ValidationError("Decrement amount must be positive", stock_id=stock_id, amount=amount)
    db.flush()

    result = db.execute(
        update(StockLot)
        .where(StockLot.id == stock_id, StockLot.available_qty >= amount)
        .values(available_qty=StockLot.available_qty - amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        available = _current_qty(db, stock_id)
        raise NegativeQuantity(requested=amount, available=available, stock_id=stock_id)
    return _current_qty(db, stock_id)

def increment(db: Session, stock_id: int, amount: int) -> int:
    """Put ``amount`` back on a lot and return its new quantity."""
    if amount <= 0:
        raise ValidationError("Increment amount must be positive", stock_id=stock_id, amount=amount)
    db.flush()

    result = db.execute(
        update(StockLot)
        .where(StockLot.id == stock_id)
        .values(available_qty=StockLot.available_qty + amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise StockNotFound(stock_id)
    return _current_qty(db, stock_id)

def consume_fifo(db: Session, item_id: int, quantity: int) -> List[LotDeduction]:
    """Deduct ``quantity`` of an item from its lots, oldest purchase first.

    Raises ``InsufficientStock`` without touching any lot when the item does
    not have ``quantity`` available in total. If a lot is drained by a
    concurrent transaction between the check and the deduction, ``Conflict``
    is raised; the caller's transaction must then roll back every deduction
    already applied.
    """
    if quantity < 0:
        raise ValidationError("Quantity must not be negative", item_id=item_id, quantity=quantity)
    if quantity == 0:
        return []

    available = total_available(db, item_id)
    if available < quantity:
        raise InsufficientStock(requested=quantity, available=available, item_id=item_id)

    remaining_to_release = quantity
    deductions = []
    for lot in list_available_lots(db, item_id, lock=True):
        if remaining_to_release == 0:
            break
        deduct = min(remaining_to_release, lot.available_qty)
        try:
            remaining = decrement(db, lot.id, deduct)
        except NegativeQuantity as e:
            raise Conflict(
                f"Stock lot {lot.id} changed while releasing item {item_id}",
                item_id=item_id,
                stock_id=lot.id,
            ) from e
        deductions.append(LotDeduction(stock_id=lot.id, deducted=deduct, remaining=remaining))
        remaining_to_release -= deduct

    if remaining_to_release:
        raise Conflict(
            f"Stock of item {item_id} changed while releasing it",
            item_id=item_id,
            requested=quantity,
            unallocated=remaining_to_release,
        )
    return deductions

def get_stock_status(db: Session, item_id: int) -> dict:
    item = require_inventory_item(db, item_id)
    lots = list_available_lots(db, item_id)
    return {
        "item_id": item_id,
        "item": item,
        "total_available": total_available(db, item_id),
        "lots": [
            {
                "stock_id": lot.id,
                "purchase_id": lot.purchase_id,
                "available_qty": lot.available_qty,
                "buying_price": lot.buying_price,
                "selling_price": lot.selling_price,
                "purchase_date": lot.purchase_date,
            }
            for lot in lots
        ],
    }

def add_stock(db: Session, stock: StockLotCreate) -> StockLot:
    with transaction(db):
        require_inventory_item(db, stock.item_id)

        purchase_date = stock.purchase_date or date.today()
        buying_price = stock.buying_price
        if stock.purchase_id is not None:
            purchase = db.query(Purchase).filter(Purchase.id == stock.purchase_id).first()
            if purchase is None:
                raise PurchaseNotFound(stock.purchase_id)
            if purchase.item_id != stock.item_id:
                raise ValidationError(
                    "Purchase record does not match the item",
                    purchase_id=purchase.id,
                    item_id=stock.item_id,
                )
            if purchase.stock_lot is not None:
                raise ValidationError(
                    "Purchase already has a stock lot",
                    purchase_id=purchase.id,
                    stock_id=purchase.stock_lot.id,
                )
            purchase_date = purchase.purchase_date
            buying_price = purchase.buying_price

        lot = StockLot(
            item_id=stock.item_id,
            purchase_id=stock.purchase_id,
            available_qty=stock.available_qty,
            selling_price=stock.selling_price,
            buying_price=buying_price,
            purchase_date=purchase_date,
        )
        db.add(lot)
    db.refresh(lot)
    logger.info("Added stock lot %s for item %s (%s units)", lot.id, lot.item_id, lot.available_qty)
    return lot

def update_stock_price(db: Session, stock_id: int, selling_price: Decimal) -> StockLot:
    with transaction(db):
        lot = require_stock_lot(db, stock_id)
        lot.selling_price = selling_price
    db.refresh(lot)
    return lot

def get_low_stock_items(db: Session) -> List[dict]:
    total = func.coalesce(func.sum(StockLot.available_qty), 0)
    rows = db.query(
        InventoryItem,
        total.label('total_available')
    ).outerjoin(
        StockLot, StockLot.item_id == InventoryItem.id
    ).group_by(InventoryItem.id).having(
        total <= InventoryItem.restock_level
    ).order_by(InventoryItem.category, InventoryItem.name).all()

    return [
        {
            "item_id": item.id,
            "name": item.name,
            "brand": item.brand,
            "category": item.category,
            "unit": item.unit,
            "restock_level": item.restock_level,
            "total_available": int(total_available),
        }
        for item, total_available in rows
    ]

def get_stock_usage_history(db: Session, stock_id: int) -> List[dict]:
    require_stock_lot(db, stock_id)
    rows = db.query(ServicePartUsage, ServiceRecord).join(
        ServiceRecord, ServicePartUsage.service_id == ServiceRecord.id
    ).filter(
        ServicePartUsage.stock_id == stock_id
    ).order_by(ServiceRecord.service_date.desc(), ServiceRecord.id.desc()).all()

    return [
        {
            "service_id": record.id,
            "quantity_used": usage.quantity_used,
            "service_date": record.service_date,
            "service_description": record.service_description,
            "vehicle_number": record.vehicle_number,
        }
        for usage, record in rows
    ]
