import logging
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from config import settings
from crud import stock
from crud.inventory import require_inventory_item
from database import transaction
from exceptions import Conflict, ReleaseNotFound
from models.inventory import InventoryRelease

logger = logging.getLogger(__name__)


def release_stock(
    db: Session,
    item_id: int,
    quantity: int,
    release_date: Optional[date] = None
) -> List[stock.LotDeduction]:
    """Withdraw ``quantity`` units of an item, oldest lots first.

    One release row is written per lot the withdrawal touched.
    """
    release_date = release_date or date.today()
    with transaction(db):
        require_inventory_item(db, item_id)
        deductions = stock.consume_fifo(db, item_id, quantity)
        for deduction in deductions:
            db.add(InventoryRelease(
                item_id=item_id,
                stock_id=deduction.stock_id,
                quantity=deduction.deducted,
                release_date=release_date
            ))
    logger.info(
        "Released %s x item %s across lots %s",
        quantity, item_id, [d.stock_id for d in deductions]
    )
    return deductions

def release_stock_with_retry(
    db: Session,
    item_id: int,
    quantity: int,
    release_date: Optional[date] = None,
    attempts: Optional[int] = None
) -> List[stock.LotDeduction]:
    """``release_stock``, re-run from a fresh read when it loses a race."""
    attempts = attempts or settings.FIFO_RETRY_ATTEMPTS
    for attempt in range(1, attempts + 1):
        try:
            return release_stock(db, item_id, quantity, release_date)
        except Conflict:
            if attempt == attempts:
                raise
            logger.warning(
                "Release of item %s conflicted with a concurrent update, retrying (%s/%s)",
                item_id, attempt, attempts
            )

def get_release(db: Session, release_id: int) -> InventoryRelease:
    db_release = db.query(InventoryRelease).filter(InventoryRelease.id == release_id).first()
    if db_release is None:
        raise ReleaseNotFound(release_id)
    return db_release

def get_releases(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    item_id: Optional[int] = None
) -> List[InventoryRelease]:
    query = db.query(InventoryRelease)
    if item_id:
        query = query.filter(InventoryRelease.item_id == item_id)
    return query.order_by(
        InventoryRelease.release_date.desc(),
        InventoryRelease.id.desc()
    ).offset(skip).limit(limit).all()
