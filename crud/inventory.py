import logging
from sqlalchemy.orm import Session
from typing import List, Optional
from database import transaction
from exceptions import DuplicateItem, ItemNotFound, ReferenceInUse
from models.inventory import InventoryItem, StockLot
from models.service import ServicePartUsage
from schemas.inventory import InventoryItemCreate, InventoryItemUpdate

logger = logging.getLogger(__name__)


def _find_by_name_and_brand(db: Session, name: str, brand: Optional[str]) -> Optional[InventoryItem]:
    return db.query(InventoryItem).filter(
        InventoryItem.name == name,
        InventoryItem.brand == brand
    ).first()

def create_inventory_item(db: Session, item: InventoryItemCreate) -> InventoryItem:
    with transaction(db):
        if _find_by_name_and_brand(db, item.name, item.brand):
            raise DuplicateItem(item.name, item.brand)
        db_item = InventoryItem(**item.model_dump())
        db.add(db_item)
    db.refresh(db_item)
    logger.info("Created inventory item %s (%s / %s)", db_item.id, db_item.name, db_item.brand)
    return db_item

def get_inventory_item(db: Session, item_id: int) -> Optional[InventoryItem]:
    return db.query(InventoryItem).filter(InventoryItem.id == item_id).first()

def require_inventory_item(db: Session, item_id: int) -> InventoryItem:
    db_item = get_inventory_item(db, item_id)
    if db_item is None:
        raise ItemNotFound(item_id)
    return db_item

def get_inventory_items(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    category: Optional[str] = None
) -> List[InventoryItem]:
    query = db.query(InventoryItem)

    if search:
        query = query.filter(InventoryItem.name.ilike(f'%{search}%'))
    if category:
        query = query.filter(InventoryItem.category == category)

    return query.order_by(InventoryItem.category, InventoryItem.name).offset(skip).limit(limit).all()

def get_categories(db: Session) -> List[str]:
    rows = db.query(InventoryItem.category).filter(
        InventoryItem.category.isnot(None)
    ).distinct().order_by(InventoryItem.category).all()
    return [row.category for row in rows]

def update_inventory_item(db: Session, item_id: int, item_update: InventoryItemUpdate) -> InventoryItem:
    with transaction(db):
        db_item = require_inventory_item(db, item_id)
        update_data = item_update.model_dump(exclude_unset=True)

        name = update_data.get('name', db_item.name)
        brand = update_data.get('brand', db_item.brand)
        existing = _find_by_name_and_brand(db, name, brand)
        if existing and existing.id != db_item.id:
            raise DuplicateItem(name, brand)

        for key, value in update_data.items():
            setattr(db_item, key, value)
    db.refresh(db_item)
    return db_item

def delete_inventory_item(db: Session, item_id: int) -> None:
    with transaction(db):
        db_item = require_inventory_item(db, item_id)

        lots = db.query(StockLot).filter(StockLot.item_id == item_id).count()
        if lots:
            raise ReferenceInUse(
                "Cannot delete item: stock entries exist for this item",
                item_id=item_id,
                stock_lots=lots,
            )

        usages = db.query(ServicePartUsage).filter(ServicePartUsage.item_id == item_id).count()
        if usages:
            raise ReferenceInUse(
                "Cannot delete item: item has been used in services",
                item_id=item_id,
                service_usages=usages,
            )

        db.delete(db_item)
    logger.info("Deleted inventory item %s", item_id)
