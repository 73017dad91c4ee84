from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.inventory import InventoryItem, InventoryItemCreate, InventoryItemUpdate, StockStatus
from crud import inventory, stock

router = APIRouter()

@router.post("/", response_model=InventoryItem, status_code=201)
def create_inventory_item(item: InventoryItemCreate, db: Session = Depends(get_db)):
    return inventory.create_inventory_item(db, item)

@router.get("/", response_model=List[InventoryItem])
def list_inventory_items(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return inventory.get_inventory_items(db, skip, limit, search, category)

@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    return inventory.get_categories(db)

@router.get("/{item_id}", response_model=InventoryItem)
def get_inventory_item(item_id: int, db: Session = Depends(get_db)):
    return inventory.require_inventory_item(db, item_id)

@router.get("/{item_id}/stock-status", response_model=StockStatus)
def get_stock_status(item_id: int, db: Session = Depends(get_db)):
    return stock.get_stock_status(db, item_id)

@router.put("/{item_id}", response_model=InventoryItem)
def update_inventory_item(item_id: int, item_update: InventoryItemUpdate, db: Session = Depends(get_db)):
    return inventory.update_inventory_item(db, item_id, item_update)

@router.delete("/{item_id}")
def delete_inventory_item(item_id: int, db: Session = Depends(get_db)):
    inventory.delete_inventory_item(db, item_id)
    return {"status": "success"}
