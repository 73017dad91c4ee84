from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.inventory import LowStockItem, StockLot, StockLotCreate, StockPriceUpdate, StockUsage
from crud import stock

router = APIRouter()

@router.post("/", response_model=StockLot, status_code=201)
def add_stock(lot: StockLotCreate, db: Session = Depends(get_db)):
    return stock.add_stock(db, lot)

@router.get("/", response_model=List[StockLot])
def list_stock(item_id: Optional[int] = None, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return stock.list_stock(db, item_id, skip, limit)

@router.get("/low-stock", response_model=List[LowStockItem])
def list_low_stock_items(db: Session = Depends(get_db)):
    return stock.get_low_stock_items(db)

@router.get("/{stock_id}", response_model=StockLot)
def get_stock(stock_id: int, db: Session = Depends(get_db)):
    return stock.require_stock_lot(db, stock_id)

@router.put("/{stock_id}", response_model=StockLot)
def update_stock_price(stock_id: int, price: StockPriceUpdate, db: Session = Depends(get_db)):
    return stock.update_stock_price(db, stock_id, price.selling_price)

@router.get("/{stock_id}/usage", response_model=List[StockUsage])
def get_stock_usage_history(stock_id: int, db: Session = Depends(get_db)):
    return stock.get_stock_usage_history(db, stock_id)
