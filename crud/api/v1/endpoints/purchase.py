from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from schemas.purchase import Purchase, PurchaseCreate, PurchaseUpdate
from crud import purchase

router = APIRouter()

@router.post("/", response_model=Purchase, status_code=201)
def record_purchase(purchase_in: PurchaseCreate, db: Session = Depends(get_db)):
    return purchase.record_purchase(db, purchase_in)

@router.get("/", response_model=List[Purchase])
def list_purchases(
    skip: int = 0,
    limit: int = 100,
    item_id: Optional[int] = None,
    supplier: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db)
):
    return purchase.get_purchases(db, skip, limit, item_id, supplier, start_date, end_date)

@router.get("/{purchase_id}", response_model=Purchase)
def get_purchase(purchase_id: int, db: Session = Depends(get_db)):
    return purchase.require_purchase(db, purchase_id)

@router.put("/{purchase_id}", response_model=Purchase)
def update_purchase(purchase_id: int, purchase_update: PurchaseUpdate, db: Session = Depends(get_db)):
    return purchase.update_purchase(db, purchase_id, purchase_update)

@router.delete("/{purchase_id}")
def delete_purchase(purchase_id: int, db: Session = Depends(get_db)):
    purchase.delete_purchase(db, purchase_id)
    return {"status": "success"}
