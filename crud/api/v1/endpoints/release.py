from dataclasses import asdict
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from schemas.release import Release, ReleaseCreate, ReleaseResult
from crud import release

router = APIRouter()

@router.post("/", response_model=ReleaseResult, status_code=201)
def release_stock(release_in: ReleaseCreate, db: Session = Depends(get_db)):
    deductions = release.release_stock_with_retry(
        db, release_in.item_id, release_in.quantity, release_in.release_date
    )
    return {
        "item_id": release_in.item_id,
        "quantity": release_in.quantity,
        "affected_stocks": [asdict(d) for d in deductions]
    }

@router.get("/", response_model=List[Release])
def list_releases(item_id: Optional[int] = None, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return release.get_releases(db, skip, limit, item_id)

@router.get("/{release_id}", response_model=Release)
def get_release(release_id: int, db: Session = Depends(get_db)):
    return release.get_release(db, release_id)
