from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date


class ReleaseCreate(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)
    release_date: Optional[date] = None

class LotDeduction(BaseModel):
    stock_id: int
    deducted: int
    remaining: int

    class Config:
        from_attributes = True

class ReleaseResult(BaseModel):
    item_id: int
    quantity: int
    affected_stocks: List[LotDeduction]

class Release(BaseModel):
    id: int
    item_id: int
    stock_id: int
    quantity: int
    release_date: date

    class Config:
        from_attributes = True
