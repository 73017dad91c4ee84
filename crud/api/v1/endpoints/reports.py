from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from crud import reports
from schemas.reports import PartsConsumption, PurchaseSummary, StockValuation

router = APIRouter()

@router.get("/stock-valuation", response_model=List[StockValuation])
def get_stock_valuation(db: Session = Depends(get_db)):
    """
    Available stock per item, valued at buying and at selling price
    """
    return reports.stock_valuation(db)

@router.get("/stock-valuation/export")
def export_stock_valuation(db: Session = Depends(get_db)):
    content = reports.generate_stock_excel(reports.stock_valuation(db))
    filename = f"stock_valuation_{date.today().isoformat()}.xlsx"
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )

@router.get("/purchases", response_model=List[PurchaseSummary])
def get_purchase_summary(
    start_date: Optional[date] = Query(None, description="Start date of the report period"),
    end_date: Optional[date] = Query(None, description="End date of the report period"),
    db: Session = Depends(get_db)
):
    """
    Purchases grouped by supplier and month
    """
    return reports.purchase_summary(db, start_date, end_date)

@router.get("/parts-consumption", response_model=List[PartsConsumption])
def get_parts_consumption(
    start_date: Optional[date] = Query(None, description="Start date of the report period"),
    end_date: Optional[date] = Query(None, description="End date of the report period"),
    db: Session = Depends(get_db)
):
    return reports.parts_consumption(db, start_date, end_date)
