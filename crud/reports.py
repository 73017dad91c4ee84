from datetime import date
from io import BytesIO
from typing import List, Optional

import openpyxl
import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from models.inventory import InventoryItem, Purchase, StockLot
from models.service import ServicePartUsage, ServiceRecord


def stock_valuation(db: Session) -> List[dict]:
    """Available quantity per item with its value at cost and at selling price."""
    rows = db.query(
        InventoryItem.id.label('item_id'),
        InventoryItem.name,
        InventoryItem.brand,
        InventoryItem.category,
        StockLot.available_qty,
        StockLot.buying_price,
        StockLot.selling_price
    ).join(StockLot, StockLot.item_id == InventoryItem.id).all()

    if not rows:
        return []

    df = pd.DataFrame(rows, columns=[
        'item_id', 'name', 'brand', 'category', 'available_qty', 'buying_price', 'selling_price'
    ])
    df['buying_price'] = df['buying_price'].fillna(0).astype(float)
    df['selling_price'] = df['selling_price'].astype(float)
    df['cost_value'] = df['available_qty'] * df['buying_price']
    df['retail_value'] = df['available_qty'] * df['selling_price']

    summary = df.groupby(['item_id', 'name', 'brand', 'category'], dropna=False).agg(
        lots=('available_qty', 'size'),
        total_available=('available_qty', 'sum'),
        cost_value=('cost_value', 'sum'),
        retail_value=('retail_value', 'sum')
    ).reset_index().sort_values(['category', 'name'], na_position='last')

    return [
        {
            "item_id": int(row.item_id),
            "name": row.name,
            "brand": None if pd.isna(row.brand) else row.brand,
            "category": None if pd.isna(row.category) else row.category,
            "lots": int(row.lots),
            "total_available": int(row.total_available),
            "cost_value": round(float(row.cost_value), 2),
            "retail_value": round(float(row.retail_value), 2),
        }
        for row in summary.itertuples(index=False)
    ]

def purchase_summary(db: Session, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[dict]:
    """Purchases grouped by supplier and month."""
    query = db.query(
        Purchase.supplier,
        Purchase.purchase_date,
        Purchase.quantity,
        Purchase.buying_price
    )
    if start_date:
        query = query.filter(Purchase.purchase_date >= start_date)
    if end_date:
        query = query.filter(Purchase.purchase_date <= end_date)
    rows = query.all()

    if not rows:
        return []

    df = pd.DataFrame(rows, columns=['supplier', 'purchase_date', 'quantity', 'buying_price'])
    df['supplier'] = df['supplier'].fillna('Unknown')
    df['month'] = pd.to_datetime(df['purchase_date']).dt.to_period('M').astype(str)
    df['total_cost'] = df['quantity'] * df['buying_price'].astype(float)

    summary = df.groupby(['supplier', 'month']).agg(
        purchases=('quantity', 'size'),
        quantity=('quantity', 'sum'),
        total_cost=('total_cost', 'sum')
    ).reset_index().sort_values(['month', 'supplier'])

    return [
        {
            "supplier": row.supplier,
            "month": row.month,
            "purchases": int(row.purchases),
            "quantity": int(row.quantity),
            "total_cost": round(float(row.total_cost), 2),
        }
        for row in summary.itertuples(index=False)
    ]

def parts_consumption(db: Session, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[dict]:
    """Quantity and revenue of parts used in service records, per item."""
    query = db.query(
        InventoryItem.id.label('item_id'),
        InventoryItem.name,
        ServicePartUsage.service_id,
        ServicePartUsage.quantity_used,
        StockLot.selling_price
    ).join(
        StockLot, ServicePartUsage.stock_id == StockLot.id
    ).join(
        InventoryItem, ServicePartUsage.item_id == InventoryItem.id
    ).join(
        ServiceRecord, ServicePartUsage.service_id == ServiceRecord.id
    )
    if start_date:
        query = query.filter(ServiceRecord.service_date >= start_date)
    if end_date:
        query = query.filter(ServiceRecord.service_date <= end_date)
    rows = query.all()

    if not rows:
        return []

    df = pd.DataFrame(rows, columns=['item_id', 'name', 'service_id', 'quantity_used', 'selling_price'])
    df['revenue'] = df['quantity_used'] * df['selling_price'].astype(float)

    summary = df.groupby(['item_id', 'name']).agg(
        services=('service_id', 'nunique'),
        quantity_used=('quantity_used', 'sum'),
        revenue=('revenue', 'sum')
    ).reset_index().sort_values('quantity_used', ascending=False)

    return [
        {
            "item_id": int(row.item_id),
            "name": row.name,
            "services": int(row.services),
            "quantity_used": int(row.quantity_used),
            "revenue": round(float(row.revenue), 2),
        }
        for row in summary.itertuples(index=False)
    ]

def generate_stock_excel(rows: List[dict]) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Stock Valuation"

    title_font = Font(name='Arial', size=14, bold=True, color='000080')
    header_font = Font(name='Arial', size=11, bold=True)
    total_font = Font(name='Arial', size=11, bold=True)
    normal_font = Font(name='Arial', size=10)

    header_fill = PatternFill(start_color='E0E0E0', end_color='E0E0E0', fill_type='solid')
    total_fill = PatternFill(start_color='F0F0F0', end_color='F0F0F0', fill_type='solid')

    border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    ws["A1"] = "Stock Valuation Report"
    ws["A1"].font = title_font
    ws["A2"] = f"As of {date.today().strftime('%d %B %Y')}"

    headers = ["Item", "Brand", "Category", "Lots", "Available", "Cost Value", "Retail Value"]
    header_row = 4
    for col, title in enumerate(headers, start=1):
        cell = ws.cell(row=header_row, column=col, value=title)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = border
        cell.alignment = Alignment(horizontal='center')

    current_row = header_row + 1
    for row in rows:
        values = [
            row["name"], row["brand"], row["category"], row["lots"],
            row["total_available"], row["cost_value"], row["retail_value"]
        ]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=current_row, column=col, value=value)
            cell.font = normal_font
            cell.border = border
            if col >= 6:
                cell.number_format = '#,##0.00'
                cell.alignment = Alignment(horizontal='right')
        current_row += 1

    ws.cell(row=current_row, column=1, value="TOTAL")
    ws.cell(row=current_row, column=5, value=sum(r["total_available"] for r in rows))
    ws.cell(row=current_row, column=6, value=round(sum(r["cost_value"] for r in rows), 2))
    ws.cell(row=current_row, column=7, value=round(sum(r["retail_value"] for r in rows), 2))
    for col in range(1, len(headers) + 1):
        cell = ws.cell(row=current_row, column=col)
        cell.font = total_font
        cell.fill = total_fill
        cell.border = border
        if col >= 6:
            cell.number_format = '#,##0.00'

    for col in range(1, len(headers) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 28 if col == 1 else 14

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
