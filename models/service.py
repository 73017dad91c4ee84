from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database import Base

class ServiceRecord(Base):
    __tablename__ = "service_records"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    vehicle_number = Column(String, nullable=False, index=True)
    service_description = Column(String, nullable=True)
    service_date = Column(Date, nullable=False)
    mileage = Column(Integer, nullable=True)
    next_service_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    parts_used = relationship("ServicePartUsage", back_populates="service_record")
    invoice = relationship("Invoice", back_populates="service_record", uselist=False)

    @property
    def parts_count(self):
        return len(self.parts_used)


class ServicePartUsage(Base):
    """Quantity of one stock lot consumed by one service record."""

    __tablename__ = "service_parts_used"
    __table_args__ = (
        CheckConstraint('quantity_used > 0', name='ck_service_part_quantity_used'),
    )

    service_id = Column(Integer, ForeignKey("service_records.id"), primary_key=True)
    stock_id = Column(Integer, ForeignKey("inventory_stock.id"), primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    quantity_used = Column(Integer, nullable=False)

    service_record = relationship("ServiceRecord", back_populates="parts_used")
    stock_lot = relationship("StockLot", back_populates="part_usages")
    item = relationship("InventoryItem")
