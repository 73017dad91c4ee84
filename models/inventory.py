from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from database import Base

class InventoryItem(Base):
    __tablename__ = 'inventory_items'
    __table_args__ = (
        UniqueConstraint('name', 'brand', name='uq_inventory_item_name_brand'),
        CheckConstraint('restock_level >= 0', name='ck_inventory_item_restock_level'),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)
    brand = Column(String, nullable=True)
    unit = Column(String, nullable=True)
    restock_level = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    stock_lots = relationship("StockLot", back_populates="item")
    purchases = relationship("Purchase", back_populates="item")
    releases = relationship("InventoryRelease", back_populates="item")


class Purchase(Base):
    __tablename__ = 'purchases'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_purchase_quantity'),
        CheckConstraint('buying_price >= 0', name='ck_purchase_buying_price'),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    purchase_date = Column(Date, nullable=False)
    quantity = Column(Integer, nullable=False)
    buying_price = Column(Numeric(15, 2), nullable=False)
    supplier = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("InventoryItem", back_populates="purchases")
    stock_lot = relationship("StockLot", back_populates="purchase", uselist=False)

    @property
    def stock_id(self):
        return self.stock_lot.id if self.stock_lot else None

    @property
    def available_qty(self):
        return self.stock_lot.available_qty if self.stock_lot else None

    @property
    def selling_price(self):
        return self.stock_lot.selling_price if self.stock_lot else None


class StockLot(Base):
    __tablename__ = 'inventory_stock'
    __table_args__ = (
        CheckConstraint('available_qty >= 0', name='ck_stock_available_qty'),
        CheckConstraint('selling_price >= 0', name='ck_stock_selling_price'),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=True, unique=True)
    available_qty = Column(Integer, nullable=False, default=0)
    selling_price = Column(Numeric(15, 2), nullable=False)
    buying_price = Column(Numeric(15, 2), nullable=True)
    # FIFO ordering key, ties broken by id
    purchase_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("InventoryItem", back_populates="stock_lots")
    purchase = relationship("Purchase", back_populates="stock_lot")
    part_usages = relationship("ServicePartUsage", back_populates="stock_lot")
    releases = relationship("InventoryRelease", back_populates="stock_lot")


class InventoryRelease(Base):
    __tablename__ = 'inventory_releases'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_release_quantity'),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    stock_id = Column(Integer, ForeignKey("inventory_stock.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    release_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("InventoryItem", back_populates="releases")
    stock_lot = relationship("StockLot", back_populates="releases")
