from .inventory import InventoryItem, Purchase, StockLot, InventoryRelease
from .service import ServiceRecord, ServicePartUsage
from .invoice import Invoice
