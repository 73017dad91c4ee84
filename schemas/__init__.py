from .inventory import (
    InventoryItem, InventoryItemCreate, InventoryItemUpdate,
    StockLot, StockLotCreate, StockPriceUpdate, StockStatus,
    LowStockItem, StockUsage
)
from .purchase import Purchase, PurchaseCreate, PurchaseUpdate
from .release import Release, ReleaseCreate, ReleaseResult, LotDeduction
from .service import (
    ServiceRecord, ServiceRecordCreate, ServiceRecordDetail,
    ServicePartRequest, ServicePartFIFORequest, ServicePartUsage, ServicePartLine
)
from .invoice import Invoice, InvoiceDetail, InvoiceGenerate
from .reports import StockValuation, PurchaseSummary, PartsConsumption
