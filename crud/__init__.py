from .inventory import create_inventory_item, get_inventory_item, get_inventory_items, update_inventory_item, delete_inventory_item
from .stock import consume_fifo, decrement, increment, get_stock_status, list_available_lots, total_available
from .purchase import record_purchase, get_purchase, get_purchases, update_purchase, delete_purchase
from .release import release_stock, release_stock_with_retry
from .service import attach_service_parts, replace_service_parts, delete_service_parts, delete_service_record
from .invoice import generate_invoice, get_invoice
