"""Errors raised by the inventory ledger.

Every ledger failure is a ``LedgerError`` carrying the HTTP status the API
answers with and the identifiers a caller needs to act on it (which item,
lot or service record, and for stock shortages the exact shortfall).
"""


class LedgerError(Exception):
    status_code = 500

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": type(self).__name__, **self.context}


class NotFoundError(LedgerError):
    status_code = 404


class ItemNotFound(NotFoundError):
    def __init__(self, item_id: int):
        super().__init__(f"Item {item_id} not found", item_id=item_id)


class StockNotFound(NotFoundError):
    def __init__(self, stock_id: int):
        super().__init__(f"Stock lot {stock_id} not found", stock_id=stock_id)


class PurchaseNotFound(NotFoundError):
    def __init__(self, purchase_id: int):
        super().__init__(f"Purchase {purchase_id} not found", purchase_id=purchase_id)


class ReleaseNotFound(NotFoundError):
    def __init__(self, release_id: int):
        super().__init__(f"Release {release_id} not found", release_id=release_id)


class ServiceRecordNotFound(NotFoundError):
    def __init__(self, service_id: int):
        super().__init__(f"Service record {service_id} not found", service_id=service_id)


class ServicePartNotFound(NotFoundError):
    def __init__(self, service_id: int, stock_id: int):
        super().__init__(
            f"Stock lot {stock_id} is not used by service record {service_id}",
            service_id=service_id,
            stock_id=stock_id,
        )


class InvoiceNotFound(NotFoundError):
    def __init__(self, invoice_id: str):
        super().__init__(f"Invoice {invoice_id} not found", invoice_id=invoice_id)


class InsufficientStock(LedgerError):
    """Requested quantity exceeds what is available.

    ``item_id`` is set when the shortage is over an item's lots as a whole
    (FIFO path), ``stock_id`` when a single named lot is short.
    """

    status_code = 409

    def __init__(self, requested: int, available: int, item_id=None, stock_id=None):
        self.requested = requested
        self.available = available
        self.shortfall = requested - available
        if stock_id is not None:
            target = f"stock lot {stock_id}"
        else:
            target = f"item {item_id}"
        context = {
            "requested": requested,
            "available": available,
            "shortfall": self.shortfall,
        }
        if item_id is not None:
            context["item_id"] = item_id
        if stock_id is not None:
            context["stock_id"] = stock_id
        super().__init__(
            f"Insufficient stock for {target}: requested {requested}, "
            f"only {available} available",
            **context,
        )


class NegativeQuantity(InsufficientStock):
    """A lot decrement would leave ``available_qty`` below zero."""


class Conflict(LedgerError):
    """A concurrent mutation invalidated a value read earlier in the call.

    Safe to retry: re-read the ledger and recompute.
    """

    status_code = 409


class ReferenceInUse(LedgerError):
    status_code = 409


class DuplicateItem(LedgerError):
    status_code = 409

    def __init__(self, name: str, brand):
        super().__init__(
            f"An item named {name!r} from brand {brand!r} already exists",
            name=name,
            brand=brand,
        )


class ValidationError(LedgerError):
    status_code = 422


class InternalError(LedgerError):
    status_code = 500
