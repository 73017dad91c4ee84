import logging
import os
from datetime import datetime

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import Base, engine
from exceptions import LedgerError
from crud.api.v1.endpoints import inventory, stock, purchase, release, service, invoice, reports
import models  # noqa: F401  registers every table on Base.metadata

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Service Shop Inventory API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def exception_handling(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception("Error processing %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": f"Internal server error occurred: {str(e)}"}
        )

@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

Base.metadata.create_all(bind=engine)


app.include_router(inventory.router, prefix="/api/v1/inventory", tags=["inventory"])
app.include_router(stock.router, prefix="/api/v1/stock", tags=["stock"])
app.include_router(purchase.router, prefix="/api/v1/purchases", tags=["purchases"])
app.include_router(release.router, prefix="/api/v1/releases", tags=["releases"])
app.include_router(service.router, prefix="/api/v1/service-records", tags=["service-records"])
app.include_router(invoice.router, prefix="/api/v1/invoice", tags=["invoice"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])


@app.get("/health", tags=["system"])
def health_check():
    return {"status": "ok", "timestamp": datetime.now().isoformat()}

if __name__ == '__main__':
    port = int(os.environ.get("PORT", 8000))

    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=False)
