"""
InvenHub - Backend API
Point-of-sale and inventory management for SafariFlow stores
"""
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from invenhub.core.config import settings
from invenhub.core.database import get_db_connection_dict_with_retry
from invenhub.api import (
    analytics,
    auth,
    inventory,
    notifications,
    products,
    purchase_orders,
    reorder,
    sales,
    suppliers,
    users,
)
from invenhub.services.reorder_scheduler import reorder_scheduler

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start and stop the auto-reorder scheduler with the application"""
    logger.info(f"Starting {settings.API_TITLE} {settings.API_VERSION}")

    if settings.AUTO_REORDER_ENABLED:
        reorder_scheduler.start()
    else:
        logger.info("Auto-reorder scheduler disabled")

    yield

    await reorder_scheduler.stop()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Include API routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(sales.router, prefix="/api/sales", tags=["Sales"])
app.include_router(purchase_orders.router, prefix="/api/purchase-orders", tags=["Purchase Orders"])
app.include_router(suppliers.router, prefix="/api/suppliers", tags=["Suppliers"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(inventory.router, prefix="/api/inventory", tags=["Inventory"])
app.include_router(reorder.router, prefix="/api/reorder", tags=["Auto Reorder"])


@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": "InvenHub API",
        "status": "online",
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION
    }


@app.get("/health")
async def health():
    """Health check endpoint for monitoring - tests database connectivity"""
    start_time = time.time()

    db_status = "unknown"
    db_latency_ms = None
    db_error = None

    try:
        conn = get_db_connection_dict_with_retry(max_retries=1, retry_delay=0.5)
        cursor = conn.cursor()

        db_start = time.time()
        cursor.execute("SELECT 1")
        cursor.fetchone()
        db_latency_ms = round((time.time() - db_start) * 1000, 2)

        cursor.close()
        conn.close()
        db_status = "connected"
    except Exception as e:
        db_status = "disconnected"
        db_error = str(e)

    total_latency_ms = round((time.time() - start_time) * 1000, 2)

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": "invenhub-api",
        "version": settings.API_VERSION,
        "database": {
            "status": db_status,
            "latency_ms": db_latency_ms,
            "error": db_error
        },
        "auto_reorder": {
            "enabled": settings.AUTO_REORDER_ENABLED,
            "running": reorder_scheduler.is_running
        },
        "total_latency_ms": total_latency_ms
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("invenhub.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=False)
