"""
Jewelry Repair Backend - Main Application

Dashboard analytics, repair pricing and status metadata for the shop's
repair workflow.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import os
import logging

load_dotenv()

from app.routers import analytics, payments, pricing, settings, statuses
from app.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    logger.info("Starting Jewelry Repair Backend...")
    start_scheduler()
    yield
    # Shutdown
    logger.info("Shutting down Jewelry Repair Backend...")
    stop_scheduler()


# Initialize FastAPI app
app = FastAPI(
    title="Jewelry Repair Backend",
    description="Repair dashboards, pricing and status metadata",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware (configure for your domains)
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(pricing.router, prefix="/api/pricing", tags=["Pricing"])
app.include_router(settings.router, prefix="/api/settings", tags=["Admin Settings"])
app.include_router(statuses.router, prefix="/api/statuses", tags=["Statuses"])
app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])


@app.get("/")
def read_root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "Jewelry Repair Backend",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "shop_api_url": os.getenv("SHOP_API_URL", "http://localhost:3000"),
        "shop_api_auth_configured": bool(os.getenv("SHOP_API_TOKEN")),
        "settings_store_configured": bool(os.getenv("SUPABASE_URL")),
        "feed_refresh_enabled": os.getenv("FEED_REFRESH_ENABLED", "true").lower() == "true"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
