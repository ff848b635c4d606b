from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from flight_tracker.config import settings
from flight_tracker.database import SessionLocal, init_db
from flight_tracker.services.configuration_service import ConfigurationService
from price_collector.scheduler import PriceCheckScheduler
import logging

# Configure basic logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Scheduled flight price tracking for configured routes and date ranges",
    version="1.0.0"
)

# CORS: open in development, explicit origins in production
origins = ["*"]

if settings.env == "production":
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]

logger.info(f"CORS origins: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from flight_tracker.routers import destinations, prices, system, target_dates
app.include_router(target_dates.router)
app.include_router(destinations.router)
app.include_router(prices.router)
app.include_router(system.router)

scheduler = None

@app.on_event("startup")
async def startup_event():
    global scheduler
    logger.info("Initializing database and configuration...")
    init_db()
    db = SessionLocal()
    try:
        ConfigurationService(db, settings).initialize_all()
    except Exception as e:
        logger.error(f"Configuration sync failed during startup: {e}. Serving existing data.")
    finally:
        db.close()

    if settings.scheduler_enabled:
        scheduler = PriceCheckScheduler(settings, provider=prices.get_flight_provider())
        scheduler.start()
    else:
        logger.info("Price check scheduler disabled")

@app.on_event("shutdown")
async def shutdown_event():
    global scheduler
    if scheduler is not None:
        await scheduler.stop()
        scheduler = None

@app.get("/health")
def health_check():
    """
    Basic health check endpoint to verify service is running.
    """
    return {
        "status": "ok",
        "environment": settings.env,
        "scheduler_running": bool(scheduler and scheduler.is_running)
    }
