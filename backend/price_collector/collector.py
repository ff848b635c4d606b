"""
One-shot price collection run.

Syncs configuration, checks every upcoming route once, then applies the
retention policy. Meant for cron or manual runs:

    python -m price_collector.collector
"""
import asyncio
import logging

from flight_tracker.config import settings
from flight_tracker.database import SessionLocal
from flight_tracker.services.flight_search_service import FlightSearchService
from flight_tracker.services.price_history_service import PriceHistoryService
from price_collector.providers import build_provider
from price_collector.scheduler import sync_configuration

# Configure logging natively for the scripts output
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("PriceCollector")


async def main() -> int:
    logger.info("Initializing price collection run...")
    sync_configuration(settings)

    provider = build_provider(settings)
    db = SessionLocal()
    try:
        search_service = FlightSearchService(db, provider, request_delay_seconds=settings.request_delay_seconds)
        success_count = await search_service.check_all_routes(settings.origin_airport)

        history_service = PriceHistoryService(db)
        deleted = history_service.cleanup_old_records(settings.retention_days)
        purged = history_service.reconcile_orphans()
    finally:
        db.close()

    logger.info("=" * 50)
    logger.info("PRICE COLLECTION RUN COMPLETE")
    logger.info(f"Routes checked successfully: {success_count}")
    logger.info(f"Old records deleted: {deleted}")
    logger.info(f"Orphaned records purged: {purged}")
    logger.info("=" * 50)
    return success_count


if __name__ == "__main__":
    asyncio.run(main())
