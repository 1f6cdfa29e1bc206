"""
Daily job: demote restaurants whose paid promotion has ended.

Scheduled from cron, e.g. `0 0 * * * food-delivery-expire-promotions`.
"""
import asyncio

from food_delivery.db.session import AsyncSessionLocal, engine
from food_delivery.services.payments import PaymentService
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)


async def expire_promotions() -> int:
    async with AsyncSessionLocal() as session:
        return await PaymentService(session).expire_promotions()


async def _run() -> int:
    try:
        return await expire_promotions()
    finally:
        await engine.dispose()


def main() -> None:
    logger.info("Expire promotions job started")
    count = asyncio.run(_run())
    logger.info(f"Expire promotions job finished, {count} restaurants demoted")


if __name__ == "__main__":
    main()
