from contextlib import asynccontextmanager

from fastapi import FastAPI

from food_delivery.api import health, users
from food_delivery.api.routes.orders import router as orders_router
from food_delivery.api.routes.payments import router as payments_router
from food_delivery.api.routes.restaurants import router as restaurants_router
from food_delivery.pubsub import get_pubsub
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application started")
    yield
    await get_pubsub().close()
    logger.info("Application stopped")


app = FastAPI(title="Food Delivery", lifespan=lifespan)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(restaurants_router)
app.include_router(orders_router)
app.include_router(payments_router)
