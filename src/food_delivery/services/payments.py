from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.config import settings
from food_delivery.crud import payment as payment_crud
from food_delivery.crud import restaurant as restaurant_crud
from food_delivery.models import Payment, User
from food_delivery.schemas.common import CoreOutput
from food_delivery.schemas.payment import (
    CreatePaymentInput,
    CreatePaymentOutput,
    GetPaymentsOutput,
    PaymentRead,
)
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentService:
    """Owner payments that promote a restaurant for a fixed number of days."""

    def __init__(self, db: AsyncSession, promotion_days: int | None = None):
        self.db = db
        self.promotion_days = promotion_days or settings.PROMOTION_DAYS

    async def create_payment(self, owner: User, payment_in: CreatePaymentInput) -> CreatePaymentOutput:
        try:
            restaurant = await restaurant_crud.find_and_check_restaurant(
                self.db, payment_in.restaurant_id, owner, "promote"
            )
            if isinstance(restaurant, CoreOutput):
                return CreatePaymentOutput(ok=False, error=restaurant.error)

            restaurant.is_promoted = True
            restaurant.promoted_until = datetime.now(timezone.utc) + timedelta(days=self.promotion_days)
            self.db.add(
                Payment(
                    transaction_id=payment_in.transaction_id,
                    user_id=owner.id,
                    restaurant_id=restaurant.id,
                )
            )
            await self.db.commit()
            logger.info(f"Restaurant {restaurant.id} promoted until {restaurant.promoted_until}")
            return CreatePaymentOutput(ok=True)
        except Exception:
            logger.exception("Could not create payment")
            await self.db.rollback()
            return CreatePaymentOutput(ok=False, error="Could not create payment")

    async def get_payments(self, owner: User) -> GetPaymentsOutput:
        try:
            payments = await payment_crud.get_payments_by_user(self.db, owner.id)
            return GetPaymentsOutput(ok=True, payments=[PaymentRead.model_validate(p) for p in payments])
        except Exception:
            logger.exception("Could not get payments")
            return GetPaymentsOutput(ok=False, error="Could not get payments")

    async def expire_promotions(self, now: datetime | None = None) -> int:
        """
        Clears the promotion of every restaurant whose promoted_until has passed.
        Returns how many restaurants were demoted.
        """
        now = now or datetime.now(timezone.utc)
        restaurants = await restaurant_crud.get_expired_promotions(self.db, now)
        for restaurant in restaurants:
            restaurant.is_promoted = False
            restaurant.promoted_until = None
        await self.db.commit()
        logger.info(f"Expired {len(restaurants)} restaurant promotions")
        return len(restaurants)
