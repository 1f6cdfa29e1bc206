from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from conftest import create_restaurant
from food_delivery.models import Payment, Restaurant
from food_delivery.schemas.payment import CreatePaymentInput
from food_delivery.services.payments import PaymentService


class TestCreatePayment:

    async def test_promotes_restaurant(self, db, owner, restaurant):
        before = datetime.now(timezone.utc)
        output = await PaymentService(db, promotion_days=7).create_payment(
            owner, CreatePaymentInput(transaction_id="tx-1", restaurant_id=restaurant.id)
        )
        assert output.ok is True

        refreshed = await db.get(Restaurant, restaurant.id)
        assert refreshed.is_promoted is True
        assert refreshed.promoted_until >= before + timedelta(days=7)

        payments = (await db.execute(select(Payment))).scalars().all()
        assert [(p.transaction_id, p.user_id, p.restaurant_id) for p in payments] == [
            ("tx-1", owner.id, restaurant.id)
        ]

    async def test_foreign_restaurant(self, db, other_owner, restaurant):
        output = await PaymentService(db).create_payment(
            other_owner, CreatePaymentInput(transaction_id="tx-2", restaurant_id=restaurant.id)
        )
        assert output.ok is False
        assert output.error == "You cannot promote a restaurant that you don't own"

    async def test_unknown_restaurant(self, db, owner):
        output = await PaymentService(db).create_payment(
            owner, CreatePaymentInput(transaction_id="tx-3", restaurant_id=999)
        )
        assert output.error == "Restaurant not found"

    async def test_get_payments(self, db, owner, other_owner, restaurant, other_restaurant):
        service = PaymentService(db)
        await service.create_payment(owner, CreatePaymentInput(transaction_id="a", restaurant_id=restaurant.id))
        await service.create_payment(
            other_owner, CreatePaymentInput(transaction_id="b", restaurant_id=other_restaurant.id)
        )

        output = await service.get_payments(owner)
        assert output.ok is True
        assert [p.transaction_id for p in output.payments] == ["a"]


class TestExpirePromotions:

    async def test_only_lapsed_promotions_are_cleared(self, db, owner):
        now = datetime.now(timezone.utc)
        lapsed = await create_restaurant(db, owner, name="Lapsed", category_name="a")
        running = await create_restaurant(db, owner, name="Running", category_name="b")
        lapsed.is_promoted, lapsed.promoted_until = True, now - timedelta(days=1)
        running.is_promoted, running.promoted_until = True, now + timedelta(days=1)
        await db.commit()

        count = await PaymentService(db).expire_promotions(now=now)
        assert count == 1

        assert (await db.get(Restaurant, lapsed.id)).is_promoted is False
        assert (await db.get(Restaurant, lapsed.id)).promoted_until is None
        assert (await db.get(Restaurant, running.id)).is_promoted is True

    async def test_nothing_to_expire(self, db, restaurant):
        assert await PaymentService(db).expire_promotions() == 0
