from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from food_delivery.api.deps import get_event_channel
from food_delivery.db.base import Base
from food_delivery.db.deps import get_async_session
from food_delivery.main import app
from food_delivery.models import Category, Dish, Restaurant, RoleEnum, User
from food_delivery.pubsub import InMemoryPubSub, PubSub


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def publisher():
    """Event channel double that records every publish."""
    return AsyncMock(spec=PubSub)


# --- data ---

async def create_user(db, email, role):
    user = User(email=email, role=role, verified=False)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def customer(db):
    return await create_user(db, "client@example.com", RoleEnum.Client)


@pytest.fixture
async def other_customer(db):
    return await create_user(db, "client2@example.com", RoleEnum.Client)


@pytest.fixture
async def owner(db):
    return await create_user(db, "owner@example.com", RoleEnum.Owner)


@pytest.fixture
async def other_owner(db):
    return await create_user(db, "owner2@example.com", RoleEnum.Owner)


@pytest.fixture
async def driver(db):
    return await create_user(db, "driver@example.com", RoleEnum.Delivery)


@pytest.fixture
async def other_driver(db):
    return await create_user(db, "driver2@example.com", RoleEnum.Delivery)


async def create_restaurant(db, owner, name="Pizza Place", category_name="pizza"):
    category = Category(name=category_name, slug=category_name)
    restaurant = Restaurant(
        name=name,
        cover_img="https://img.example.com/cover.png",
        address="1 Main St",
        lat=37.5,
        lng=127.0,
        owner_id=owner.id,
        category=category,
    )
    db.add(restaurant)
    await db.commit()
    return restaurant


async def create_dish(db, restaurant, name="Margherita", price="10.50", options=None):
    dish = Dish(
        name=name,
        price=Decimal(price),
        description="Tomato and cheese",
        restaurant_id=restaurant.id,
        options=options,
    )
    db.add(dish)
    await db.commit()
    return dish


@pytest.fixture
async def restaurant(db, owner):
    return await create_restaurant(db, owner)


@pytest.fixture
async def other_restaurant(db, other_owner):
    return await create_restaurant(db, other_owner, name="Burger Barn", category_name="burgers")


@pytest.fixture
async def dish(db, restaurant):
    return await create_dish(
        db,
        restaurant,
        options=[
            {"name": "Size", "choices": [{"name": "S"}, {"name": "L", "extra": 2}]},
            {"name": "Extra cheese", "extra": 1},
        ],
    )


@pytest.fixture
async def second_dish(db, restaurant):
    return await create_dish(db, restaurant, name="Calzone", price="7.25")


@pytest.fixture
async def foreign_dish(db, other_restaurant):
    return await create_dish(db, other_restaurant, name="Cheeseburger", price="9.00")


# --- http ---

@pytest.fixture
def event_channel():
    return InMemoryPubSub()


@pytest.fixture
async def client(session_factory, event_channel):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_event_channel] = lambda: event_channel
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


def as_user(user):
    return {"X-User-Id": str(user.id)}
