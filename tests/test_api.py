import asyncio
import time
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.websockets import WebSocketDisconnect

from conftest import as_user
from food_delivery.api.deps import get_event_channel
from food_delivery.db.deps import get_async_session
from food_delivery.main import app
from food_delivery.models import RoleEnum, User
from food_delivery.pubsub import InMemoryPubSub, Topic


class TestAuth:

    async def test_missing_header(self, client):
        response = await client.get("/orders/")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    async def test_unknown_user(self, client):
        response = await client.get("/orders/", headers={"X-User-Id": "404"})
        assert response.status_code == 401

    async def test_wrong_role(self, client, owner, restaurant, dish):
        response = await client.post(
            "/orders/",
            json={"restaurant_id": restaurant.id, "items": [{"dish_id": dish.id}]},
            headers=as_user(owner),
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Forbidden resource"

    async def test_client_cannot_take(self, client, customer):
        response = await client.post("/orders/1/take", headers=as_user(customer))
        assert response.status_code == 403


class TestOrderFlow:

    async def test_order_lifecycle(self, client, event_channel, customer, owner, driver, restaurant, dish):
        updates = await event_channel.subscribe(Topic.NEW_ORDER_UPDATES)

        response = await client.post(
            "/orders/",
            json={"restaurant_id": restaurant.id, "items": [{"dish_id": dish.id, "options": [{"name": "Size", "choice": "S"}]}]},
            headers=as_user(customer),
        )
        body = response.json()
        assert response.status_code == 200
        assert body["ok"] is True
        order_id = body["order_id"]

        response = await client.get("/orders/", params={"status": "Pending"}, headers=as_user(owner))
        assert [o["id"] for o in response.json()["orders"]] == [order_id]

        for status in ("Cooking", "Cooked"):
            response = await client.patch(f"/orders/{order_id}", json={"status": status}, headers=as_user(owner))
            assert response.json() == {"ok": True, "error": None}

        response = await client.post(f"/orders/{order_id}/take", headers=as_user(driver))
        assert response.json()["ok"] is True

        for status in ("PickedUp", "Delivered"):
            response = await client.patch(f"/orders/{order_id}", json={"status": status}, headers=as_user(driver))
            assert response.json()["ok"] is True

        response = await client.get(f"/orders/{order_id}", headers=as_user(customer))
        order = response.json()["order"]
        assert order["status"] == "Delivered"
        assert order["driver_id"] == driver.id
        assert order["total"] == 10.5
        assert order["items"][0]["options"] == [{"name": "Size", "choice": "S"}]

        statuses = [
            (await asyncio.wait_for(updates.__anext__(), timeout=1))["order_updates"]["status"] for _ in range(5)
        ]
        assert statuses == ["Cooking", "Cooked", "Cooked", "PickedUp", "Delivered"]

    async def test_owner_cannot_deliver(self, client, customer, owner, restaurant, dish):
        response = await client.post(
            "/orders/",
            json={"restaurant_id": restaurant.id, "items": [{"dish_id": dish.id}]},
            headers=as_user(customer),
        )
        order_id = response.json()["order_id"]

        response = await client.patch(f"/orders/{order_id}", json={"status": "Delivered"}, headers=as_user(owner))
        assert response.status_code == 200
        assert response.json() == {"ok": False, "error": "You cannot do that"}

    async def test_invalid_status_value(self, client, owner):
        response = await client.patch("/orders/1", json={"status": "Eaten"}, headers=as_user(owner))
        assert response.status_code == 422

    async def test_empty_order(self, client, customer, restaurant):
        response = await client.post(
            "/orders/", json={"restaurant_id": restaurant.id, "items": []}, headers=as_user(customer)
        )
        assert response.status_code == 422

    async def test_current_ride(self, client, customer, driver, restaurant, dish):
        response = await client.get("/orders/current", headers=as_user(driver))
        assert response.json() == {"ok": False, "error": "Order not found", "order": None}

        response = await client.post(
            "/orders/",
            json={"restaurant_id": restaurant.id, "items": [{"dish_id": dish.id}]},
            headers=as_user(customer),
        )
        order_id = response.json()["order_id"]
        await client.post(f"/orders/{order_id}/take", headers=as_user(driver))

        response = await client.get("/orders/current", headers=as_user(driver))
        body = response.json()
        assert body["ok"] is True
        assert body["order"]["id"] == order_id

    async def test_current_ride_drivers_only(self, client, customer):
        response = await client.get("/orders/current", headers=as_user(customer))
        assert response.status_code == 403


class TestCatalogApi:

    async def test_owner_builds_restaurant(self, client, owner):
        response = await client.post(
            "/restaurants",
            json={
                "name": "Dumpling House",
                "cover_img": "https://img.example.com/d.png",
                "address": "9 Harbour Rd",
                "lat": 22.3,
                "lng": 114.2,
                "category_name": "Chinese",
            },
            headers=as_user(owner),
        )
        restaurant_id = response.json()["restaurant_id"]

        response = await client.post(
            "/dishes",
            json={"restaurant_id": restaurant_id, "name": "Har gow", "price": "6.50"},
            headers=as_user(owner),
        )
        assert response.json()["ok"] is True

        response = await client.get(f"/restaurants/{restaurant_id}")
        assert [d["name"] for d in response.json()["restaurant"]["menu"]] == ["Har gow"]

        response = await client.get("/restaurants/search", params={"query": "dumpling"})
        assert response.json()["total_results"] == 1

        response = await client.get("/categories/chinese")
        assert [r["id"] for r in response.json()["restaurants"]] == [restaurant_id]

        response = await client.get("/restaurants/mine", headers=as_user(owner))
        assert [r["id"] for r in response.json()["restaurants"]] == [restaurant_id]

    async def test_partial_edit(self, client, owner, restaurant):
        response = await client.patch(
            f"/restaurants/{restaurant.id}", json={"address": "2 Main St"}, headers=as_user(owner)
        )
        assert response.json()["ok"] is True

        response = await client.get(f"/restaurants/{restaurant.id}")
        assert response.json()["restaurant"]["address"] == "2 Main St"
        assert response.json()["restaurant"]["name"] == "Pizza Place"

    async def test_promotion(self, client, owner, restaurant):
        response = await client.post(
            "/payments/", json={"transaction_id": "tx-9", "restaurant_id": restaurant.id}, headers=as_user(owner)
        )
        assert response.json()["ok"] is True

        response = await client.get("/payments/", headers=as_user(owner))
        assert [p["transaction_id"] for p in response.json()["payments"]] == ["tx-9"]


class TestUsersApi:

    async def test_create_account_and_me(self, client):
        response = await client.post("/users/", json={"email": "rider@example.com", "role": "Delivery"})
        user_id = response.json()["user_id"]

        response = await client.get("/users/me", headers={"X-User-Id": str(user_id)})
        assert response.json()["role"] == "Delivery"

    async def test_invalid_email(self, client):
        response = await client.post("/users/", json={"email": "not-an-email", "role": "Client"})
        assert response.status_code == 422

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json()["database"] == "ok"

    async def test_no_anonymous_user_listing(self, client, customer, owner):
        response = await client.get("/users/")
        assert response.status_code == 405
        assert customer.email not in response.text
        assert owner.email not in response.text

    async def test_profile_requires_identity(self, client, owner):
        response = await client.get(f"/users/{owner.id}")
        assert response.status_code == 401

    async def test_user_profile(self, client, customer, owner):
        response = await client.get(f"/users/{owner.id}", headers=as_user(customer))
        assert response.json()["user"]["email"] == owner.email

        response = await client.get("/users/999", headers=as_user(customer))
        assert response.json()["error"] == "User not found"

    async def test_edit_profile(self, client, customer, owner):
        response = await client.patch("/users/me", json={"email": owner.email}, headers=as_user(customer))
        assert response.json()["error"] == "There is a user with that email already"

        response = await client.patch("/users/me", json={"email": "new@example.com"}, headers=as_user(customer))
        assert response.json() == {"ok": True, "error": None}

        response = await client.get("/users/me", headers=as_user(customer))
        assert response.json()["email"] == "new@example.com"
        assert response.json()["verified"] is False

    async def test_addresses(self, client, customer, other_customer):
        created = []
        for name in ("Home", "Work"):
            response = await client.post(
                "/users/me/addresses",
                json={"address": name, "lat": 37.5, "lng": 127.0},
                headers=as_user(customer),
            )
            created.append(response.json()["address_id"])
        home, work = created

        response = await client.put(f"/users/me/addresses/{work}/selected", headers=as_user(customer))
        assert response.json()["ok"] is True

        response = await client.get("/users/me/addresses", headers=as_user(customer))
        body = response.json()
        assert body["total_results"] == 2
        assert [(a["address"], a["selected"]) for a in body["addresses"]] == [("Home", False), ("Work", True)]

        response = await client.delete(f"/users/me/addresses/{home}", headers=as_user(other_customer))
        assert response.json()["error"] == "You cannot delete an address that you don't own"

        response = await client.delete(f"/users/me/addresses/{home}", headers=as_user(customer))
        assert response.json()["ok"] is True

        response = await client.get("/users/me/addresses", headers=as_user(customer))
        assert [a["id"] for a in response.json()["addresses"]] == [work]

    async def test_addresses_are_for_clients(self, client, owner):
        response = await client.get("/users/me/addresses", headers=as_user(owner))
        assert response.status_code == 403


# ============================================================================
# order feeds
# ============================================================================

class TestOrderFeed:

    @pytest.fixture
    def feed_client(self):
        users = {
            1: User(id=1, email="owner@example.com", role=RoleEnum.Owner),
            2: User(id=2, email="driver@example.com", role=RoleEnum.Delivery),
        }
        session = AsyncMock(spec=AsyncSession)
        session.get.side_effect = lambda model, user_id: users.get(user_id)
        channel = InMemoryPubSub()

        async def override_session():
            yield session

        app.dependency_overrides[get_async_session] = override_session
        app.dependency_overrides[get_event_channel] = lambda: channel
        with TestClient(app) as test_client:
            yield test_client, channel
        app.dependency_overrides.clear()

    @staticmethod
    def wait_for_subscriber(channel, topic):
        deadline = time.monotonic() + 2
        while channel.subscriber_count(topic) == 0:
            assert time.monotonic() < deadline, "feed never subscribed"
            time.sleep(0.01)

    def test_owner_gets_own_pending_orders(self, feed_client):
        test_client, channel = feed_client
        with test_client.websocket_connect("/orders/feed/pending", headers={"X-User-Id": "1"}) as ws:
            self.wait_for_subscriber(channel, Topic.NEW_PENDING_ORDER)
            publish = test_client.portal.call
            publish(channel.publish, Topic.NEW_PENDING_ORDER, {"pending_orders": {"id": 7}, "owner_id": 99})
            publish(channel.publish, Topic.NEW_PENDING_ORDER, {"pending_orders": {"id": 8}, "owner_id": 1})
            assert ws.receive_json() == {"pending_orders": {"id": 8}, "owner_id": 1}

    def test_driver_gets_cooked_orders(self, feed_client):
        test_client, channel = feed_client
        with test_client.websocket_connect("/orders/feed/cooked", headers={"X-User-Id": "2"}) as ws:
            self.wait_for_subscriber(channel, Topic.NEW_COOKED_ORDER)
            test_client.portal.call(channel.publish, Topic.NEW_COOKED_ORDER, {"cooked_orders": {"id": 3}})
            assert ws.receive_json()["cooked_orders"]["id"] == 3

    @pytest.mark.parametrize(
        "path,headers",
        [
            ("/orders/feed/cooked", {"X-User-Id": "1"}),
            ("/orders/feed/pending", {"X-User-Id": "2"}),
            ("/orders/feed/pending", {}),
            ("/orders/feed/pending", {"X-User-Id": "3"}),
            ("/orders/feed/unknown", {"X-User-Id": "1"}),
        ],
    )
    def test_rejected(self, feed_client, path, headers):
        test_client, _ = feed_client
        with pytest.raises(WebSocketDisconnect) as exc:
            with test_client.websocket_connect(path, headers=headers):
                pass
        assert exc.value.code == 1008
