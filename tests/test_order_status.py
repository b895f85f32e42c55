import pytest

from app.core.errors import IllegalTransition
from app.models import Order, OrderStatus, UserStatus
from app.services import orders as order_service
from conftest import auth_headers


@pytest.fixture
async def placed(client, market):
    seller, restaurant = await market.seller()
    item = await market.menu_item(restaurant)
    customer = await market.customer()
    response = await client.post(
        "/api/customer/order",
        headers=auth_headers(customer),
        json={"restaurantId": restaurant.id, "items": [{"menuItemId": item.id, "qty": 1}]},
    )
    return seller, response.json()["order"]["id"]


async def set_status(client, seller, order_id, status):
    return await client.put(
        f"/api/seller/orders/{order_id}/status",
        headers=auth_headers(seller),
        json={"status": status},
    )


async def test_seller_moves_order_through_lifecycle(client, market, placed):
    seller, order_id = placed

    for status in ["CONFIRMED", "PREPARING", "READY", "COMPLETED"]:
        response = await set_status(client, seller, order_id, status)
        assert response.status_code == 200
        assert response.json()["status"] == status

    assert (await market.get(Order, order_id)).status == OrderStatus.COMPLETED


async def test_transitions_are_unconstrained_by_default(client, placed):
    seller, order_id = placed

    assert (await set_status(client, seller, order_id, "COMPLETED")).status_code == 200
    response = await set_status(client, seller, order_id, "PENDING")

    assert response.status_code == 200
    assert response.json()["status"] == "PENDING"


async def test_strict_mode_rejects_illegal_moves(client, market, placed, monkeypatch):
    monkeypatch.setattr(order_service.settings, "strict_order_transitions", True)
    seller, order_id = placed

    skip = await set_status(client, seller, order_id, "COMPLETED")
    assert skip.status_code == 409
    assert skip.json()["error"] == "IllegalTransition"
    assert (await market.get(Order, order_id)).status == OrderStatus.PENDING

    assert (await set_status(client, seller, order_id, "CONFIRMED")).status_code == 200


async def test_other_seller_cannot_touch_order(client, market, placed):
    _, order_id = placed
    intruder, _ = await market.seller(restaurant_name="Other Place")

    response = await set_status(client, intruder, order_id, "CANCELLED")

    assert response.status_code == 404
    assert response.json()["detail"] == "Order not found"
    assert (await market.get(Order, order_id)).status == OrderStatus.PENDING


async def test_seller_without_restaurant_gets_404(client, market, placed):
    _, order_id = placed
    seller, _ = await market.seller(restaurant_name=None)

    response = await set_status(client, seller, order_id, "CONFIRMED")

    assert response.status_code == 404
    assert response.json()["detail"] == "Restaurant not found"


async def test_pending_seller_cannot_change_status(client, market, placed):
    _, order_id = placed
    pending, _ = await market.seller(status=UserStatus.PENDING, restaurant_name="Waiting")

    response = await set_status(client, pending, order_id, "CONFIRMED")

    assert response.status_code == 403
    assert "PENDING" in response.json()["detail"]


async def test_unknown_status_is_rejected(client, placed):
    seller, order_id = placed

    response = await set_status(client, seller, order_id, "SHIPPED")

    assert response.status_code == 400


async def test_seller_lists_restaurant_orders_with_customer(client, market, placed):
    seller, order_id = placed

    response = await client.get("/api/seller/orders", headers=auth_headers(seller))

    assert response.status_code == 200
    rows = response.json()
    assert [r["id"] for r in rows] == [order_id]
    assert rows[0]["customer"]["email"].startswith("customer")


def test_transition_function_policy(monkeypatch):
    order = Order(status=OrderStatus.READY)

    order_service.transition_order(order, OrderStatus.PENDING)
    assert order.status == OrderStatus.PENDING

    monkeypatch.setattr(order_service.settings, "strict_order_transitions", True)
    order_service.transition_order(order, OrderStatus.CONFIRMED)
    assert order.status == OrderStatus.CONFIRMED
    with pytest.raises(IllegalTransition):
        order_service.transition_order(order, OrderStatus.READY)
