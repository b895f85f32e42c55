from decimal import Decimal

from app.models import Order, OrderStatus, UserStatus
from conftest import auth_headers


async def order(client, customer, restaurant, item, qty=1):
    response = await client.post(
        "/api/customer/order",
        headers=auth_headers(customer),
        json={"restaurantId": restaurant.id, "items": [{"menuItemId": item.id, "qty": qty}]},
    )
    assert response.status_code == 201
    return response.json()["order"]


async def test_platform_counts(client, market):
    admin = await market.admin()
    _, restaurant = await market.seller()
    item = await market.menu_item(restaurant)
    customer = await market.customer()
    await order(client, customer, restaurant, item)

    response = await client.get("/api/admin/analytics", headers=auth_headers(admin))

    assert response.json() == {"totalUsers": 3, "totalRestaurants": 1, "totalOrders": 1}


async def test_user_distribution_chart(client, market):
    admin = await market.admin()
    await market.seller()
    await market.customer()
    await market.customer()

    body = (await client.get("/api/admin/analytics/user-distribution", headers=auth_headers(admin))).json()

    counts = dict(zip(body["labels"], body["datasets"][0]["data"]))
    assert counts == {"ADMIN": 1, "SELLER": 1, "CUSTOMER": 2}
    assert body["datasets"][0]["label"] == "Users"


async def test_fast_moving_restaurants(client, market):
    admin = await market.admin()
    _, slow = await market.seller(restaurant_name="Slow")
    _, fast = await market.seller(restaurant_name="Fast")
    await market.seller(restaurant_name="Empty")
    customer = await market.customer()
    slow_item = await market.menu_item(slow)
    fast_item = await market.menu_item(fast)
    await order(client, customer, slow, slow_item)
    for _ in range(3):
        await order(client, customer, fast, fast_item)

    body = (await client.get("/api/admin/analytics/fast-moving-restaurants", headers=auth_headers(admin))).json()

    assert body == [
        {"restaurant": "Fast", "orders": 3},
        {"restaurant": "Slow", "orders": 1},
        {"restaurant": "Empty", "orders": 0},
    ]


async def test_revenue_trend_counts_completed_orders_only(client, market, session_maker):
    admin = await market.admin()
    seller, restaurant = await market.seller()
    item = await market.menu_item(restaurant, price="500.00", stock=50)
    customer = await market.customer()
    done = await order(client, customer, restaurant, item, qty=2)
    also_done = await order(client, customer, restaurant, item, qty=1)
    await order(client, customer, restaurant, item, qty=4)

    async with session_maker() as session:
        for order_id in (done["id"], also_done["id"]):
            row = await session.get(Order, order_id)
            row.status = OrderStatus.COMPLETED
        await session.commit()

    body = (await client.get("/api/admin/analytics/revenue-trend", headers=auth_headers(admin))).json()

    assert len(body) == 1
    assert len(body[0]["month"]) == 7
    assert Decimal(body[0]["revenue"]) == Decimal("1500.00")


async def test_orders_listing_includes_parties(client, market):
    admin = await market.admin()
    seller, restaurant = await market.seller(restaurant_name="Curry Leaf")
    item = await market.menu_item(restaurant)
    customer = await market.customer()
    placed = await order(client, customer, restaurant, item)

    body = (await client.get("/api/admin/orders", headers=auth_headers(admin))).json()

    assert body[0]["id"] == placed["id"]
    assert body[0]["customerEmail"] == customer.email
    assert body[0]["restaurantName"] == "Curry Leaf"
    assert body[0]["sellerEmail"] == seller.email


async def test_restaurants_listing_includes_seller(client, market):
    admin = await market.admin()
    seller, restaurant = await market.seller(status=UserStatus.PENDING, restaurant_name="Queued")

    body = (await client.get("/api/admin/restaurants", headers=auth_headers(admin))).json()

    assert body[0]["id"] == restaurant.id
    assert body[0]["status"] == "INACTIVE"
    assert body[0]["sellerEmail"] == seller.email
    assert body[0]["sellerStatus"] == "PENDING"


async def test_logs_listing_newest_first(client, market):
    admin = await market.admin()
    seller, _ = await market.seller(status=UserStatus.PENDING)
    headers = auth_headers(admin)
    await client.put(f"/api/admin/users/{seller.id}/approve", headers=headers)
    await client.put(f"/api/admin/users/{seller.id}/suspend", headers=headers)

    body = (await client.get("/api/admin/logs", headers=headers)).json()

    assert [row["action"] for row in body] == ["Suspended User", "Approved Seller"]
    assert body[0]["adminEmail"] == admin.email
    assert body[0]["targetUserEmail"] == seller.email


async def test_users_listing_hides_secrets(client, market):
    admin = await market.admin()
    await market.customer()

    body = (await client.get("/api/admin/users", headers=auth_headers(admin))).json()

    assert len(body) == 2
    assert all("password" not in row and "reset_token" not in row for row in body)


async def test_admin_routes_require_admin(client, market):
    customer = await market.customer()

    for path in ["/api/admin/users", "/api/admin/analytics", "/api/admin/logs", "/api/admin/customers"]:
        response = await client.get(path, headers=auth_headers(customer))
        assert response.status_code == 403


async def test_health_and_root(client):
    root = await client.get("/")
    health = await client.get("/health")

    assert root.status_code == 200
    assert health.status_code == 200
    assert health.json()["database"] == "healthy"
    assert health.json()["prediction_service"] == "healthy"
    assert health.json()["status"] == "operational"


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json()["success"] is False
