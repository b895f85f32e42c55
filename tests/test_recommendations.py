from app.models import RestaurantStatus, UserStatus
from app.services.recommendations import score_restaurant
from conftest import auth_headers


# =============================================================================
# SCORING
# =============================================================================

def test_score_components():
    assert score_restaurant("Quiet Place", [], 0, None, [], False) == 0
    assert score_restaurant("Chinese Dragon", [], 0, "chinese", [], False) == 50
    assert score_restaurant("X", ["Veg Rice", "Beef Curry", "VEG Roti"], 0, None, ["veg"], False) == 20
    assert score_restaurant("X", [], 55, None, [], False) == 5.5
    assert score_restaurant("X", [], 10_000, None, [], False) == 30
    assert score_restaurant("X", [], 0, None, [], True) == 15


def test_item_matching_several_preferences_counts_once():
    score = score_restaurant("X", ["Vegan Spicy Curry"], 0, None, ["vegan", "spicy"], False)

    assert score == 10


def test_favorite_cuisine_match_raises_score_by_50():
    args = (["Fried Rice"], 40, ["spicy"], True)

    without = score_restaurant("Golden Wok", args[0], args[1], "Italian", args[2], args[3])
    with_match = score_restaurant("Golden Wok Chinese", args[0], args[1], "Chinese", args[2], args[3])

    assert with_match - without == 50


# =============================================================================
# ENDPOINT
# =============================================================================

async def test_ranked_by_preferences(client, market):
    _, plain = await market.seller(restaurant_name="Plain Diner")
    _, chinese = await market.seller(restaurant_name="Chinese Garden")
    _, busy = await market.seller(restaurant_name="Busy Bistro")
    await market.menu_item(busy, name="Burger", orders_count=200)
    await market.menu_item(plain, name="Veg Soup")
    customer = await market.customer(profile={
        "favorite_cuisine": "chinese",
        "dietary_preferences": ["veg"],
    })

    response = await client.get("/api/customer/recommendations", headers=auth_headers(customer))

    assert response.status_code == 200
    ranked = [(r["name"], r["score"]) for r in response.json()]
    assert ranked == [("Chinese Garden", 50), ("Busy Bistro", 20), ("Plain Diner", 10)]
    assert chinese.id == response.json()[0]["id"]


async def test_without_profile_newest_first_unscored(client, market):
    _, first = await market.seller(restaurant_name="First")
    _, second = await market.seller(restaurant_name="Second")
    await market.seller(status=UserStatus.PENDING, restaurant_name="Not Yet Approved")
    customer = await market.customer()

    response = await client.get("/api/customer/recommendations", headers=auth_headers(customer))

    body = response.json()
    assert [r["id"] for r in body] == [second.id, first.id]
    assert all(r["score"] is None for r in body)


async def test_ties_keep_newest_first(client, market):
    _, older = await market.seller(restaurant_name="Alpha")
    _, newer = await market.seller(restaurant_name="Beta")
    customer = await market.customer(profile={"favorite_cuisine": "thai"})

    body = (await client.get("/api/customer/recommendations", headers=auth_headers(customer))).json()

    assert [r["id"] for r in body] == [newer.id, older.id]
    assert [r["score"] for r in body] == [0, 0]


async def test_inactive_restaurants_are_not_recommended(client, market):
    seller, _ = await market.seller(restaurant_name="Open")
    await market.restaurant(seller, name="Closed", status=RestaurantStatus.INACTIVE)
    customer = await market.customer(profile={})

    body = (await client.get("/api/customer/recommendations", headers=auth_headers(customer))).json()

    assert [r["name"] for r in body] == ["Open"]


# =============================================================================
# ML SUGGESTIONS
# =============================================================================

async def order_once(client, market, customer, names):
    _, restaurant = await market.seller(restaurant_name="ML Kitchen")
    lines = []
    for name in names:
        item = await market.menu_item(restaurant, name=name)
        lines.append({"menuItemId": item.id, "qty": 1})
    response = await client.post(
        "/api/customer/order",
        headers=auth_headers(customer),
        json={"restaurantId": restaurant.id, "items": lines},
    )
    assert response.status_code == 201


async def test_ml_recommendations_use_ordered_items(client, market, recommender):
    customer = await market.customer()
    await order_once(client, market, customer, ["Kottu", "Hopper", "Kottu"])
    recommender.data = {"recommended_food": ["a", "b", "c", "d", "e", "f", "g"]}

    response = await client.get("/api/customer/recommendations/ml", headers=auth_headers(customer))

    assert response.status_code == 200
    assert response.json()["recommended"] == ["a", "b", "c", "d", "e"]
    assert recommender.payloads == [{"orders": ["Kottu", "Hopper"]}]


async def test_ml_scalar_answer_becomes_list(client, market, recommender):
    customer = await market.customer()
    await order_once(client, market, customer, ["Lamprais"])
    recommender.data = {"recommended_food": "Biryani"}

    body = (await client.get("/api/customer/recommendations/ml", headers=auth_headers(customer))).json()

    assert body["recommended"] == ["Biryani"]


async def test_ml_without_orders_is_400(client, market, recommender):
    customer = await market.customer()

    response = await client.get("/api/customer/recommendations/ml", headers=auth_headers(customer))

    assert response.status_code == 400
    assert recommender.payloads == []


async def test_ml_failure_degrades(client, market, recommender):
    customer = await market.customer()
    await order_once(client, market, customer, ["Kottu"])
    recommender.fail = True

    response = await client.get("/api/customer/recommendations/ml", headers=auth_headers(customer))

    assert response.status_code == 200
    assert response.json()["recommended"] == []
    assert response.json()["note"]
