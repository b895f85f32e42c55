from sqlalchemy import select

from app.models import AdminLog, Customer, User, UserStatus
from conftest import auth_headers


async def test_profile_create_read_update_delete(client, market):
    customer = await market.customer()
    headers = auth_headers(customer)

    missing = await client.get("/api/customer/profile", headers=headers)
    assert missing.status_code == 404

    created = await client.post("/api/customer/profile", headers=headers, json={
        "age": 30,
        "gender": "Male",
        "dietary_preferences": ["vegan"],
        "favorite_cuisine": "Indian",
    })
    assert created.status_code == 201
    assert created.json()["profile"]["favorite_cuisine"] == "Indian"

    duplicate = await client.post("/api/customer/profile", headers=headers, json={"age": 31})
    assert duplicate.status_code == 409

    updated = await client.put("/api/customer/profile", headers=headers, json={"favorite_cuisine": "Thai"})
    assert updated.status_code == 200
    profile = updated.json()["profile"]
    assert profile["favorite_cuisine"] == "Thai"
    assert profile["age"] == 30
    assert profile["dietary_preferences"] == ["vegan"]

    fetched = await client.get("/api/customer/profile", headers=headers)
    assert fetched.json()["favorite_cuisine"] == "Thai"

    deleted = await client.delete("/api/customer/profile", headers=headers)
    assert deleted.status_code == 200
    assert (await client.delete("/api/customer/profile", headers=headers)).status_code == 404


async def test_update_creates_missing_profile(client, market):
    customer = await market.customer()

    response = await client.put(
        "/api/customer/profile",
        headers=auth_headers(customer),
        json={"dietary_preferences": ["halal"]},
    )

    assert response.status_code == 200
    assert response.json()["profile"]["dietary_preferences"] == ["halal"]
    assert response.json()["profile"]["order_history"] == []


async def test_gender_other_text_only_kept_for_other(client, market):
    customer = await market.customer()
    headers = auth_headers(customer)

    other = await client.put("/api/customer/profile", headers=headers, json={
        "gender": "Other",
        "gender_other_text": "Non-binary",
    })
    assert other.json()["profile"]["gender_other_text"] == "Non-binary"

    female = await client.put("/api/customer/profile", headers=headers, json={"gender": "Female"})
    assert female.json()["profile"]["gender_other_text"] is None


async def test_profile_requires_customer_role(client, market):
    seller, _ = await market.seller()

    response = await client.get("/api/customer/profile", headers=auth_headers(seller))

    assert response.status_code == 403


# =============================================================================
# ADMIN SIDE
# =============================================================================

async def test_admin_lists_profiles_with_users(client, market):
    admin = await market.admin()
    customer = await market.customer(profile={"favorite_cuisine": "Thai"})

    response = await client.get("/api/admin/customers", headers=auth_headers(admin))

    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["user"]["email"] == customer.email
    assert "password" not in rows[0]["user"]


async def test_admin_suspends_and_reactivates_customer(client, market):
    admin = await market.admin()
    customer = await market.customer(profile={})
    headers = auth_headers(admin)

    suspended = await client.put(f"/api/admin/customers/{customer.id}/suspend", headers=headers)
    assert suspended.status_code == 200
    assert (await market.get(User, customer.id)).status == UserStatus.SUSPENDED

    reactivated = await client.put(f"/api/admin/customers/{customer.id}/reactivate", headers=headers)
    assert reactivated.status_code == 200
    assert (await market.get(User, customer.id)).status == UserStatus.APPROVED

    actions = [log.action for log in await market.all(select(AdminLog).order_by(AdminLog.id))]
    assert actions == ["Suspended User", "Reactivated User"]


async def test_admin_customer_action_needs_profile(client, market):
    admin = await market.admin()
    customer = await market.customer()

    response = await client.put(f"/api/admin/customers/{customer.id}/suspend", headers=auth_headers(admin))

    assert response.status_code == 404
    assert (await market.get(User, customer.id)).status == UserStatus.APPROVED


async def test_admin_deletes_profile_but_keeps_user(client, market):
    admin = await market.admin()
    customer = await market.customer(profile={})

    response = await client.delete(f"/api/admin/customers/{customer.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert await market.all(select(Customer)) == []
    assert await market.get(User, customer.id) is not None
    assert (await market.all(select(AdminLog)))[0].target_user_id == customer.id

    again = await client.delete(f"/api/admin/customers/{customer.id}", headers=auth_headers(admin))
    assert again.status_code == 404
