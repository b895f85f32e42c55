"""
Oversell Simulation Script

Fires many concurrent orders at one scarce menu item of a running server
and checks that stock never goes negative and no more units are sold than
were in stock.

Run from project root (server must be up, admin seeded):
    python scripts/simulate.py --admin-password <pw> --orders 50 --stock 10
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:5000"
TOTAL_ORDERS = 50
INITIAL_STOCK = 10
CUSTOMERS = 5


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def login(client: httpx.AsyncClient, email: str, password: str) -> dict[str, Any]:
    response = await client.post(f"{API_BASE_URL}/api/auth/login", json={"email": email, "password": password})
    response.raise_for_status()
    return response.json()


# =============================================================================
# SETUP
# =============================================================================

async def setup_marketplace(
    client: httpx.AsyncClient,
    admin_email: str,
    admin_password: str,
    stock: int,
    customers: int,
) -> dict[str, Any]:
    """Create an approved seller with one scarce item, plus customer accounts."""
    run_id = f"{int(time.time())}{random.randint(100, 999)}"
    password = "simulate123"

    admin = await login(client, admin_email, admin_password)

    seller_email = f"seller_{run_id}@sim.local"
    response = await client.post(f"{API_BASE_URL}/api/auth/register", json={
        "name": f"Sim Seller {run_id}",
        "email": seller_email,
        "password": password,
        "role": "SELLER",
        "restaurantName": f"Sim Kitchen {run_id}",
        "contactNumber": "0771234567",
        "restaurantAddress": "Colombo",
        "restaurantCuisines": ["Sri Lankan"],
    })
    response.raise_for_status()

    users = (await client.get(f"{API_BASE_URL}/api/admin/users", headers=auth(admin["token"]))).json()
    seller_id = next(u["id"] for u in users if u["email"] == seller_email)
    response = await client.put(
        f"{API_BASE_URL}/api/admin/users/{seller_id}/approve",
        headers=auth(admin["token"]),
    )
    response.raise_for_status()

    seller = await login(client, seller_email, password)
    restaurant = (await client.get(f"{API_BASE_URL}/api/seller/restaurant", headers=auth(seller["token"]))).json()
    response = await client.post(
        f"{API_BASE_URL}/api/seller/menu",
        headers=auth(seller["token"]),
        json={"name": "Last Kottu", "price": "1200.00", "stock": stock},
    )
    response.raise_for_status()
    item = response.json()

    tokens = []
    for n in range(customers):
        email = f"customer_{run_id}_{n}@sim.local"
        response = await client.post(f"{API_BASE_URL}/api/auth/register", json={
            "name": f"Sim Customer {n}",
            "email": email,
            "password": password,
            "role": "CUSTOMER",
            "age": 30,
            "gender": "Other",
            "genderOtherText": "n/a",
            "dietaryPref": ["spicy"],
            "favoriteCuisine": "Sri Lankan",
        })
        response.raise_for_status()
        tokens.append((await login(client, email, password))["token"])

    return {
        "seller_token": seller["token"],
        "restaurant_id": restaurant["id"],
        "item_id": item["id"],
        "customer_tokens": tokens,
    }


# =============================================================================
# ORDER FIRING
# =============================================================================

async def send_order(
    client: httpx.AsyncClient,
    order_num: int,
    token: str,
    restaurant_id: int,
    item_id: int,
) -> dict[str, Any]:
    start_time = time.time()
    try:
        response = await client.post(
            f"{API_BASE_URL}/api/customer/order",
            headers=auth(token),
            json={"restaurantId": restaurant_id, "items": [{"menuItemId": item_id, "qty": 1}]},
            timeout=30.0,
        )
        elapsed = round(time.time() - start_time, 3)
        body = response.json()
        if response.status_code == 201:
            return {"order_num": order_num, "success": True, "order_id": body["order"]["id"], "time": elapsed}
        return {
            "order_num": order_num,
            "success": False,
            "error": body.get("error", response.status_code),
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def run_simulation(
    admin_email: str,
    admin_password: str,
    num_orders: int = TOTAL_ORDERS,
    stock: int = INITIAL_STOCK,
    customers: int = CUSTOMERS,
) -> dict[str, Any]:
    print("=" * 70)
    print("🔥 OVERSELL SIMULATION - CONCURRENT ORDERS ON ONE ITEM")
    print("=" * 70)
    print(f"📋 Orders: {num_orders}  Stock: {stock}  Customers: {customers}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient(timeout=30.0) as client:
        ctx = await setup_marketplace(client, admin_email, admin_password, stock, customers)

        start_time = time.time()
        tasks = [
            send_order(
                client,
                i + 1,
                ctx["customer_tokens"][i % len(ctx["customer_tokens"])],
                ctx["restaurant_id"],
                ctx["item_id"],
            )
            for i in range(num_orders)
        ]
        results = await asyncio.gather(*tasks)
        total_time = round(time.time() - start_time, 2)

        menu = (await client.get(f"{API_BASE_URL}/api/seller/menu", headers=auth(ctx["seller_token"]))).json()
        item = next(m for m in menu if m["id"] == ctx["item_id"])

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    oversold = len(successful) > stock or item["stock"] < 0
    consistent = item["stock"] == stock - len(successful) and item["orders_count"] == len(successful)

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Accepted Orders: {len(successful)}/{num_orders}")
    print(f"❌ Rejected Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")
    print(f"\n📦 Remaining stock: {item['stock']} (orders_count={item['orders_count']})")
    print(f"{'❌ OVERSOLD' if oversold else '✅ No oversell'}")
    print(f"{'✅' if consistent else '❌'} Stock and orders_count match accepted orders")

    rejections: dict[str, int] = {}
    for r in failed:
        rejections[str(r["error"])] = rejections.get(str(r["error"]), 0) + 1
    for error, count in rejections.items():
        print(f"   {error}: {count}")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "remaining_stock": item["stock"],
        "oversold": oversold,
        "total_time": total_time,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Oversell Simulation Script")
    parser.add_argument("--base-url", default=API_BASE_URL, help="Server base URL")
    parser.add_argument("--admin-email", default="admin@restaurant.com", help="Seeded admin email")
    parser.add_argument("--admin-password", required=True, help="Seeded admin password")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of concurrent orders")
    parser.add_argument("--stock", type=int, default=INITIAL_STOCK, help="Initial stock of the item")
    parser.add_argument("--customers", type=int, default=CUSTOMERS, help="Customer accounts to spread orders over")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")

    summary = asyncio.run(run_simulation(
        args.admin_email,
        args.admin_password,
        num_orders=args.orders,
        stock=args.stock,
        customers=args.customers,
    ))
    sys.exit(1 if summary["oversold"] else 0)
