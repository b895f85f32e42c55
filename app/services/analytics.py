"""
Analytics Service

Admin dashboards (platform counts, user distribution, fast-moving
restaurants, monthly revenue, order/log listings) and the seller-side
menu stats and sales forecast.

Chart endpoints return Chart.js shaped payloads:
    {"labels": [...], "datasets": [{"label": "...", "data": [...]}]}
"""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import get_settings
from app.core.errors import ValidationFailed
from app.models import AdminLog, MenuItem, Order, OrderStatus, Restaurant, User
from app.services.prediction import BasePredictionService
from app.services.restaurants import get_seller_restaurant

logger = logging.getLogger(__name__)
settings = get_settings()

FAST_MOVING_LIMIT = 5
FORECAST_UNAVAILABLE_NOTE = "Forecast service is unavailable right now; try again later."


# =============================================================================
# ADMIN
# =============================================================================

async def platform_counts(db: AsyncSession) -> dict[str, int]:
    return {
        "totalUsers": await db.scalar(select(func.count(User.id))) or 0,
        "totalRestaurants": await db.scalar(select(func.count(Restaurant.id))) or 0,
        "totalOrders": await db.scalar(select(func.count(Order.id))) or 0,
    }


async def user_distribution(db: AsyncSession) -> dict[str, Any]:
    result = await db.execute(
        select(User.role, func.count(User.id)).group_by(User.role).order_by(User.role)
    )
    rows = result.all()
    return {
        "labels": [role.value for role, _ in rows],
        "datasets": [{"label": "Users", "data": [count for _, count in rows]}],
    }


async def fast_moving_restaurants(db: AsyncSession) -> list[dict[str, Any]]:
    """Top restaurants by number of orders (restaurants without orders count 0)."""
    order_count = func.count(Order.id).label("orders")
    result = await db.execute(
        select(Restaurant.name, order_count)
        .outerjoin(Order, Order.restaurant_id == Restaurant.id)
        .group_by(Restaurant.id, Restaurant.name)
        .order_by(order_count.desc(), Restaurant.id)
        .limit(FAST_MOVING_LIMIT)
    )
    return [{"restaurant": name, "orders": count} for name, count in result.all()]


async def revenue_trend(db: AsyncSession) -> list[dict[str, Any]]:
    """
    Revenue of COMPLETED orders per calendar month, oldest month first.

    Grouped in Python so the same code runs on PostgreSQL and SQLite.
    """
    result = await db.execute(
        select(Order.created_at, Order.total_amount)
        .where(Order.status == OrderStatus.COMPLETED)
        .order_by(Order.created_at)
    )

    months: "OrderedDict[str, Decimal]" = OrderedDict()
    for created_at, total in result.all():
        if created_at is None:
            continue
        key = created_at.strftime("%Y-%m")
        months[key] = months.get(key, Decimal("0")) + Decimal(total)

    return [{"month": month, "revenue": revenue} for month, revenue in months.items()]


async def list_orders_for_admin(db: AsyncSession) -> list[dict[str, Any]]:
    result = await db.execute(
        select(Order)
        .options(
            selectinload(Order.customer),
            selectinload(Order.restaurant).selectinload(Restaurant.seller),
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    rows = []
    for order in result.scalars().all():
        restaurant = order.restaurant
        rows.append({
            "id": order.id,
            "status": order.status,
            "total_amount": order.total_amount,
            "created_at": order.created_at,
            "customerEmail": order.customer.email if order.customer else None,
            "restaurantName": restaurant.name if restaurant else None,
            "sellerEmail": restaurant.seller.email if restaurant and restaurant.seller else None,
        })
    return rows


async def list_admin_logs(db: AsyncSession) -> list[dict[str, Any]]:
    result = await db.execute(
        select(AdminLog)
        .options(selectinload(AdminLog.admin), selectinload(AdminLog.target_user))
        .order_by(AdminLog.created_at.desc(), AdminLog.id.desc())
    )
    return [
        {
            "id": entry.id,
            "action": entry.action,
            "created_at": entry.created_at,
            "adminEmail": entry.admin.email if entry.admin else None,
            "targetUserEmail": entry.target_user.email if entry.target_user else None,
        }
        for entry in result.scalars().all()
    ]


def restaurant_row(restaurant: Restaurant) -> dict[str, Any]:
    """Flatten a restaurant (seller loaded) for the admin table."""
    seller = restaurant.seller
    return {
        "id": restaurant.id,
        "name": restaurant.name,
        "status": restaurant.status,
        "contactNumber": restaurant.contact_number,
        "address": restaurant.address,
        "cuisines": restaurant.cuisines or [],
        "created_at": restaurant.created_at,
        "sellerId": seller.id if seller else None,
        "sellerEmail": seller.email if seller else None,
        "sellerName": seller.name if seller else None,
        "sellerStatus": seller.status if seller else None,
    }


# =============================================================================
# SELLER
# =============================================================================

async def menu_stats(db: AsyncSession, seller_id: int) -> list[MenuItem]:
    restaurant = await get_seller_restaurant(db, seller_id)
    result = await db.execute(
        select(MenuItem).where(MenuItem.restaurant_id == restaurant.id).order_by(MenuItem.id)
    )
    return list(result.scalars().all())


async def sales_forecast(
    db: AsyncSession,
    seller_id: int,
    service: BasePredictionService,
) -> dict[str, Any]:
    """
    Forecast the next days of sales from the most recent orders.

    The latest FORECAST_WINDOW order totals are sent oldest first as
    {"days": [1..n], "sales": [...]}.

    Raises:
        NotFound: seller has no restaurant
        ValidationFailed: restaurant has no orders yet
    """
    restaurant = await get_seller_restaurant(db, seller_id)

    result = await db.execute(
        select(Order.total_amount)
        .where(Order.restaurant_id == restaurant.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(settings.forecast_window)
    )
    totals = list(result.scalars().all())
    if not totals:
        raise ValidationFailed("Not enough order data for forecasting")

    totals.reverse()
    payload = {
        "days": list(range(1, len(totals) + 1)),
        "sales": [float(total) for total in totals],
    }

    prediction = await service.predict(payload)
    if not prediction.success:
        logger.warning(
            f"Forecast degraded for restaurant #{restaurant.id}: {prediction.error_message}"
        )
        return {"forecast": [], "note": FORECAST_UNAVAILABLE_NOTE}

    forecast = prediction.data.get("next_7_days_forecast")
    if forecast is None:
        forecast = []
    elif not isinstance(forecast, list):
        forecast = [forecast]
    return {"forecast": forecast}
