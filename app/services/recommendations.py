"""
Recommendation Service

Two ways of suggesting food to a customer:

    - rank_restaurants: additive heuristic over active restaurants
    - ml_recommendations: item names from past orders sent to the ML service

Heuristic score per restaurant:
    +50  restaurant name contains the favorite cuisine (case-insensitive)
    +10  per menu item whose name contains any dietary preference
    +min(total orders_count / 10, 30) popularity
    +15  when the customer has any order history
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import get_settings
from app.core.errors import ValidationFailed
from app.models import Customer, MenuItem, Order, Restaurant, RestaurantStatus
from app.services.customers import get_profile
from app.services.prediction import BasePredictionService

logger = logging.getLogger(__name__)
settings = get_settings()

FAVORITE_CUISINE_BONUS = 50
DIETARY_MATCH_BONUS = 10
POPULARITY_DIVISOR = 10
POPULARITY_CAP = 30
HISTORY_BONUS = 15

ML_UNAVAILABLE_NOTE = "Recommendation service is unavailable right now; showing no suggestions."


@dataclass
class RankedRestaurant:
    restaurant: Restaurant
    score: Optional[float]


def score_restaurant(
    restaurant_name: str,
    menu_item_names: Iterable[str],
    total_orders_count: int,
    favorite_cuisine: Optional[str],
    dietary_preferences: Sequence[str],
    has_order_history: bool,
) -> float:
    score = 0.0

    if favorite_cuisine and favorite_cuisine.strip().lower() in restaurant_name.lower():
        score += FAVORITE_CUISINE_BONUS

    prefs = [p.strip().lower() for p in dietary_preferences if p and p.strip()]
    if prefs:
        for name in menu_item_names:
            lowered = name.lower()
            if any(p in lowered for p in prefs):
                score += DIETARY_MATCH_BONUS

    score += min(total_orders_count / POPULARITY_DIVISOR, POPULARITY_CAP)

    if has_order_history:
        score += HISTORY_BONUS

    return score


def rank_for_profile(restaurants: Sequence[Restaurant], profile: Customer) -> list[RankedRestaurant]:
    """Score and sort restaurants (menu_items must be loaded). Stable on ties."""
    scored = []
    for restaurant in restaurants:
        items: list[MenuItem] = restaurant.menu_items
        scored.append(RankedRestaurant(
            restaurant=restaurant,
            score=score_restaurant(
                restaurant.name,
                [item.name for item in items],
                sum(item.orders_count or 0 for item in items),
                profile.favorite_cuisine,
                profile.dietary_preferences or [],
                bool(profile.order_history),
            ),
        ))
    return sorted(scored, key=lambda s: s.score, reverse=True)


async def rank_restaurants(db: AsyncSession, user_id: int) -> list[RankedRestaurant]:
    """
    Rank active restaurants for a customer.

    Without a profile the restaurants come back newest first, unscored.
    """
    result = await db.execute(
        select(Restaurant)
        .options(selectinload(Restaurant.menu_items))
        .where(Restaurant.status == RestaurantStatus.ACTIVE)
        .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
    )
    restaurants = list(result.scalars().all())

    profile = await get_profile(db, user_id)
    if profile is None:
        return [RankedRestaurant(restaurant=r, score=None) for r in restaurants]

    return rank_for_profile(restaurants, profile)


# =============================================================================
# ML PATH
# =============================================================================

async def ordered_item_names(db: AsyncSession, user_id: int) -> list[str]:
    """Unique item names across the customer's orders, first-seen order."""
    result = await db.execute(select(Order.items).where(Order.user_id == user_id).order_by(Order.id))
    names: dict[str, None] = {}
    for items in result.scalars().all():
        for item in items or []:
            name = item.get("name") if isinstance(item, dict) else None
            if name:
                names.setdefault(name, None)
    return list(names)


def _normalize_recommended(data: dict[str, Any]) -> list[Any]:
    recommended = data.get("recommended_food")
    if recommended is None:
        return []
    if isinstance(recommended, list):
        return recommended
    return [recommended]


async def ml_recommendations(
    db: AsyncSession,
    user_id: int,
    service: BasePredictionService,
) -> dict[str, Any]:
    """
    Ask the ML service for food suggestions based on order history.

    Raises:
        ValidationFailed: the customer has no usable order history
    """
    first_order = await db.scalar(select(Order.id).where(Order.user_id == user_id).limit(1))
    if first_order is None:
        raise ValidationFailed("No order history found for recommendations")

    names = await ordered_item_names(db, user_id)
    if not names:
        raise ValidationFailed("No items found in order history")

    result = await service.predict({"orders": names})
    if not result.success:
        logger.warning(f"ML recommendations degraded for user #{user_id}: {result.error_message}")
        return {"recommended": [], "note": ML_UNAVAILABLE_NOTE}

    return {"recommended": _normalize_recommended(result.data)[: settings.recommendation_limit]}
