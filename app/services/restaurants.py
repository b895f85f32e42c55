"""
Restaurant & Menu Service

Seller-side restaurant profile and menu management, plus the customer
browsing queries (active restaurants, available menu).
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFound, PermissionDenied, ValidationFailed
from app.models import MenuItem, Restaurant, RestaurantStatus, User, UserStatus
from app.schemas import MenuItemCreate, MenuItemUpdate, RestaurantUpdate

logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOMER BROWSING
# =============================================================================

async def list_active_restaurants(db: AsyncSession, cuisine: Optional[str] = None) -> list[Restaurant]:
    """
    Active restaurants, newest first, with their seller loaded.

    Args:
        cuisine: keep only restaurants listing this cuisine (case-insensitive)
    """
    result = await db.execute(
        select(Restaurant)
        .options(selectinload(Restaurant.seller))
        .where(Restaurant.status == RestaurantStatus.ACTIVE)
        .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
    )
    restaurants = list(result.scalars().all())

    if cuisine:
        wanted = cuisine.strip().lower()
        restaurants = [
            r for r in restaurants
            if any(str(c).strip().lower() == wanted for c in (r.cuisines or []))
        ]
    return restaurants


async def get_available_menu(db: AsyncSession, restaurant_id: int) -> list[MenuItem]:
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None or restaurant.status != RestaurantStatus.ACTIVE:
        raise NotFound("Restaurant not found", error="RestaurantNotFound")

    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.restaurant_id == restaurant_id, MenuItem.is_available.is_(True))
        .order_by(MenuItem.name.asc())
    )
    return list(result.scalars().all())


# =============================================================================
# SELLER RESTAURANT PROFILE
# =============================================================================

async def find_seller_restaurant(db: AsyncSession, seller_id: int) -> Optional[Restaurant]:
    return await db.scalar(
        select(Restaurant).where(Restaurant.seller_id == seller_id).order_by(Restaurant.id).limit(1)
    )


async def get_seller_restaurant(db: AsyncSession, seller_id: int) -> Restaurant:
    restaurant = await find_seller_restaurant(db, seller_id)
    if restaurant is None:
        raise NotFound("Restaurant not found", error="RestaurantNotFound")
    return restaurant


async def upsert_restaurant(db: AsyncSession, seller: User, data: RestaurantUpdate) -> Restaurant:
    """Update the seller's restaurant, creating it on first save."""
    restaurant = await find_seller_restaurant(db, seller.id)
    fields = data.model_dump(exclude_unset=True)

    if restaurant is None:
        if not fields.get("name"):
            raise ValidationFailed("Restaurant name is required")
        restaurant = Restaurant(
            seller_id=seller.id,
            cuisines=[],
            status=(
                RestaurantStatus.ACTIVE
                if seller.status == UserStatus.APPROVED
                else RestaurantStatus.INACTIVE
            ),
        )
        db.add(restaurant)
        logger.info(f"Creating restaurant for seller #{seller.id}")

    for field, value in fields.items():
        if field == "name" and not value:
            continue
        setattr(restaurant, field, value)

    await db.commit()
    await db.refresh(restaurant)
    return restaurant


# =============================================================================
# SELLER MENU
# =============================================================================

async def list_menu(db: AsyncSession, restaurant_id: int) -> list[MenuItem]:
    result = await db.execute(
        select(MenuItem).where(MenuItem.restaurant_id == restaurant_id).order_by(MenuItem.id.desc())
    )
    return list(result.scalars().all())


async def add_menu_item(db: AsyncSession, seller_id: int, data: MenuItemCreate) -> MenuItem:
    restaurant = await find_seller_restaurant(db, seller_id)
    if restaurant is None:
        raise ValidationFailed("Restaurant not found")

    item = MenuItem(
        restaurant_id=restaurant.id,
        name=data.name,
        price=data.price,
        stock=data.stock,
        orders_count=0,
        is_available=True,
        image=data.image,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info(f"Menu item #{item.id} '{item.name}' added to restaurant #{restaurant.id}")
    return item


def menu_item_query(item_id: int, lock: bool = False):
    stmt = select(MenuItem).options(selectinload(MenuItem.restaurant)).where(MenuItem.id == item_id)
    if lock:
        # Absolute stock writes must not interleave with order decrements
        stmt = stmt.with_for_update(of=MenuItem).execution_options(populate_existing=True)
    return stmt


async def _owned_menu_item(db: AsyncSession, seller_id: int, item_id: int, lock: bool = False) -> MenuItem:
    item = await db.scalar(menu_item_query(item_id, lock))
    if item is None:
        raise NotFound("Menu item not found")
    if item.restaurant.seller_id != seller_id:
        raise PermissionDenied("Unauthorized action")
    return item


async def update_menu_item(db: AsyncSession, seller_id: int, item_id: int, data: MenuItemUpdate) -> MenuItem:
    item = await _owned_menu_item(db, seller_id, item_id, lock=True)

    fields = data.model_dump(exclude_unset=True)
    if "isAvailable" in fields:
        fields["is_available"] = fields.pop("isAvailable")
    for field, value in fields.items():
        if value is None:
            continue
        setattr(item, field, value)

    await db.commit()
    await db.refresh(item)
    return item


async def delete_menu_item(db: AsyncSession, seller_id: int, item_id: int) -> None:
    item = await _owned_menu_item(db, seller_id, item_id)
    await db.delete(item)
    await db.commit()
    logger.info(f"Menu item #{item_id} deleted by seller #{seller_id}")


# =============================================================================
# ADMIN
# =============================================================================

async def list_all_restaurants(db: AsyncSession) -> list[Restaurant]:
    result = await db.execute(
        select(Restaurant)
        .options(selectinload(Restaurant.seller))
        .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
    )
    return list(result.scalars().all())
