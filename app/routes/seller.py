"""
Seller endpoints: restaurant profile, menu, incoming orders, analytics
and the sales forecast.

Reads only need the SELLER role; anything that changes the restaurant,
its menu or an order status also needs an APPROVED account.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import require_approved_seller, require_seller
from app.models import User
from app.schemas import (
    ForecastResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemStats,
    MenuItemUpdate,
    MessageResponse,
    OrderResponse,
    OrderStatusUpdate,
    RestaurantResponse,
    RestaurantUpdate,
    SellerOrderResponse,
)
from app.services import analytics, orders, restaurants
from app.services.prediction import BasePredictionService, get_forecast_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/seller", tags=["Seller"])


# =============================================================================
# RESTAURANT PROFILE
# =============================================================================

@router.get("/restaurant", response_model=RestaurantResponse, summary="My Restaurant")
async def get_restaurant(
    user: User = Depends(require_seller),
    db: AsyncSession = Depends(get_db),
) -> RestaurantResponse:
    restaurant = await restaurants.get_seller_restaurant(db, user.id)
    return RestaurantResponse.model_validate(restaurant)


@router.put("/restaurant", response_model=RestaurantResponse, summary="Update Restaurant")
async def update_restaurant(
    body: RestaurantUpdate,
    user: User = Depends(require_approved_seller),
    db: AsyncSession = Depends(get_db),
) -> RestaurantResponse:
    """Update the restaurant profile, creating it on first save."""
    restaurant = await restaurants.upsert_restaurant(db, user, body)
    return RestaurantResponse.model_validate(restaurant)


# =============================================================================
# MENU
# =============================================================================

@router.get("/menu", response_model=list[MenuItemResponse], summary="My Menu")
async def get_menu(
    user: User = Depends(require_seller),
    db: AsyncSession = Depends(get_db),
) -> list[MenuItemResponse]:
    restaurant = await restaurants.get_seller_restaurant(db, user.id)
    items = await restaurants.list_menu(db, restaurant.id)
    return [MenuItemResponse.model_validate(item) for item in items]


@router.post("/menu", response_model=MenuItemResponse, status_code=201, summary="Add Menu Item")
async def add_menu_item(
    body: MenuItemCreate,
    user: User = Depends(require_approved_seller),
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    item = await restaurants.add_menu_item(db, user.id, body)
    return MenuItemResponse.model_validate(item)


@router.put("/menu/{item_id}", response_model=MenuItemResponse, summary="Update Menu Item")
async def update_menu_item(
    item_id: int,
    body: MenuItemUpdate,
    user: User = Depends(require_approved_seller),
    db: AsyncSession = Depends(get_db),
) -> MenuItemResponse:
    item = await restaurants.update_menu_item(db, user.id, item_id, body)
    return MenuItemResponse.model_validate(item)


@router.delete("/menu/{item_id}", response_model=MessageResponse, summary="Delete Menu Item")
async def delete_menu_item(
    item_id: int,
    user: User = Depends(require_approved_seller),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await restaurants.delete_menu_item(db, user.id, item_id)
    return MessageResponse(message="Menu item deleted")


# =============================================================================
# ORDERS
# =============================================================================

@router.get("/orders", response_model=list[SellerOrderResponse], summary="Restaurant Orders")
async def get_orders(
    user: User = Depends(require_seller),
    db: AsyncSession = Depends(get_db),
) -> list[SellerOrderResponse]:
    restaurant = await restaurants.get_seller_restaurant(db, user.id)
    rows = await orders.list_restaurant_orders(db, restaurant.id)
    return [SellerOrderResponse.model_validate(o) for o in rows]


@router.put("/orders/{order_id}/status", response_model=OrderResponse, summary="Update Order Status")
async def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    user: User = Depends(require_approved_seller),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    order = await orders.update_order_status(db, user.id, order_id, body.status)
    return OrderResponse.model_validate(order)


# =============================================================================
# ANALYTICS & FORECAST
# =============================================================================

@router.get("/analytics", response_model=list[MenuItemStats], summary="Menu Stock Overview")
async def get_analytics(
    user: User = Depends(require_seller),
    db: AsyncSession = Depends(get_db),
) -> list[MenuItemStats]:
    items = await analytics.menu_stats(db, user.id)
    return [MenuItemStats.model_validate(item) for item in items]


@router.get("/forecast", response_model=ForecastResponse, summary="Sales Forecast")
async def get_forecast(
    user: User = Depends(require_seller),
    db: AsyncSession = Depends(get_db),
    service: BasePredictionService = Depends(get_forecast_service),
) -> ForecastResponse:
    """7-day sales forecast from the latest orders. Degrades to an empty list."""
    result = await analytics.sales_forecast(db, user.id, service)
    return ForecastResponse(**result)
