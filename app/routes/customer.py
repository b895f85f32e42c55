"""
Customer endpoints: browsing, ordering, recommendations and the
preference profile.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.database import get_db
from app.dependencies import require_customer
from app.models import User
from app.schemas import (
    CustomerOrderResponse,
    CustomerProfileMessage,
    CustomerProfileResponse,
    CustomerProfileWrite,
    MenuItemResponse,
    MessageResponse,
    MLRecommendationResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    RestaurantWithSeller,
    ScoredRestaurant,
)
from app.services import customers, orders, recommendations, restaurants
from app.services.prediction import BasePredictionService, get_recommendation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customer", tags=["Customer"])


# =============================================================================
# BROWSING
# =============================================================================

@router.get("/restaurants", response_model=list[RestaurantWithSeller], summary="List Restaurants")
async def list_restaurants(
    cuisine: Optional[str] = Query(None, description="Exact cuisine name, case-insensitive"),
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> list[RestaurantWithSeller]:
    rows = await restaurants.list_active_restaurants(db, cuisine)
    return [RestaurantWithSeller.model_validate(r) for r in rows]


@router.get(
    "/restaurants/{restaurant_id}/menu",
    response_model=list[MenuItemResponse],
    summary="Restaurant Menu",
)
async def restaurant_menu(
    restaurant_id: int,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> list[MenuItemResponse]:
    """Available items of an active restaurant, by name."""
    items = await restaurants.get_available_menu(db, restaurant_id)
    return [MenuItemResponse.model_validate(item) for item in items]


# =============================================================================
# ORDERS
# =============================================================================

@router.post(
    "/order",
    response_model=PlaceOrderResponse,
    status_code=201,
    summary="Place Order",
)
async def place_order(
    body: PlaceOrderRequest,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> PlaceOrderResponse:
    """
    Place an order.

    All lines succeed or nothing is stored: an unknown or unavailable item,
    or a line asking for more than the remaining stock, rejects the whole
    order with 400.
    """
    order = await orders.place_order(db, user.id, body.restaurantId, body.items)
    return PlaceOrderResponse(
        message="Order placed successfully",
        order=CustomerOrderResponse.model_validate(order),
    )


@router.get("/orders", response_model=list[CustomerOrderResponse], summary="My Orders")
async def my_orders(
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> list[CustomerOrderResponse]:
    rows = await orders.list_customer_orders(db, user.id)
    return [CustomerOrderResponse.model_validate(o) for o in rows]


# =============================================================================
# RECOMMENDATIONS
# =============================================================================

@router.get("/recommendations", response_model=list[ScoredRestaurant], summary="Recommended Restaurants")
async def recommended_restaurants(
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> list[ScoredRestaurant]:
    """Active restaurants ranked by the customer's preferences."""
    ranked = await recommendations.rank_restaurants(db, user.id)
    return [
        ScoredRestaurant.model_validate(r.restaurant).model_copy(update={"score": r.score})
        for r in ranked
    ]


@router.get("/recommendations/ml", response_model=MLRecommendationResponse, summary="ML Food Suggestions")
async def ml_recommendations(
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
    service: BasePredictionService = Depends(get_recommendation_service),
) -> MLRecommendationResponse:
    result = await recommendations.ml_recommendations(db, user.id, service)
    return MLRecommendationResponse(**result)


# =============================================================================
# PROFILE
# =============================================================================

@router.get("/profile", response_model=CustomerProfileResponse, summary="Get Profile")
async def get_profile(
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileResponse:
    profile = await customers.get_profile(db, user.id)
    if profile is None:
        raise NotFound("Customer profile not found")
    return CustomerProfileResponse.model_validate(profile)


@router.post("/profile", response_model=CustomerProfileMessage, status_code=201, summary="Create Profile")
async def create_profile(
    body: CustomerProfileWrite,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileMessage:
    profile = await customers.create_profile(db, user.id, body)
    return CustomerProfileMessage(
        message="Customer profile created",
        profile=CustomerProfileResponse.model_validate(profile),
    )


@router.put("/profile", response_model=CustomerProfileMessage, summary="Update Profile")
async def update_profile(
    body: CustomerProfileWrite,
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> CustomerProfileMessage:
    """Partial update; creates the profile if the customer has none yet."""
    profile = await customers.update_profile(db, user.id, body, create_missing=True)
    return CustomerProfileMessage(
        message="Customer profile updated",
        profile=CustomerProfileResponse.model_validate(profile),
    )


@router.delete("/profile", response_model=MessageResponse, summary="Delete Profile")
async def delete_profile(
    user: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await customers.delete_profile(db, user.id)
    return MessageResponse(message="Customer profile deleted")
