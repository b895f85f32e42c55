"""
Admin endpoints: account approval workflow, platform analytics, order and
audit log listings, and customer management.
"""

import logging

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import require_admin
from app.models import User
from app.schemas import (
    AdminLogRow,
    AdminOrderRow,
    AdminRestaurantRow,
    ChartResponse,
    CustomerProfileWithUser,
    FastMovingRestaurant,
    MessageResponse,
    PlatformAnalytics,
    RevenuePoint,
    UserResponse,
)
from app.services import accounts, analytics, customers, restaurants

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

ACCOUNT_ACTION_PATTERN = "^(approve|reject|suspend|reactivate)$"
CUSTOMER_ACTION_PATTERN = "^(suspend|reactivate)$"


# =============================================================================
# USERS & APPROVAL
# =============================================================================

@router.get("/users", response_model=list[UserResponse], summary="List Users")
async def list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[UserResponse]:
    users = await accounts.list_users(db)
    return [UserResponse.model_validate(u) for u in users]


@router.put("/users/{user_id}/{action}", response_model=UserResponse, summary="Change Account Status")
async def change_account_status(
    user_id: int,
    action: str = Path(..., pattern=ACCOUNT_ACTION_PATTERN),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    approve / reject apply to sellers only; suspend / reactivate to any
    user. The owned restaurant follows the account and the action is
    written to the admin log.
    """
    user = await accounts.apply_account_action(db, admin, user_id, action)
    return UserResponse.model_validate(user)


@router.get("/restaurants", response_model=list[AdminRestaurantRow], summary="List Restaurants")
async def list_restaurants(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[AdminRestaurantRow]:
    rows = await restaurants.list_all_restaurants(db)
    return [AdminRestaurantRow(**analytics.restaurant_row(r)) for r in rows]


# =============================================================================
# ANALYTICS
# =============================================================================

@router.get("/analytics", response_model=PlatformAnalytics, summary="Platform Totals")
async def platform_analytics(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PlatformAnalytics:
    return PlatformAnalytics(**await analytics.platform_counts(db))


@router.get("/analytics/user-distribution", response_model=ChartResponse, summary="Users per Role")
async def user_distribution(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ChartResponse:
    return ChartResponse(**await analytics.user_distribution(db))


@router.get(
    "/analytics/fast-moving-restaurants",
    response_model=list[FastMovingRestaurant],
    summary="Top Restaurants by Orders",
)
async def fast_moving_restaurants(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[FastMovingRestaurant]:
    rows = await analytics.fast_moving_restaurants(db)
    return [FastMovingRestaurant(**row) for row in rows]


@router.get("/analytics/revenue-trend", response_model=list[RevenuePoint], summary="Monthly Revenue")
async def revenue_trend(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[RevenuePoint]:
    rows = await analytics.revenue_trend(db)
    return [RevenuePoint(**row) for row in rows]


@router.get("/orders", response_model=list[AdminOrderRow], summary="All Orders")
async def list_orders(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[AdminOrderRow]:
    rows = await analytics.list_orders_for_admin(db)
    return [AdminOrderRow(**row) for row in rows]


@router.get("/logs", response_model=list[AdminLogRow], summary="Admin Audit Log")
async def list_logs(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[AdminLogRow]:
    rows = await analytics.list_admin_logs(db)
    return [AdminLogRow(**row) for row in rows]


# =============================================================================
# CUSTOMERS
# =============================================================================

@router.get("/customers", response_model=list[CustomerProfileWithUser], summary="All Customer Profiles")
async def list_customers(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[CustomerProfileWithUser]:
    profiles = await customers.list_profiles(db)
    return [CustomerProfileWithUser.model_validate(p) for p in profiles]


@router.put(
    "/customers/{user_id}/{action}",
    response_model=UserResponse,
    summary="Suspend or Reactivate Customer",
)
async def change_customer_status(
    user_id: int,
    action: str = Path(..., pattern=CUSTOMER_ACTION_PATTERN),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await customers.set_customer_status(db, admin, user_id, action)
    return UserResponse.model_validate(user)


@router.delete("/customers/{user_id}", response_model=MessageResponse, summary="Delete Customer Profile")
async def delete_customer(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await customers.admin_delete_profile(db, admin, user_id)
    return MessageResponse(message="Customer profile deleted")
