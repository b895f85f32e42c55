"""
Pydantic Schemas for Request/Response Validation

Request bodies keep the camelCase field names the web client sends
(restaurantId, menuItemId, dietaryPref, ...); responses mirror the
database columns.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models import (
    Gender,
    OrderStatus,
    RestaurantStatus,
    UserRole,
    UserStatus,
)


# =============================================================================
# AUTH
# =============================================================================

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    token: str
    id: int
    name: str
    role: UserRole
    status: UserStatus


class RegisterRequest(BaseModel):
    """
    Registration for customers and sellers.

    Customer-only and seller-only fields are optional here; the
    account service enforces them per role.
    """
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole

    # Customer
    age: Optional[int] = None
    gender: Optional[Gender] = None
    genderOtherText: Optional[str] = Field(None, max_length=120)
    dietaryPref: Optional[List[str]] = None
    favoriteCuisine: Optional[str] = Field(None, max_length=255)

    # Seller
    restaurantName: Optional[str] = Field(None, max_length=255)
    contactNumber: Optional[str] = Field(None, max_length=50)
    restaurantAddress: Optional[str] = Field(None, max_length=255)
    restaurantCuisines: Optional[List[str]] = None


class RequestResetRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=6, max_length=128)


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# USERS
# =============================================================================

class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    status: UserStatus
    created_at: Optional[datetime] = None


# =============================================================================
# RESTAURANTS & MENU
# =============================================================================

class RestaurantUpdate(BaseModel):
    """Partial restaurant profile; only provided fields are written."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_number: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    cuisines: Optional[List[str]] = None
    image: Optional[str] = None

    @field_validator("cuisines", mode="before")
    @classmethod
    def split_cuisines(cls, v: Any) -> Any:
        # "Sri Lankan,Chinese" from form-style clients
        if isinstance(v, str):
            return [c.strip() for c in v.split(",") if c.strip()]
        return v


class RestaurantBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    image: Optional[str] = None


class RestaurantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    seller_id: int
    name: str
    contact_number: Optional[str] = None
    address: Optional[str] = None
    cuisines: List[str] = []
    status: RestaurantStatus
    image: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("cuisines", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v or []


class RestaurantWithSeller(RestaurantResponse):
    seller: Optional[UserBrief] = None


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    image: Optional[str] = None


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    isAvailable: Optional[bool] = None
    image: Optional[str] = None


class MenuItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    name: str
    price: Decimal
    stock: int
    orders_count: int
    is_available: bool
    image: Optional[str] = None


# =============================================================================
# ORDERS
# =============================================================================

class OrderLineRequest(BaseModel):
    """One requested line of an order."""
    menuItemId: int
    qty: int = Field(..., ge=1)
    portion: Optional[str] = Field(None, max_length=50)


class PlaceOrderRequest(BaseModel):
    restaurantId: int
    items: List[OrderLineRequest] = Field(..., min_length=1)


class OrderItemSnapshot(BaseModel):
    menuItemId: int
    name: str
    price: Decimal
    qty: int
    portion: str = "regular"


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    restaurant_id: int
    items: List[OrderItemSnapshot]
    total_amount: Decimal
    status: OrderStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerOrderResponse(OrderResponse):
    restaurant: Optional[RestaurantBrief] = None


class SellerOrderResponse(OrderResponse):
    customer: Optional[UserBrief] = None


class PlaceOrderResponse(BaseModel):
    message: str
    order: CustomerOrderResponse


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# =============================================================================
# CUSTOMER PROFILE
# =============================================================================

class CustomerProfileWrite(BaseModel):
    """Fields left out of the body keep their stored value on update."""
    age: Optional[int] = Field(None, gt=0, lt=150)
    gender: Optional[Gender] = None
    gender_other_text: Optional[str] = Field(None, max_length=120)
    dietary_preferences: Optional[List[str]] = None
    favorite_cuisine: Optional[str] = Field(None, max_length=255)
    order_history: Optional[List[Any]] = None


class CustomerProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    age: Optional[int] = None
    gender: Optional[Gender] = None
    gender_other_text: Optional[str] = None
    dietary_preferences: List[str] = []
    favorite_cuisine: Optional[str] = None
    order_history: List[Any] = []
    created_at: Optional[datetime] = None

    @field_validator("dietary_preferences", "order_history", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v or []


class CustomerProfileWithUser(CustomerProfileResponse):
    user: Optional[UserResponse] = None


class CustomerProfileMessage(BaseModel):
    message: str
    profile: CustomerProfileResponse


# =============================================================================
# RECOMMENDATIONS & FORECAST
# =============================================================================

class ScoredRestaurant(RestaurantResponse):
    score: Optional[float] = None


class MLRecommendationResponse(BaseModel):
    recommended: List[Any]
    note: Optional[str] = None


class ForecastResponse(BaseModel):
    forecast: List[Any]
    note: Optional[str] = None


# =============================================================================
# ADMIN
# =============================================================================

class AdminRestaurantRow(BaseModel):
    id: int
    name: str
    status: RestaurantStatus
    contactNumber: Optional[str] = None
    address: Optional[str] = None
    cuisines: List[str] = []
    created_at: Optional[datetime] = None
    sellerId: Optional[int] = None
    sellerEmail: Optional[str] = None
    sellerName: Optional[str] = None
    sellerStatus: Optional[UserStatus] = None


class AdminOrderRow(BaseModel):
    id: int
    status: OrderStatus
    total_amount: Decimal
    created_at: Optional[datetime] = None
    customerEmail: Optional[str] = None
    restaurantName: Optional[str] = None
    sellerEmail: Optional[str] = None


class AdminLogRow(BaseModel):
    id: int
    action: str
    created_at: Optional[datetime] = None
    adminEmail: Optional[str] = None
    targetUserEmail: Optional[str] = None


class PlatformAnalytics(BaseModel):
    totalUsers: int
    totalRestaurants: int
    totalOrders: int


class ChartDataset(BaseModel):
    label: str
    data: List[int]


class ChartResponse(BaseModel):
    """Chart.js compatible payload."""
    labels: List[str]
    datasets: List[ChartDataset]


class FastMovingRestaurant(BaseModel):
    restaurant: str
    orders: int


class RevenuePoint(BaseModel):
    month: str
    revenue: Decimal


class MenuItemStats(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    stock: int
    price: Decimal


# =============================================================================
# SYSTEM
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    prediction_service: str
    timestamp: datetime
