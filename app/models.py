"""
SQLAlchemy Database Models

Marketplace schema:
- Users (admins, sellers, customers) with an approval status
- Restaurants owned by sellers, with their menu items
- Orders carrying an immutable snapshot of the ordered items
- Customer preference profiles
- Append-only admin audit log
"""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    SELLER = "SELLER"
    CUSTOMER = "CUSTOMER"


class UserStatus(str, enum.Enum):
    """Account status. Only sellers pass through PENDING/REJECTED."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    SUSPENDED = "SUSPENDED"
    REJECTED = "REJECTED"


class RestaurantStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(Enum(UserRole), nullable=False, default=UserRole.CUSTOMER, index=True)
    status = Column(Enum(UserStatus), nullable=False, default=UserStatus.APPROVED)

    # Password reset (sha256 of the raw token)
    reset_token = Column(String(255), nullable=True, index=True)
    reset_token_expiry = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    restaurants = relationship("Restaurant", back_populates="seller")
    orders = relationship("Order", back_populates="customer")
    customer_profile = relationship("Customer", back_populates="user", uselist=False)

    def __repr__(self):
        return f"<User #{self.id} - {self.email} - {self.role.value}/{self.status.value}>"


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    contact_number = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    cuisines = Column(JSON, nullable=True, default=list)
    status = Column(
        Enum(RestaurantStatus),
        nullable=False,
        default=RestaurantStatus.ACTIVE,
        index=True,
    )
    image = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    seller = relationship("User", back_populates="restaurants")
    menu_items = relationship("MenuItem", back_populates="restaurant")
    orders = relationship("Order", back_populates="restaurant")

    def __repr__(self):
        return f"<Restaurant #{self.id} - {self.name} - {self.status.value}>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    orders_count = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    image = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    restaurant = relationship("Restaurant", back_populates="menu_items")

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - stock={self.stock}>"


class Order(Base):
    """
    Customer order.

    ``items`` holds the snapshot taken at placement time:
    [{"menuItemId", "name", "price", "qty", "portion"}, ...]
    Prices are stored as decimal strings.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    items = Column(JSON, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(OrderStatus),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("User", back_populates="orders")
    restaurant = relationship("Restaurant", back_populates="orders")

    def __repr__(self):
        return f"<Order #{self.id} - restaurant={self.restaurant_id} - {self.status.value}>"


class Customer(Base):
    """Customer preference profile (1:1 with a CUSTOMER user)."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    age = Column(Integer, nullable=True)
    gender = Column(Enum(Gender, values_callable=lambda e: [m.value for m in e]), nullable=True)
    gender_other_text = Column(String(120), nullable=True)  # only when gender is Other
    dietary_preferences = Column(JSON, nullable=True, default=list)
    favorite_cuisine = Column(String(255), nullable=True)
    order_history = Column(JSON, nullable=True, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="customer_profile")

    def __repr__(self):
        return f"<Customer #{self.id} - user={self.user_id}>"


class AdminLog(Base):
    """Append-only audit trail of administrative actions."""
    __tablename__ = "admin_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    admin_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    action = Column(String(255), nullable=False)
    target_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    admin = relationship("User", foreign_keys=[admin_id])
    target_user = relationship("User", foreign_keys=[target_user_id])

    def __repr__(self):
        return f"<AdminLog #{self.id} - {self.action}>"
