"""
Account Service

Registration, login, password reset and the admin approval workflow.

Approval rules live in one table (ACCOUNT_ACTIONS) so the user status,
the owned restaurant status and the audit label always move together.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.errors import (
    AuthenticationFailed,
    Conflict,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from app.core.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from app.models import (
    AdminLog,
    Customer,
    Gender,
    Restaurant,
    RestaurantStatus,
    User,
    UserRole,
    UserStatus,
)
from app.schemas import RegisterRequest

logger = logging.getLogger(__name__)
settings = get_settings()


# =============================================================================
# ADMIN AUDIT LOG
# =============================================================================

def log_admin_action(
    db: AsyncSession,
    admin_id: int,
    action: str,
    target_user_id: Optional[int] = None,
) -> AdminLog:
    """Append an audit entry to the caller's transaction."""
    entry = AdminLog(admin_id=admin_id, action=action, target_user_id=target_user_id)
    db.add(entry)
    logger.info(f"Admin #{admin_id}: {action} (target={target_user_id})")
    return entry


# =============================================================================
# APPROVAL WORKFLOW
# =============================================================================

@dataclass(frozen=True)
class AccountAction:
    user_status: UserStatus
    restaurant_status: RestaurantStatus
    label: str
    sellers_only: bool
    allowed_from: frozenset[UserStatus]


ACCOUNT_ACTIONS: dict[str, AccountAction] = {
    "approve": AccountAction(
        UserStatus.APPROVED, RestaurantStatus.ACTIVE, "Approved Seller", True,
        frozenset({UserStatus.PENDING, UserStatus.REJECTED}),
    ),
    "reject": AccountAction(
        UserStatus.REJECTED, RestaurantStatus.INACTIVE, "Rejected Seller", True,
        frozenset({UserStatus.PENDING}),
    ),
    "suspend": AccountAction(
        UserStatus.SUSPENDED, RestaurantStatus.INACTIVE, "Suspended User", False,
        frozenset({UserStatus.APPROVED}),
    ),
    "reactivate": AccountAction(
        UserStatus.APPROVED, RestaurantStatus.ACTIVE, "Reactivated User", False,
        frozenset({UserStatus.SUSPENDED}),
    ),
}


async def apply_account_action(
    db: AsyncSession,
    admin: User,
    target_user_id: int,
    action: str,
) -> User:
    """
    Apply an admin action to a user account.

    Sets the user status, mirrors it onto every restaurant the user owns
    and appends the audit entry, all in one commit.

    Raises:
        NotFound: target missing, or not a seller for seller-only actions
        Conflict: the account is not in a status the action applies to
    """
    rule = ACCOUNT_ACTIONS[action]

    target = await db.get(User, target_user_id)
    if target is None or (rule.sellers_only and target.role != UserRole.SELLER):
        raise NotFound("Seller not found" if rule.sellers_only else "User not found")

    if target.id == admin.id and rule.user_status != UserStatus.APPROVED:
        raise PermissionDenied("Admins cannot change their own account status")

    if target.status not in rule.allowed_from:
        raise Conflict(f"Cannot {action} a user whose status is {target.status.value}")

    target.status = rule.user_status
    await db.execute(
        update(Restaurant)
        .where(Restaurant.seller_id == target.id)
        .values(status=rule.restaurant_status)
    )
    log_admin_action(db, admin.id, rule.label, target.id)

    await db.commit()
    await db.refresh(target)

    logger.info(f"User #{target.id} -> {target.status.value} ({action})")
    return target


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


# =============================================================================
# REGISTRATION
# =============================================================================

def _validate_customer_fields(data: RegisterRequest) -> None:
    if not data.age or data.age <= 0:
        raise ValidationFailed("Valid age is required")
    if not data.gender:
        raise ValidationFailed("Gender is required")
    if data.gender == Gender.OTHER and not data.genderOtherText:
        raise ValidationFailed("Please specify your gender (Other)")
    if not data.dietaryPref:
        raise ValidationFailed("Select at least one dietary preference")
    if not data.favoriteCuisine:
        raise ValidationFailed("Favorite cuisine is required")


def _validate_seller_fields(data: RegisterRequest) -> None:
    if not data.restaurantName:
        raise ValidationFailed("Restaurant name is required")
    if not data.contactNumber:
        raise ValidationFailed("Contact number is required")
    if not data.restaurantAddress:
        raise ValidationFailed("Restaurant address/area is required")
    if not data.restaurantCuisines:
        raise ValidationFailed("Select at least one restaurant cuisine")


async def register_user(db: AsyncSession, data: RegisterRequest) -> User:
    """
    Register a customer or a seller.

    Customers are APPROVED immediately and get their preference profile.
    Sellers start PENDING with an INACTIVE restaurant shell until an
    admin approves them.
    """
    if data.role == UserRole.ADMIN:
        raise ValidationFailed("Admin accounts cannot be self-registered")

    email = data.email.lower()
    existing = await db.scalar(select(User).where(User.email == email))
    if existing is not None:
        raise Conflict("Email already registered")

    if data.role == UserRole.CUSTOMER:
        _validate_customer_fields(data)
    else:
        _validate_seller_fields(data)

    user = User(
        name=data.name,
        email=email,
        password=hash_password(data.password),
        role=data.role,
        status=UserStatus.PENDING if data.role == UserRole.SELLER else UserStatus.APPROVED,
    )

    try:
        db.add(user)
        await db.flush()

        if data.role == UserRole.CUSTOMER:
            db.add(Customer(
                user_id=user.id,
                age=data.age,
                gender=data.gender,
                gender_other_text=data.genderOtherText if data.gender == Gender.OTHER else None,
                dietary_preferences=data.dietaryPref,
                favorite_cuisine=data.favoriteCuisine,
                order_history=[],
            ))
        else:
            db.add(Restaurant(
                seller_id=user.id,
                name=data.restaurantName,
                contact_number=data.contactNumber,
                address=data.restaurantAddress,
                cuisines=data.restaurantCuisines,
                status=RestaurantStatus.INACTIVE,
            ))

        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Email already registered")

    logger.info(f"Registered {user.role.value} #{user.id} ({user.status.value})")
    return user


# =============================================================================
# LOGIN
# =============================================================================

LOGIN_BLOCKED_MESSAGES = {
    UserStatus.PENDING: "Your account is waiting for admin approval.",
    UserStatus.REJECTED: "Your registration was rejected by admin.",
    UserStatus.SUSPENDED: "Your account has been suspended. Contact admin.",
}


async def authenticate(db: AsyncSession, email: str, password: str) -> tuple[User, str]:
    """
    Check credentials first, then account status.

    Returns:
        (user, access_token)
    """
    user = await db.scalar(select(User).where(User.email == email.lower()))
    if user is None or not verify_password(password, user.password):
        raise AuthenticationFailed("Invalid email or password")

    blocked = LOGIN_BLOCKED_MESSAGES.get(user.status)
    if blocked:
        raise PermissionDenied(blocked)

    token = create_access_token(user.id, user.role.value, user.email)
    return user, token


# =============================================================================
# PASSWORD RESET
# =============================================================================

def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def request_password_reset(db: AsyncSession, email: str) -> Optional[str]:
    """
    Issue a reset token for the account, if it exists.

    Returns the raw token (None when the email is unknown). Only its
    digest is stored.
    """
    user = await db.scalar(select(User).where(User.email == email.lower()))
    if user is None:
        return None

    raw_token, digest = generate_reset_token()
    user.reset_token = digest
    user.reset_token_expiry = datetime.now(timezone.utc) + timedelta(
        minutes=settings.reset_token_expire_minutes
    )
    await db.commit()

    logger.info(f"Password reset requested for user #{user.id}")
    return raw_token


async def reset_password(db: AsyncSession, raw_token: str, new_password: str) -> None:
    user = await db.scalar(select(User).where(User.reset_token == hash_reset_token(raw_token)))

    if user is None or user.reset_token_expiry is None:
        raise ValidationFailed("Invalid or expired token")
    if _as_utc(user.reset_token_expiry) < datetime.now(timezone.utc):
        raise ValidationFailed("Invalid or expired token")

    user.password = hash_password(new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    await db.commit()

    logger.info(f"Password reset for user #{user.id}")


# =============================================================================
# ADMIN SEED
# =============================================================================

async def seed_admin(db: AsyncSession) -> Optional[User]:
    """Create the configured admin unless an ADMIN already exists."""
    if not settings.admin_email or not settings.admin_password:
        logger.info("Admin seed skipped (ADMIN_EMAIL/ADMIN_PASSWORD not set)")
        return None

    existing = await db.scalar(select(User).where(User.role == UserRole.ADMIN).limit(1))
    if existing is not None:
        logger.info("Admin already exists - skipping seed")
        return existing

    admin = User(
        name=settings.admin_name,
        email=settings.admin_email.lower(),
        password=hash_password(settings.admin_password),
        role=UserRole.ADMIN,
        status=UserStatus.APPROVED,
    )
    db.add(admin)
    await db.commit()

    logger.info(f"Admin seeded: {admin.email}")
    return admin
