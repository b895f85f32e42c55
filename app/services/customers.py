"""
Customer Profile Service

CRUD for customer preference profiles plus the admin-side customer
actions. A profile is created at registration, on explicit creation, or
lazily on the first profile write or first order.
"""

import logging
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import Conflict, NotFound
from app.models import Customer, Gender, User
from app.schemas import CustomerProfileWrite
from app.services.accounts import apply_account_action, log_admin_action

logger = logging.getLogger(__name__)


def _apply_fields(customer: Customer, data: CustomerProfileWrite) -> None:
    """Copy only the fields present in the request body."""
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(customer, field, value)

    if customer.gender != Gender.OTHER:
        customer.gender_other_text = None


async def get_profile(db: AsyncSession, user_id: int) -> Optional[Customer]:
    return await db.scalar(select(Customer).where(Customer.user_id == user_id))


async def create_profile(db: AsyncSession, user_id: int, data: CustomerProfileWrite) -> Customer:
    if await get_profile(db, user_id) is not None:
        raise Conflict("Customer profile already exists")

    customer = Customer(user_id=user_id, dietary_preferences=[], order_history=[])
    _apply_fields(customer, data)
    db.add(customer)
    await db.commit()
    await db.refresh(customer)

    logger.info(f"Customer profile #{customer.id} created for user #{user_id}")
    return customer


async def update_profile(
    db: AsyncSession,
    user_id: int,
    data: CustomerProfileWrite,
    create_missing: bool = False,
) -> Customer:
    """
    Partially update a profile.

    Args:
        create_missing: create the profile instead of raising NotFound
    """
    customer = await get_profile(db, user_id)
    if customer is None:
        if not create_missing:
            raise NotFound("Customer profile not found")
        customer = Customer(user_id=user_id, dietary_preferences=[], order_history=[])
        db.add(customer)

    _apply_fields(customer, data)
    await db.commit()
    await db.refresh(customer)
    return customer


async def delete_profile(db: AsyncSession, user_id: int) -> None:
    result = await db.execute(delete(Customer).where(Customer.user_id == user_id))
    if result.rowcount == 0:
        raise NotFound("Customer profile not found")
    await db.commit()
    logger.info(f"Customer profile of user #{user_id} deleted")


def profile_for_update(user_id: int):
    """Row-locked profile lookup for writers that read-modify-write order_history."""
    return (
        select(Customer)
        .where(Customer.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


async def add_order_to_history(db: AsyncSession, user_id: int, entry: dict[str, Any]) -> Optional[Customer]:
    """
    Prepend an order summary to the profile history.

    Customers without a profile keep none; the profile is only created
    through the profile endpoints. Does not commit; runs inside the order
    placement transaction with the profile row locked.
    """
    customer = await db.scalar(profile_for_update(user_id))
    if customer is None:
        return None

    # Reassign so the JSON column is flagged dirty
    customer.order_history = [entry, *(customer.order_history or [])]
    return customer


# =============================================================================
# ADMIN
# =============================================================================

async def list_profiles(db: AsyncSession) -> list[Customer]:
    result = await db.execute(
        select(Customer)
        .options(selectinload(Customer.user))
        .order_by(Customer.created_at.desc(), Customer.id.desc())
    )
    return list(result.scalars().all())


async def admin_delete_profile(db: AsyncSession, admin: User, user_id: int) -> None:
    """Remove a customer's profile; the user account itself stays."""
    result = await db.execute(delete(Customer).where(Customer.user_id == user_id))
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Customer profile not found")

    log_admin_action(db, admin.id, "Deleted Customer Profile", user_id)
    await db.commit()


async def set_customer_status(db: AsyncSession, admin: User, user_id: int, action: str) -> User:
    """Suspend or reactivate a user that has a customer profile."""
    if await get_profile(db, user_id) is None:
        raise NotFound("Customer profile not found")
    return await apply_account_action(db, admin, user_id, action)
