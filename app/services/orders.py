"""
Order Service

Order placement and seller-driven status changes.

Placement is one transaction: every line is validated and its stock is
taken with a conditional decrement

    UPDATE menu_items SET stock = stock - :qty, orders_count = orders_count + :qty
    WHERE id = :id AND stock >= :qty

so two concurrent orders can never both take the last units. Any failure
rolls the whole order back; nothing is persisted and no stock is touched.
"""

import logging
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import get_settings
from app.core.errors import (
    IllegalTransition,
    InsufficientStock,
    ItemUnavailable,
    NotFound,
    RestaurantNotFound,
)
from app.models import MenuItem, Order, OrderStatus, Restaurant
from app.schemas import OrderLineRequest
from app.services.customers import add_order_to_history
from app.services.restaurants import get_seller_restaurant

logger = logging.getLogger(__name__)
settings = get_settings()

CENT = Decimal("0.01")
DEFAULT_PORTION = "regular"

# Nominal lifecycle. Only enforced when STRICT_ORDER_TRANSITIONS is on.
ORDER_LIFECYCLE: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


# =============================================================================
# PLACEMENT
# =============================================================================

async def _take_stock(db: AsyncSession, restaurant_id: int, line: OrderLineRequest) -> MenuItem:
    """Validate one line and decrement its stock. Raises on failure."""
    menu_item = await db.scalar(
        select(MenuItem).where(
            MenuItem.id == line.menuItemId,
            MenuItem.restaurant_id == restaurant_id,
            MenuItem.is_available.is_(True),
        )
    )
    if menu_item is None:
        raise ItemUnavailable(line.menuItemId)

    result = await db.execute(
        update(MenuItem)
        .where(MenuItem.id == menu_item.id, MenuItem.stock >= line.qty)
        .values(
            stock=MenuItem.stock - line.qty,
            orders_count=MenuItem.orders_count + line.qty,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientStock(menu_item.id, menu_item.name)

    return menu_item


async def place_order(
    db: AsyncSession,
    user_id: int,
    restaurant_id: int,
    lines: Iterable[OrderLineRequest],
) -> Order:
    """
    Place an order for a customer.

    Args:
        user_id: The ordering customer
        restaurant_id: Target restaurant
        lines: Requested lines, processed in the given order

    Returns:
        The persisted PENDING order, with its restaurant loaded

    Raises:
        RestaurantNotFound, ItemUnavailable, InsufficientStock
    """
    lines = list(lines)
    try:
        restaurant = await db.get(Restaurant, restaurant_id)
        if restaurant is None:
            raise RestaurantNotFound(restaurant_id)

        total = Decimal("0")
        snapshot = []

        for line in lines:
            menu_item = await _take_stock(db, restaurant.id, line)

            price = Decimal(menu_item.price).quantize(CENT)
            total += price * line.qty
            snapshot.append({
                "menuItemId": menu_item.id,
                "name": menu_item.name,
                "price": str(price),
                "qty": line.qty,
                "portion": line.portion or DEFAULT_PORTION,
            })

        order = Order(
            user_id=user_id,
            restaurant_id=restaurant.id,
            items=snapshot,
            total_amount=total.quantize(CENT),
            status=OrderStatus.PENDING,
        )
        db.add(order)
        await db.flush()

        await add_order_to_history(db, user_id, {
            "orderId": order.id,
            "restaurantId": restaurant.id,
            "restaurantName": restaurant.name,
            "items": [item["name"] for item in snapshot],
            "total": str(order.total_amount),
        })

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        f"Order #{order.id} placed by user #{user_id} at restaurant #{restaurant.id} "
        f"({len(snapshot)} lines, total {order.total_amount})"
    )

    # Reload with the restaurant for the response
    return await db.scalar(
        select(Order)
        .options(selectinload(Order.restaurant))
        .where(Order.id == order.id)
        .execution_options(populate_existing=True)
    )


async def list_customer_orders(db: AsyncSession, user_id: int) -> list[Order]:
    result = await db.execute(
        select(Order)
        .options(selectinload(Order.restaurant))
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(result.scalars().all())


# =============================================================================
# STATUS TRANSITIONS
# =============================================================================

def transition_order(order: Order, new_status: OrderStatus) -> None:
    """
    Move an order to a new status.

    Sellers have full discretion over the status by default; with
    STRICT_ORDER_TRANSITIONS only ORDER_LIFECYCLE moves are accepted.
    """
    if settings.strict_order_transitions and new_status != order.status:
        if new_status not in ORDER_LIFECYCLE[order.status]:
            raise IllegalTransition(
                f"Cannot move order from {order.status.value} to {new_status.value}"
            )
    order.status = new_status


async def update_order_status(
    db: AsyncSession,
    seller_id: int,
    order_id: int,
    new_status: OrderStatus,
) -> Order:
    """Change the status of an order belonging to the seller's restaurant."""
    restaurant = await get_seller_restaurant(db, seller_id)

    order = await db.scalar(
        select(Order).where(Order.id == order_id, Order.restaurant_id == restaurant.id)
    )
    if order is None:
        raise NotFound("Order not found")

    previous = order.status
    transition_order(order, new_status)
    await db.commit()
    await db.refresh(order)

    logger.info(f"Order #{order.id}: {previous.value} -> {order.status.value} by seller #{seller_id}")
    return order


async def list_restaurant_orders(db: AsyncSession, restaurant_id: int) -> list[Order]:
    result = await db.execute(
        select(Order)
        .options(selectinload(Order.customer))
        .where(Order.restaurant_id == restaurant_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(result.scalars().all())
