"""
Shared fixtures.

Every test gets its own SQLite file database and an httpx client wired to
the app through ASGITransport. Prediction services are replaced with
in-memory fakes so no ML server is needed.
"""

import os
import tempfile

# Configure before anything imports app settings
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{tempfile.mkdtemp()}/import.db"
os.environ["ENV_MODE"] = "development"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEBUG"] = "false"
os.environ.pop("ADMIN_PASSWORD", None)
os.environ.pop("STRICT_ORDER_TRANSITIONS", None)

from decimal import Decimal
from typing import Any, Optional

import httpx
import pytest

from app.core.security import create_access_token, hash_password
from app.database import build_engine, build_session_maker, get_db, init_db
from app.main import app
from app.models import (
    Customer,
    MenuItem,
    Restaurant,
    RestaurantStatus,
    User,
    UserRole,
    UserStatus,
)
from app.services.prediction import (
    BasePredictionService,
    PredictionResult,
    get_forecast_service,
    get_recommendation_service,
)

PASSWORD = "secret123"


class FakePredictionService(BasePredictionService):
    """Records payloads and answers with a canned result."""

    def __init__(self, data: Optional[dict[str, Any]] = None, fail: bool = False):
        self.data = data or {}
        self.fail = fail
        self.payloads: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    async def predict(self, payload: dict[str, Any]) -> PredictionResult:
        self.payloads.append(payload)
        if self.fail:
            return PredictionResult(
                success=False,
                error_message="service down",
                error_code="transport_error",
                provider=self.provider_name,
            )
        return PredictionResult(success=True, data=self.data, provider=self.provider_name)

    async def health_check(self) -> bool:
        return not self.fail


@pytest.fixture
async def engine(tmp_path):
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
def recommender() -> FakePredictionService:
    return FakePredictionService(data={"recommended_food": []})


@pytest.fixture
def forecaster() -> FakePredictionService:
    return FakePredictionService(data={"next_7_days_forecast": []})


@pytest.fixture
async def client(session_maker, recommender, forecaster):
    async def _get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_recommendation_service] = lambda: recommender
    app.dependency_overrides[get_forecast_service] = lambda: forecaster

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# DATA HELPERS
# =============================================================================

class Marketplace:
    """
    Seeds rows directly through short-lived sessions.

    Each helper commits and closes its session so no SQLite write lock is
    held while a request is in flight.
    """

    def __init__(self, session_maker):
        self.session_maker = session_maker
        self._seq = 0

    def _email(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}{self._seq}@example.com"

    async def user(
        self,
        role: UserRole,
        status: UserStatus = UserStatus.APPROVED,
        email: Optional[str] = None,
        name: str = "Test User",
    ) -> User:
        async with self.session_maker() as session:
            user = User(
                name=name,
                email=email or self._email(role.value.lower()),
                password=hash_password(PASSWORD),
                role=role,
                status=status,
            )
            session.add(user)
            await session.commit()
            return user

    async def admin(self) -> User:
        return await self.user(UserRole.ADMIN, name="Admin")

    async def customer(self, profile: Optional[dict[str, Any]] = None) -> User:
        """Customer user; with a preference profile when ``profile`` is given."""
        user = await self.user(UserRole.CUSTOMER)
        if profile is not None:
            async with self.session_maker() as session:
                session.add(Customer(
                    user_id=user.id,
                    dietary_preferences=profile.get("dietary_preferences", []),
                    favorite_cuisine=profile.get("favorite_cuisine"),
                    order_history=profile.get("order_history", []),
                ))
                await session.commit()
        return user

    async def seller(
        self,
        status: UserStatus = UserStatus.APPROVED,
        restaurant_name: Optional[str] = "Spice Hub",
        cuisines: Optional[list[str]] = None,
    ) -> tuple[User, Optional[Restaurant]]:
        user = await self.user(UserRole.SELLER, status=status)
        if restaurant_name is None:
            return user, None

        restaurant = await self.restaurant(
            user,
            name=restaurant_name,
            cuisines=cuisines or ["Sri Lankan"],
            status=(
                RestaurantStatus.ACTIVE if status == UserStatus.APPROVED else RestaurantStatus.INACTIVE
            ),
        )
        return user, restaurant

    async def restaurant(
        self,
        seller: User,
        name: str = "Spice Hub",
        cuisines: Optional[list[str]] = None,
        status: RestaurantStatus = RestaurantStatus.ACTIVE,
    ) -> Restaurant:
        async with self.session_maker() as session:
            restaurant = Restaurant(
                seller_id=seller.id,
                name=name,
                contact_number="0771234567",
                address="Colombo",
                cuisines=cuisines or [],
                status=status,
            )
            session.add(restaurant)
            await session.commit()
            return restaurant

    async def menu_item(
        self,
        restaurant: Restaurant,
        name: str = "Chicken Kottu",
        price: str = "1200.00",
        stock: int = 20,
        is_available: bool = True,
        orders_count: int = 0,
    ) -> MenuItem:
        async with self.session_maker() as session:
            item = MenuItem(
                restaurant_id=restaurant.id,
                name=name,
                price=Decimal(price),
                stock=stock,
                orders_count=orders_count,
                is_available=is_available,
            )
            session.add(item)
            await session.commit()
            return item

    async def get(self, model, pk):
        """Fresh read of one row."""
        async with self.session_maker() as session:
            return await session.get(model, pk)

    async def all(self, statement):
        async with self.session_maker() as session:
            result = await session.execute(statement)
            return list(result.scalars().all())


@pytest.fixture
def market(session_maker) -> Marketplace:
    return Marketplace(session_maker)


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.role.value, user.email)
    return {"Authorization": f"Bearer {token}"}
