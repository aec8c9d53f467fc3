"""Shared fixtures: in-memory SQLite database, access control, HTTP client."""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.core.security import create_access_token
from storefront.db.base import Base, get_db
from storefront.main import app
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.product import Product
from storefront.rbac import build_access_control


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def access():
    return build_access_control()


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(subject_id: str, *roles: str) -> dict[str, str]:
        token = create_access_token(subject_id, roles)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_product(session):
    async def _make(
        name: str = "Coffee",
        price: str = "10.00",
        stock: int = 20,
        is_active: bool = True,
        is_archived: bool = False,
    ) -> Product:
        product = Product(
            name=name,
            price=Decimal(price),
            stock=stock,
            is_active=is_active,
            is_archived=is_archived,
        )
        session.add(product)
        await session.flush()
        return product

    return _make


@pytest.fixture
def make_order(session):
    """Insert an order directly, bypassing the workflow checks."""

    async def _make(
        product: Product,
        user_id: str | None = None,
        cashier_id: str | None = None,
        status: OrderStatus = OrderStatus.PENDING,
        quantity: int = 1,
    ) -> Order:
        subtotal = product.price * quantity
        order = Order(
            user_id=user_id,
            cashier_id=cashier_id,
            status=status,
            total=subtotal,
            items=[
                OrderItem(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=product.price,
                    subtotal=subtotal,
                )
            ],
        )
        session.add(order)
        await session.flush()
        return order

    return _make
