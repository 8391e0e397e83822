import os

# Must be set before the application modules are imported.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TRACING_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "CRITICAL"

from decimal import Decimal

import fakeredis
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from main import app
from services.order_service.schemas import OrderCreate, OrderItemCreate
from services.order_service.service import OrderService
from services.product_service.models import Product
from shared.config.database import ORDER_SCHEMA, PRODUCT_SCHEMA, Base, get_db
from shared.messaging import CacheService, EventPublisher, get_cache, get_event_publisher
from shared.security import ADMIN_ROLE, create_access_token


class RecordingPublisher(EventPublisher):
    """Keeps published events in memory instead of sending them to Redis."""

    def __init__(self):
        super().__init__(redis=None)
        self.events = []

    async def publish(self, topic: str, payload: dict) -> None:
        self.events.append((topic, payload))

    @property
    def topics(self):
        return [topic for topic, _ in self.events]


@pytest.fixture
async def engine(tmp_path):
    # File database so concurrent sessions get their own connections;
    # schemas are dropped because SQLite has none.
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}",
        poolclass=NullPool,
        execution_options={"schema_translate_map": {PRODUCT_SCHEMA: None, ORDER_SCHEMA: None}},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
async def redis():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def cache(redis):
    return CacheService(redis, default_ttl=60)


@pytest.fixture
def order_service(db, publisher, cache):
    return OrderService(db, publisher, cache)


@pytest.fixture
async def client(session_factory, publisher, cache):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_cache] = lambda: cache
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user-1", admin: bool = False) -> dict:
        claims = {"sub": user_id}
        if admin:
            claims["role"] = ADMIN_ROLE
        return {"Authorization": f"Bearer {create_access_token(claims)}"}
    return _headers


@pytest.fixture
def make_product(session_factory):
    async def _make(name="Widget", price="10.00", stock=10, available=True) -> Product:
        async with session_factory() as session:
            product = Product(
                name=name,
                price=Decimal(price),
                stock_quantity=stock,
                is_available=available,
            )
            session.add(product)
            await session.commit()
            await session.refresh(product)
            return product
    return _make


@pytest.fixture
def stock_of(session_factory):
    async def _stock(product_id: int) -> int:
        async with session_factory() as session:
            return await session.scalar(select(Product.stock_quantity).where(Product.id == product_id))
    return _stock


@pytest.fixture
def order_request():
    def _request(*lines, shipping_address="1 Main St", notes=None) -> OrderCreate:
        return OrderCreate(
            shipping_address=shipping_address,
            notes=notes,
            items=[OrderItemCreate(product_id=pid, quantity=qty) for pid, qty in lines],
        )
    return _request
