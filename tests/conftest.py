import os

# Settings are read at import time and DATABASE_URL is required
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, build_engine, get_db
from app.schemas.order import OrderCreate
from app.schemas.product import ProductCreate
from app.services.seed import seed_database


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="function")
async def session_factory(anyio_backend):
    """Fresh in-memory database per test, shared by the test and the app."""
    engine = build_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    async def override_get_db():
        """Override database dependency for testing."""
        db = factory()
        try:
            yield db
        finally:
            await db.close()

    # Override the dependency
    app.dependency_overrides[get_db] = override_get_db

    yield factory

    app.dependency_overrides.pop(get_db, None)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(session_factory):
    """Create database session for direct database access in tests."""
    session = session_factory()

    yield session

    await session.close()


@pytest.fixture(scope="function")
async def seeded_session(db_session):
    """Database session over the standard seed data."""
    await seed_database(db_session)
    yield db_session


@pytest.fixture(scope="function")
async def client(session_factory):
    """Create HTTP client bound to the app and the test database."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture
def make_product():
    """Build a valid ProductCreate, overriding any field."""
    def _build(**overrides) -> ProductCreate:
        data = {
            "name": "Test Product",
            "sku": "TEST-001",
            "description": "A product for tests",
            "price": "99.99",
            "stock_quantity": 10,
            "category": "Accessories",
        }
        data.update(overrides)
        return ProductCreate(**data)
    return _build


@pytest.fixture
def make_order():
    """Build a valid OrderCreate for a product, overriding any field."""
    def _build(product_id: int, **overrides) -> OrderCreate:
        data = {
            "product_id": product_id,
            "order_number": "ORD-20250115-0001",
            "customer_name": "Alice Nguyen",
            "customer_email": "alice@gmail.com",
            "quantity": 1,
            "order_date": "2025-01-15",
            "delivery_date": None,
        }
        data.update(overrides)
        return OrderCreate(**data)
    return _build
