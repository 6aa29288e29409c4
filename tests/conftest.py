"""Pytest fixtures for order management tests."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from order_management.application.customers import CreateCustomerUseCase, CreateCustomerDTO
from order_management.application.products import CreateProductUseCase, CreateProductDTO
from order_management.database import create_engine, create_session_factory, create_tables
from order_management.infrastructure.unit_of_work import UnitOfWork
from order_management.main import create_app


@pytest.fixture
def database_url(tmp_path):
    """SQLite database file unique to each test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"


@pytest.fixture
async def uow(database_url):
    """Unit of work over a freshly created schema."""
    engine = create_engine(database_url)
    await create_tables(engine)
    yield UnitOfWork(create_session_factory(engine))
    await engine.dispose()


@pytest.fixture
def make_customer(uow):
    async def _make(name="Alice Smith", email="alice@example.com", phone="555-0100"):
        return await CreateCustomerUseCase(uow)(CreateCustomerDTO(name=name, email=email, phone=phone))

    return _make


@pytest.fixture
def make_product(uow):
    async def _make(price="10.00", name="Widget", category="tools", **kwargs):
        return await CreateProductUseCase(uow)(CreateProductDTO(
            name=name,
            category=category,
            description=f"{name} description",
            price=Decimal(price),
            **kwargs
        ))

    return _make


@pytest.fixture
def count_orders(uow):
    async def _count():
        async with uow() as session:
            return await session.orders.count()

    return _count


@pytest.fixture
def client(database_url):
    """Test client with the strict status policy."""
    app = create_app(database_url=database_url, strict_status_transitions=True)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def permissive_client(tmp_path):
    """Test client that accepts any recognized status value."""
    app = create_app(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'permissive.db'}",
        strict_status_transitions=False
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api_customer(client):
    response = client.post(
        "/api/customers",
        json={"name": "Carol Jones", "email": "carol@example.com", "phone": "555-0101"}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def api_products(client):
    """P1 at 10.00 and P2 at 5.50 in different categories."""
    p1 = client.post(
        "/api/products",
        json={"name": "Hammer", "category": "tools", "description": "Steel hammer", "price": 10.00, "stock": 5}
    )
    p2 = client.post(
        "/api/products",
        json={"name": "Gloves", "category": "apparel", "description": "Work gloves", "price": 5.50, "stock": 20}
    )
    assert p1.status_code == 201
    assert p2.status_code == 201
    return p1.json(), p2.json()
