"""Pytest fixtures for testing"""

import pytest
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from retail_gateway.api.main import create_app
from retail_gateway.infrastructure.database.models import Base, Branch, Client, Product
from retail_gateway.infrastructure.database.session import get_db
from retail_gateway.domain.models import AuthContext


COMPANY_ID = "company-acme"
OTHER_COMPANY_ID = "company-globex"
USER_ID = "user-cashier"
CASHIER = AuthContext(user_id=USER_ID, company_id=COMPANY_ID)

# Test database: in-memory SQLite shared across connections
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict:
    return {"X-User-Id": USER_ID, "X-Company-Id": COMPANY_ID}


@pytest.fixture
def branch(db: Session) -> Branch:
    """Main store of the test company"""
    row = Branch(company_id=COMPANY_ID, name="Matriz", code="MTZ", is_main=True)
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def second_branch(db: Session) -> Branch:
    row = Branch(company_id=COMPANY_ID, name="Filial Centro", code="CTR")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def products(db: Session, branch: Branch) -> list[Product]:
    """Two products in stock at the main branch: R$ 10.00 and R$ 5.00"""
    rows = [
        Product(company_id=COMPANY_ID, branch_id=branch.id, name="Camiseta", price_cents=1000, stock=10),
        Product(company_id=COMPANY_ID, branch_id=branch.id, name="Meia", price_cents=500, stock=10),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def customer(db: Session, branch: Branch) -> Client:
    row = Client(company_id=COMPANY_ID, branch_id=branch.id, name="Maria Silva", email="maria@example.com")
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def cart_payload(branch: Branch, products: list[Product]) -> Callable[..., dict]:
    """
    Build a cart body: 2 x R$ 10.00 + 1 x R$ 5.00 = R$ 25.00 by default.

    Keyword arguments override top-level fields of the payload.
    """
    shirt, socks = products

    def _build(**overrides) -> dict:
        payload = {
            "items": [
                {
                    "product_id": shirt.id,
                    "product_name": shirt.name,
                    "quantity": 2,
                    "unit_price_cents": 1000,
                    "total_price_cents": 2000,
                },
                {
                    "product_id": socks.id,
                    "product_name": socks.name,
                    "quantity": 1,
                    "unit_price_cents": 500,
                    "total_price_cents": 500,
                },
            ],
            "payment_method": "pix",
            "installments": 1,
            "subtotal_cents": 2500,
            "discount_cents": 0,
            "total_amount_cents": 2500,
            "company_id": COMPANY_ID,
            "branch_id": branch.id,
            "created_by": USER_ID,
        }
        payload.update(overrides)
        return payload

    return _build
