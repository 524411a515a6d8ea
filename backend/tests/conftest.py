"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database (shared across threads
through ``StaticPool`` so the TestClient sees the same data), services
wired to a fixed clock, and helpers to mint bearer tokens per role.
"""

import sys
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add the backend directory to the Python path so tests can import
# models, services, repositories, etc.
backend_root = Path(__file__).parent.parent
sys.path.insert(0, str(backend_root))

from database import Base, get_db  # noqa: E402
import models.customer  # noqa: E402,F401
import models.duck  # noqa: E402,F401
import models.log  # noqa: E402,F401
import models.sale  # noqa: E402,F401
import models.seller  # noqa: E402,F401
import models.users  # noqa: E402,F401
from models.users import UserRole  # noqa: E402
from repositories.entity_store import SqlEntityStore  # noqa: E402
from services.auth_service import AuthService  # noqa: E402
from services.customer_service import CustomerService  # noqa: E402
from services.duck_service import DuckService  # noqa: E402
from services.seller_service import SellerService  # noqa: E402
from utils.tokenJWT import create_access_token  # noqa: E402

NOW = datetime(2024, 6, 15, 12, 0, 0)


class FixedClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def store(db) -> SqlEntityStore:
    return SqlEntityStore(db)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def make_duck(store, clock):
    service = DuckService(store, clock)

    def _make(name="Duck", price="100.00", mother_id=None):
        return service.create_duck(name, Decimal(price), mother_id)

    return _make


@pytest.fixture
def make_customer(store, clock):
    service = CustomerService(store, clock)
    counter = {"n": 0}

    def _make(name="Customer", eligible=False, cpf=None):
        counter["n"] += 1
        return service.create_customer(
            name, cpf or f"000.000.000-{counter['n']:02d}", "(11) 90000-0000", "Farm Road 1", eligible
        )

    return _make


@pytest.fixture
def make_seller(store, clock):
    service = SellerService(store, clock)
    counter = {"n": 0}

    def _make(name="Seller", cpf=None, employee_id=None):
        counter["n"] += 1
        n = counter["n"]
        return service.create_seller(name, cpf or f"999.999.999-{n:02d}", employee_id or f"EMP-{n:03d}")

    return _make


# ==================== HTTP ====================

@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient

    from main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def users(store):
    service = AuthService(store)
    return {
        UserRole.ADMIN: service.create_user("admin", "admin123", "Admin", UserRole.ADMIN),
        UserRole.SELLER: service.create_user("seller", "seller123", "Seller", UserRole.SELLER),
        UserRole.MANAGER: service.create_user("manager", "manager123", "Manager", UserRole.MANAGER),
    }


@pytest.fixture
def auth_headers(users):
    def _headers(role: UserRole = UserRole.ADMIN) -> dict:
        user = users[role]
        token = create_access_token({"sub": user.username, "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers
