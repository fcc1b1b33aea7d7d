"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# --- Default test environment
os.environ.setdefault("DATABASE_URL", "sqlite:///./propbook_test.db")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test-secret")
os.environ.setdefault("PROPBOOK_ENV", "dev")

from propbook.main import app  # noqa: E402
from propbook.db import get_db  # noqa: E402
from propbook.dependencies import get_payment_gateway  # noqa: E402
from propbook.models import (  # noqa: E402
    Apartment,
    ApartmentUnit,
    Payment,
    PaymentMethod,
    Property,
    User,
)
from propbook.schemas.gateway import GatewayOrder  # noqa: E402
from propbook.services.signature import SignatureVerifier  # noqa: E402

DB_PATH = Path("./propbook_test.db")
TEST_SECRET = os.environ["RAZORPAY_KEY_SECRET"]


def _run_migrations() -> None:
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Reset the database file at session start
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False,
                                   future=True, expire_on_commit=False)

# --- (2) Build the schema through Alembic only
_run_migrations()


class FakeGateway:
    """In-memory stand-in for the Razorpay client."""

    def __init__(self) -> None:
        self.orders: list[dict[str, Any]] = []
        self.payments: dict[str, dict[str, Any]] = {}
        self.order_amounts: dict[str, int] = {}
        self.fail_create: Exception | None = None
        self.fail_fetch_payment: Exception | None = None
        self.fail_fetch_order: Exception | None = None

    def create_order(
        self, amount_minor: int, currency: str, receipt: str, notes: Mapping[str, str]
    ) -> GatewayOrder:
        if self.fail_create is not None:
            raise self.fail_create
        order_id = f"order_{len(self.orders) + 1}"
        self.orders.append(
            {"id": order_id, "amount": amount_minor, "currency": currency, "receipt": receipt, "notes": dict(notes)}
        )
        self.order_amounts[order_id] = amount_minor
        return GatewayOrder(
            id=order_id, amount=amount_minor, currency=currency, receipt=receipt, status="created", notes=dict(notes)
        )

    def fetch_payment(self, payment_id: str) -> dict[str, Any]:
        if self.fail_fetch_payment is not None:
            raise self.fail_fetch_payment
        return self.payments[payment_id]

    def fetch_order(self, order_id: str) -> dict[str, Any]:
        if self.fail_fetch_order is not None:
            raise self.fail_fetch_order
        return {"id": order_id, "amount": self.order_amounts.get(order_id, 0)}


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def fake_gateway() -> Iterator[FakeGateway]:
    gateway = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield gateway
    app.dependency_overrides.pop(get_payment_gateway, None)


@pytest.fixture
def verifier() -> SignatureVerifier:
    return SignatureVerifier(TEST_SECRET)


@pytest.fixture
async def client(fake_gateway: FakeGateway) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _factory(first_name: str = "Asha", last_name: str = "Menon", email: str | None = None) -> User:
        user = User(first_name=first_name, last_name=last_name, email=email or f"{uuid4().hex}@example.com")
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _factory


@pytest.fixture
def make_property(db_session: Session) -> Callable[..., Property]:
    def _factory(price: str | None = "1000.00", name: str = "Lakeside Villa", location: str = "Kochi") -> Property:
        prop = Property(name=name, location=location, price=Decimal(price) if price is not None else None)
        db_session.add(prop)
        db_session.commit()
        db_session.refresh(prop)
        return prop

    return _factory


@pytest.fixture
def make_unit(db_session: Session) -> Callable[..., ApartmentUnit]:
    def _factory(
        price: str | None = "500.00",
        unit_number: str = "101",
        is_available: bool = True,
        apartment: Apartment | None = None,
    ) -> ApartmentUnit:
        if apartment is None:
            apartment = Apartment(name="Palm Towers", location="Bengaluru")
            db_session.add(apartment)
            db_session.flush()
        unit = ApartmentUnit(
            apartment_id=apartment.id,
            unit_number=unit_number,
            floor_number=1,
            bedrooms=2,
            bathrooms=2,
            area=Decimal("1150.00"),
            price=Decimal(price) if price is not None else None,
            is_available=is_available,
        )
        db_session.add(unit)
        db_session.commit()
        db_session.refresh(unit)
        return unit

    return _factory


@pytest.fixture
def make_payment(db_session: Session) -> Callable[..., Payment]:
    """Insert a payment row directly, bypassing validation."""

    def _factory(
        user: User,
        property_id: int,
        amount_paid: str,
        *,
        total_price: str | None = None,
        is_deposit: bool = False,
        payment_date: datetime | None = None,
        method: PaymentMethod = PaymentMethod.UPI,
    ) -> Payment:
        payment = Payment(
            user_id=user.id,
            property_id=property_id,
            total_price=Decimal(total_price) if total_price is not None else None,
            amount_paid=Decimal(amount_paid),
            payment_method=method,
            payment_details={"upi_id": "asha@upi"},
            status="completed",
            payment_date=payment_date or datetime.now(tz=UTC),
            is_deposit=is_deposit,
        )
        db_session.add(payment)
        db_session.commit()
        db_session.refresh(payment)
        return payment

    return _factory
