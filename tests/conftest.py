"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before and dropped after
every test, so no test data persists.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from trade_ledger.main import app
from trade_ledger.models import Client, Order
from trade_ledger.models.base import Base, get_db
from trade_ledger.models.enums import ClientType, OrderStatus
from trade_ledger.reconciliation.fiscal_year import fiscal_year_of


# SQLite for tests, no external database needed.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)



# pysqlite defers BEGIN and mishandles SAVEPOINT. Take over transaction
# control so audit savepoints behave as they do on PostgreSQL.
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the FastAPI app
    uses the test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def customer(db_session):
    """An international client. Clients are owned by the CRM, so rows are inserted directly."""
    row = Client(
        name="Dubai Textiles LLC",
        client_type=ClientType.INTERNATIONAL,
        country="UAE",
    )
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def make_order(db_session, customer):
    """Factory for orders, which the ledger only ever reads."""
    counter = {"n": 0}

    def _make(
        total_amount="1000.00",
        currency="USD",
        status=OrderStatus.PENDING,
        created_at=None,
        fiscal_year=None,
    ):
        counter["n"] += 1
        created_at = created_at or datetime(2025, 9, 1)
        order = Order(
            order_number=f"ORD-{counter['n']:04d}",
            client_id=customer.id,
            status=status.value if isinstance(status, OrderStatus) else status,
            fiscal_year=fiscal_year if fiscal_year is not None else fiscal_year_of(created_at),
            currency=currency,
            total_amount=Decimal(total_amount),
            created_at=created_at,
        )
        db_session.add(order)
        db_session.commit()
        return order

    return _make
