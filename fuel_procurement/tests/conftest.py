import os
from decimal import Decimal

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

# settings are read at import time by the session module
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# FORCE model registration
import fuel_procurement.models  # noqa

from fuel_procurement.db.base import Base
from fuel_procurement.db.session import get_db
from fuel_procurement.models.enums import UserRole
from fuel_procurement.tests.factories import future, make_user, principal_for

if TEST_DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _sqlite_fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_engine(TEST_DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def client(db):
    from fuel_procurement.main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    return make_user(db, UserRole.ADMIN, name="admin")


@pytest.fixture
def manager(db):
    return make_user(db, UserRole.BRANCH_MANAGER, name="manager")


@pytest.fixture
def supplier1(db):
    return make_user(db, UserRole.SUPPLIER, name="supplier1")


@pytest.fixture
def supplier2(db):
    return make_user(db, UserRole.SUPPLIER, name="supplier2")


@pytest.fixture
def diesel_boq(db, admin):
    from fuel_procurement.services.boq_service import BoqService

    return BoqService().create(
        db,
        actor=principal_for(admin),
        fuel_type="Diesel",
        description="Monthly diesel",
        quantity=Decimal("1000"),
        unit="Liters",
        estimated_price_per_unit=Decimal("1200"),
        deadline=future(),
    )
