"""
Shared pytest fixtures for FuelPool tests.

CRITICAL: Database patching must occur at module-import time so SQLite
engine creation (without pool_size/max_overflow params) happens before
api.database is imported anywhere. The _patched_create_engine wrapper
strips pool params that are invalid for SQLite.
"""

import os
import sys
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY api.* imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("AUTH_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("DB_ECHO", "false")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

# ---------------------------------------------------------------------------
# Section 2: Patch SQLAlchemy engine creation for SQLite compatibility
# ---------------------------------------------------------------------------
from sqlalchemy import create_engine as _real_create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def _patched_create_engine(url, **kwargs):
    """Create engine, stripping pool params invalid for SQLite.

    Uses StaticPool so all connections share the same in-memory database.
    """
    if str(url).startswith("sqlite"):
        kwargs.pop("pool_size", None)
        kwargs.pop("max_overflow", None)
        kwargs.pop("pool_pre_ping", None)
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        kwargs["poolclass"] = StaticPool
    return _real_create_engine(url, **kwargs)


# Apply patch before api.database is imported
_patcher = patch("sqlalchemy.create_engine", _patched_create_engine)
_patcher.start()

# Clear any cached api.database imports so patch takes effect
for _mod in list(sys.modules.keys()):
    if _mod.startswith("api.database"):
        del sys.modules[_mod]

from api.database import Base, get_db, engine as test_engine  # noqa: E402
import api.models  # noqa: E402,F401  ensure all ORM models are registered

TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine
)
Base.metadata.create_all(bind=test_engine)

# ---------------------------------------------------------------------------
# Section 3: Core database + client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db():
    """Create a test database session with transaction isolation."""
    connection = test_engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(db):
    """Create a FastAPI TestClient with database dependency override."""
    from api.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Section 4: API key + compliance data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def api_key(db):
    """Create a test API key for authenticated endpoints."""
    from api.auth import generate_api_key, hash_api_key
    from api.models import APIKey

    plain_key = generate_api_key()
    key_hash = hash_api_key(plain_key)

    api_key_obj = APIKey(
        key_hash=key_hash,
        name="Test Key",
        is_active=True,
    )
    db.add(api_key_obj)
    db.commit()
    db.refresh(api_key_obj)

    return plain_key


@pytest.fixture
def auth_enabled(monkeypatch):
    """Enforce API key auth for the duration of a test."""
    from api.config import settings

    monkeypatch.setattr(settings, "auth_enabled", True)


@pytest.fixture
def seeded_routes(db):
    """Load the five sample routes (R001 is the baseline)."""
    from api.repositories import SqlRouteStore
    from src.compliance.seed import build_route_seed

    routes = build_route_seed()
    SqlRouteStore(db).seed_all(routes)
    return routes


@pytest.fixture
def ship_balances(db):
    """Store CB snapshots for a small 2024 fleet: one surplus, one zero, three deficits."""
    from api.repositories import SqlComplianceStore
    from src.compliance.records import ComplianceBalance

    records = [
        ComplianceBalance("SHIP-A", 2024, 500.0),
        ComplianceBalance("SHIP-B", 2024, -200.0),
        ComplianceBalance("SHIP-C", 2024, -100.0),
        ComplianceBalance("SHIP-D", 2024, 0.0),
        ComplianceBalance("SHIP-E", 2024, -900.0),
    ]
    SqlComplianceStore(db).save_all(records)
    return records
