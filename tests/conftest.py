# tests/conftest.py
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from orderdesk.core.config import Settings
from orderdesk.core.migrations import run_migrations
from orderdesk.database import create_db_engine
from orderdesk.main import create_app
from orderdesk.repositories.location_repo import LocationRepository
from orderdesk.repositories.order_repo import OrderRepository
from orderdesk.schemas.order import OrderInput
from orderdesk.services.location_resolver import LocationResolver
from orderdesk.services.order_service import OrderService


@pytest.fixture
def engine(tmp_path):
    """Fresh, migrated SQLite file database per test."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'orders.db'}")
    run_migrations(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def location_repo():
    return LocationRepository()


@pytest.fixture
def order_repo():
    return OrderRepository()


@pytest.fixture
def resolver(location_repo):
    return LocationResolver(location_repo)


@pytest.fixture
def order_service(order_repo, location_repo, resolver):
    return OrderService(order_repo, location_repo, resolver)


@pytest.fixture
def make_input():
    """Factory for OrderInput with a valid default name."""

    def _make(**fields) -> OrderInput:
        fields.setdefault("name", "Иван Петров")
        return OrderInput(**fields)

    return _make


@pytest.fixture
def api_settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'api.db'}",
        DEFAULT_CITY=None,
    )


@pytest.fixture
def client(api_settings):
    # Context manager runs the lifespan: engine, migrations, seeding.
    with TestClient(create_app(api_settings)) as client:
        yield client
