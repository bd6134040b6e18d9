"""
Test suite configuration.

SQLite in-memory zamiast postgresa, in-memory redis stub pod LockService.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CART_LOCK_WAIT_SECONDS", "0.2")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.dependencies import get_lock_service
from storefront.data.database import Base, get_db
from storefront.data.models import ProductModel, ProfileModel, UserModel
from storefront.main import create_app
from storefront.services.lock_service import LockService


class FakeRedis:
    """Just the SET NX / EVAL subset LockService uses."""

    def __init__(self):
        self.store = {}

    def set(self, name, value, nx=False, ex=None):
        if nx and name in self.store:
            return None
        self.store[name] = value
        return True

    def eval(self, script, numkeys, key, token):
        if self.store.get(key) == token:
            del self.store[key]
            return 1
        return 0


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
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def lock_service(fake_redis):
    return LockService(client=fake_redis, ttl=30, wait_seconds=0.2)


@pytest.fixture
def products(db):
    items = [
        ProductModel(id=1, name="Keyboard", price=Decimal("10.00"), category_id=1, stock=10),
        ProductModel(id=2, name="Mouse", price=Decimal("5.00"), category_id=1, stock=25),
        ProductModel(id=3, name="Headphones", price=Decimal("19.99"), category_id=2, stock=5, featured=True),
    ]
    db.add_all(items)
    db.commit()
    return {p.id: p for p in items}


@pytest.fixture
def user(db):
    u = UserModel(id=1, username="user")
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def profile(db, user):
    p = ProfileModel(
        user_id=user.id,
        first_name="Joe",
        last_name="Joesephus",
        address="1 Main St",
        city="Dallas",
        state="TX",
        zip="75002",
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture
def user_without_profile(db):
    u = UserModel(id=2, username="george")
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def app(session_factory, lock_service):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    return app


@pytest.fixture
def client(app):
    # bez `with`, lifespan (create_all na prawdziwej bazie) sie nie odpala
    return TestClient(app)


@pytest.fixture
def headers(user):
    return {"X-Authenticated-User": user.username}
