# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from dopelist.api.v1.dependencies import get_payment_provider_dep
from dopelist.core.security import create_access_token
from dopelist.db.session import Base
from dopelist.db.session import get_db as app_get_session
from dopelist.db.time import utcnow
from dopelist.main import app as fastapi_app
from dopelist.models import Category, City, Identity, IdentityKind, Listing, Section
from dopelist.models.listing import empty_reactions
from dopelist.services.payments import PaymentConfig, StripeClient

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Session with real commits; every table is emptied after the test."""
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


def _payment_config(secret_key: str | None) -> PaymentConfig:
    return PaymentConfig(
        secret_key=secret_key,
        api_base="https://stripe.test",
        timeout_seconds=5.0,
        listing_price_id=None,
        currency="usd",
    )


@pytest.fixture()
def demo_provider() -> StripeClient:
    """Provider with no secret key: checkout runs in demo mode."""
    return StripeClient(_payment_config(None))


@pytest.fixture()
def make_live_provider() -> Callable[[Callable[[httpx.Request], httpx.Response]], StripeClient]:
    """Build a configured provider whose HTTP traffic goes to ``handler``."""

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> StripeClient:
        return StripeClient(
            _payment_config("sk_test_dummy"),
            transport=httpx.MockTransport(handler),
        )

    return _factory


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    demo_provider: StripeClient,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_payment_provider_dep] = lambda: demo_provider
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_payment_provider_dep, None)


@pytest.fixture()
def use_provider(app: FastAPI) -> Callable[[StripeClient], None]:
    """Route the API's payment provider dependency to a specific client."""

    def _use(provider: StripeClient) -> None:
        app.dependency_overrides[get_payment_provider_dep] = lambda: provider

    return _use


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _make_identity(db: Session, identity_id: str, kind: IdentityKind) -> Identity:
    identity = Identity(id=identity_id, kind=kind)
    db.add(identity)
    db.commit()
    db.refresh(identity)
    return identity


def bearer(identity: Identity) -> dict[str, str]:
    """Authorization headers carrying a token for ``identity``."""
    token = create_access_token(identity.id, IdentityKind(identity.kind))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def anon_identity(db_session: Session) -> Identity:
    """Anonymous identity owning most test listings."""
    return _make_identity(db_session, "anon-primary", IdentityKind.ANONYMOUS)


@pytest.fixture()
def other_identity(db_session: Session) -> Identity:
    return _make_identity(db_session, "anon-other", IdentityKind.ANONYMOUS)


@pytest.fixture()
def auth_identity(db_session: Session) -> Identity:
    """Authenticated identity, as provisioned from the auth provider's token."""
    return _make_identity(db_session, "user-authenticated", IdentityKind.AUTHENTICATED)


@pytest.fixture()
def anon_headers(anon_identity: Identity) -> dict[str, str]:
    return bearer(anon_identity)


@pytest.fixture()
def other_headers(other_identity: Identity) -> dict[str, str]:
    return bearer(other_identity)


@pytest.fixture()
def auth_headers(auth_identity: Identity) -> dict[str, str]:
    return bearer(auth_identity)


@pytest.fixture()
def city(db_session: Session) -> City:
    city = City(name="Austin", slug="austin")
    db_session.add(city)
    db_session.commit()
    db_session.refresh(city)
    return city


@pytest.fixture()
def category(db_session: Session) -> Category:
    category = Category(section=str(Section.FOR_SALE), name="Bikes", slug="bikes", icon="🚲")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture()
def post_data(city: City, category: Category) -> dict[str, Any]:
    """Valid ``postData`` payload for the create endpoint."""
    return {
        "title": "Vintage road bike",
        "description": "Steel frame, recently serviced.",
        "cityId": city.id,
        "categoryId": category.id,
        "price": "$250",
        "location": "East Austin",
        "images": ["bike-1.jpg", "bike-2.jpg"],
        "contactInfo": {
            "email": {"value": "seller@example.com", "visible": True},
            "phone": {"value": "+1 555 0100", "visible": False},
        },
    }


@pytest.fixture()
def make_listing(
    db_session: Session,
    city: City,
    category: Category,
) -> Callable[..., Listing]:
    """Insert a listing directly, bypassing the payment gate."""
    counter = {"n": 0}

    def _factory(owner: Identity, created_at: datetime | None = None, **overrides: Any) -> Listing:
        counter["n"] += 1
        created_at = created_at or utcnow()
        values: dict[str, Any] = {
            "owner_id": owner.id,
            "city_id": city.id,
            "category_id": category.id,
            "title": f"Listing {counter['n']}",
            "description": "Something worth buying",
            "images": [],
            "contact_info": {
                "email": {"value": "owner@example.com", "visible": True},
                "phone": {"value": "+1 555 0199", "visible": False},
            },
            "votes": 0,
            "reactions": empty_reactions(),
            "payment_token": f"fixture_token_{counter['n']}",
            "created_at": created_at,
            "expires_at": created_at + timedelta(days=7),
            "comments_close_at": created_at + timedelta(days=7),
            "active": True,
        }
        values.update(overrides)
        listing = Listing(**values)
        db_session.add(listing)
        db_session.commit()
        db_session.refresh(listing)
        return listing

    return _factory


@pytest.fixture()
def listing(make_listing: Callable[..., Listing], anon_identity: Identity) -> Listing:
    """A fresh, visible listing owned by ``anon_identity``."""
    return make_listing(anon_identity)


@pytest.fixture()
def headers_for() -> Callable[[Identity], dict[str, str]]:
    return bearer
