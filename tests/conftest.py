import os

# must be set before the app and its settings are imported
os.environ["ENV"] = "testing"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("LOG_DIR", "logs")
os.environ["SEED_CATALOG"] = "false"

import pytest
from datetime import datetime, timedelta, timezone
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.config import settings
from core.database import Base
from core.policy import Identity
from models.products import Product
from services.seed import seed_catalog
from utils.deps import get_db

# SYNC SQLite for testing (matches sync service layer)
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(session: Session):
    """
    Async HTTP client for the app, wired to the test database.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def catalog(session: Session) -> dict[str, Product]:
    """Demo catalog, products keyed by name."""
    seed_catalog(session)
    return {p.name: p for p in session.query(Product).all()}


@pytest.fixture
def headphones(catalog) -> Product:
    return catalog["Wireless Headphones"]


@pytest.fixture
def alice() -> Identity:
    return Identity(user_id="5b0c1f2e-alice", email="alice@example.com")


@pytest.fixture
def bob() -> Identity:
    return Identity(user_id="9d3e7a41-bob", email="bob@example.com")


def _make_token(identity: Identity, expires_in: timedelta = timedelta(minutes=15), **claims) -> str:
    """Token shaped like the ones the auth provider issues."""
    payload = {
        "sub": identity.user_id,
        "email": identity.email,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + expires_in,
        **claims
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture
def alice_headers(alice) -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(alice)}"}


@pytest.fixture
def bob_headers(bob) -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(bob)}"}


@pytest.fixture
def make_token():
    return _make_token
