from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from labtrack.database import Base, get_db
from labtrack.main import app
from labtrack.models.user import User
from labtrack.services.auth import create_session, hash_password


@pytest.fixture()
def db_session() -> Generator:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session) -> Generator[TestClient, None, None]:
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Tests use an in-memory DB via dependency override; skip app startup side effects.
    original_startup = list(app.router.on_startup)
    app.router.on_startup.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.router.on_startup[:] = original_startup
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session) -> Callable[..., tuple[User, dict[str, str]]]:
    counter = {"n": 0}

    def _make(tier: str = "elite") -> tuple[User, dict[str, str]]:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            password_hash=hash_password("secret123"),
            full_name="Test User",
            subscription_tier=tier,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        session = create_session(db_session, user.id)
        return user, {"Authorization": f"Bearer {session.id}"}

    return _make
