"""
Test configuration and fixtures.

Provides:
- Database session with savepoint (rollback after each test)
- JWT token minting for authenticated tests
- HTTPX AsyncClient with proper headers
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Callable, Generator

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TESTING", "1")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from recruit_api.core.deps import COOKIE_NAME, get_db
from recruit_api.core.security import create_session_token
from recruit_api.db.base import Base
from recruit_api.db.models import Team, User, UserTeam
from recruit_api.db.session import SessionLocal, engine
from recruit_api.main import app


# =============================================================================
# Database Fixtures (Savepoint pattern)
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def create_schema() -> Generator[None, None, None]:
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates a database session with savepoint for test isolation.

    App code can call commit() without ending the test transaction: each
    commit releases a savepoint and the outer transaction is rolled back.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = SessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def make_user(db: Session) -> Callable[..., User]:
    """Factory for users with unique emails."""
    def _make(name: str = "Test User", **kwargs) -> User:
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=f"user-{uuid.uuid4().hex[:8]}@test.com",
            **kwargs,
        )
        db.add(user)
        db.flush()
        return user

    return _make


@pytest.fixture(scope="function")
def make_team(db: Session) -> Callable[..., Team]:
    """Factory for teams, optionally seeded with members."""
    def _make(name: str | None = None, members: tuple[User, ...] = (), **kwargs) -> Team:
        team = Team(
            id=uuid.uuid4(),
            name=name or f"Team {uuid.uuid4().hex[:8]}",
            **kwargs,
        )
        db.add(team)
        db.flush()
        for member in members:
            db.add(UserTeam(user_id=member.id, team_id=team.id))
        db.flush()
        return team

    return _make


@pytest.fixture(scope="function")
def test_user(make_user) -> User:
    """The authenticated actor for API tests."""
    return make_user(name="Acting User")


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str
    cookie_name: str = COOKIE_NAME


@pytest.fixture(scope="function")
def test_auth(test_user: User) -> TestAuth:
    """Create JWT token for test user."""
    token = create_session_token(
        user_id=test_user.id,
        token_version=test_user.token_version,
    )
    return TestAuth(user=test_user, token=token)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated AsyncClient."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    test_auth: TestAuth,
) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated AsyncClient with JWT cookie and CSRF header."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={test_auth.cookie_name: test_auth.token},
        headers={"X-Requested-With": "XMLHttpRequest"},  # CSRF header
    ) as c:
        yield c

    app.dependency_overrides.clear()
