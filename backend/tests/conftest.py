# backend/tests/conftest.py
"""
Pytest configuration for the TrailBlazers backend.

Environment overrides are applied BEFORE any trailblazers import so the
settings singleton, the password context and the Celery app pick them up.
Each test gets a fresh in-memory SQLite database.
"""

import os

os.environ["IS_TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BROADCAST_URL"] = "memory://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("CI", "true")

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from trailblazers.core.enums import RoleName
from trailblazers.core.security import get_password_hash
from trailblazers.database import Base
import trailblazers.models  # noqa: F401
from trailblazers.models.hike import Hike
from trailblazers.models.user import User
from trailblazers.services.identity_service import AuthUser, IdentityService

DEFAULT_PASSWORD = "trail-secret"


class InMemoryKeyValueStore:
    """Dict-backed stand-in for the Redis key-value store."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    def delete(self, key: str) -> int:
        return 1 if self.data.pop(key, None) is not None else 0


class RecordingDispatcher:
    """Captures events handed to the EventPublisher."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        self.calls.append((event_type, payload))


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
def db(engine) -> Iterator[Session]:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    def _make_user(
        email: str = "guest@example.com",
        role: RoleName = RoleName.GUEST,
        name: str = "Alex Walker",
        password: str = DEFAULT_PASSWORD,
        claims: Optional[Dict[str, Any]] = None,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=get_password_hash(password),
            role=role.value,
            custom_claims=claims or {},
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_hike(db: Session) -> Callable[..., Hike]:
    def _make_hike(**overrides: Any) -> Hike:
        values: Dict[str, Any] = {
            "title": "Bruce Trail Escarpment Loop",
            "location": "Milton, ON",
            "description": "A guided loop along the escarpment edge.",
            "start_date": date(2024, 6, 1),
            "end_date": date(2024, 6, 14),
            "days": ["Monday", "Friday"],
            "times": ["08:00", "13:00"],
            "duration": "4 hours",
            "difficulty": "Challenging",
            "max_participants": 10,
            "current_participants": 0,
            "price": Decimal("79.99"),
        }
        values.update(overrides)
        hike = Hike(**values)
        db.add(hike)
        db.commit()
        return hike

    return _make_hike


@pytest.fixture
def guest(make_user) -> User:
    return make_user()


@pytest.fixture
def guest_principal(guest: User) -> AuthUser:
    return AuthUser.from_user(guest)


@pytest.fixture
def admin(make_user) -> User:
    return make_user(email="admin@example.com", role=RoleName.ADMIN, name="Ada Admin")


@pytest.fixture
def guide(make_user) -> User:
    return make_user(email="guide@example.com", role=RoleName.GUIDE, name="Gil Guide")


@pytest.fixture
def booker_info() -> Dict[str, str]:
    return {
        "fullName": "Alex Walker",
        "email": "alex@example.com",
        "phone": "4165550123",
        "address": "12 Trailhead Road, Toronto",
        "birthdate": "04/07/1990",
    }


@pytest.fixture
def client(db: Session, kv_store: InMemoryKeyValueStore, dispatcher: RecordingDispatcher):
    from trailblazers.api.dependencies.database import get_db
    from trailblazers.api.dependencies.services import get_kv_store, get_schedule_service
    from trailblazers.events.publisher import EventPublisher
    from trailblazers.main import app
    from trailblazers.services.schedule_service import ScheduleService

    def override_get_db() -> Iterator[Session]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_kv_store] = lambda: kv_store
    app.dependency_overrides[get_schedule_service] = lambda: ScheduleService(
        db, publisher=EventPublisher(dispatcher)
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(db: Session) -> Callable[[User], Dict[str, str]]:
    def _headers(user: User, password: str = DEFAULT_PASSWORD) -> Dict[str, str]:
        token = IdentityService(db).sign_in(user.email, password).id_token
        return {"Authorization": f"Bearer {token}"}

    return _headers
