# backend/tests/conftest.py
"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database with foreign keys on,
so services can commit and roll back for real.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import itertools
import os
from typing import Any, Callable, Dict, List, Optional

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("IDENTITY_PROVIDER", "fake")
os.environ.setdefault("EMAIL_PROVIDER", "console")

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from simbay.auth import create_access_token  # noqa: E402
from simbay.database import Base  # noqa: E402
from simbay.integrations import FakeIdentityAdminClient  # noqa: E402
from simbay.models import Booking, LedgerEntry, Profile  # noqa: E402
from simbay.principal import Actor  # noqa: E402

# Far enough ahead that "upcoming" checks always hold. 16:00 UTC is 10:00 in Denver.
SLOT_START = datetime(2031, 6, 2, 16, 0, tzinfo=timezone.utc)


class RecordingEmailSender:
    """Email sender that keeps messages in memory."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[Dict[str, Any]] = []

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        if self.fail:
            raise RuntimeError("mail provider unavailable")
        self.sent.append({"to": to_email, "subject": subject, "html": html_content})
        return {"id": f"test-{len(self.sent)}"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def slot_start() -> datetime:
    return SLOT_START


@pytest.fixture
def make_profile(db: Session) -> Callable[..., Profile]:
    counter = itertools.count(1)

    def _make(
        role: str = "user",
        name: Optional[str] = None,
        email: Optional[str] = None,
        active_until: Optional[datetime] = None,
    ) -> Profile:
        n = next(counter)
        profile = Profile(
            id=f"user-{n:04d}",
            name=name or f"Member {n}",
            email=email or f"member{n}@example.com",
            role=role,
            active_until=active_until,
        )
        db.add(profile)
        db.commit()
        return profile

    return _make


@pytest.fixture
def member(make_profile) -> Profile:
    return make_profile(name="Pat Putter", email="pat@example.com")


@pytest.fixture
def other_member(make_profile) -> Profile:
    return make_profile(name="Sam Slice", email="sam@example.com")


@pytest.fixture
def admin(make_profile) -> Profile:
    return make_profile(role="admin", name="Alex Admin", email="alex@example.com")


def _actor(profile: Profile) -> Actor:
    return Actor.for_profile(profile.id, profile.email, profile.role)


@pytest.fixture
def actor_for() -> Callable[[Profile], Actor]:
    return _actor


@pytest.fixture
def member_actor(member) -> Actor:
    return _actor(member)


@pytest.fixture
def admin_actor(admin) -> Actor:
    return _actor(admin)


@pytest.fixture
def make_booking(db: Session) -> Callable[..., Booking]:
    def _make(profile: Profile, simulator: str, start: datetime, hours: int = 2) -> Booking:
        booking = Booking(
            user_id=profile.id,
            simulator=simulator,
            start_time=start,
            end_time=start + timedelta(hours=hours),
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def make_entry(db: Session) -> Callable[..., LedgerEntry]:
    def _make(
        profile: Profile,
        type: str,
        amount: str,
        booking: Optional[Booking] = None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            user_id=profile.id,
            booking_id=booking.id if booking else None,
            type=type,
            amount=Decimal(amount),
            description=f"test {type}",
        )
        db.add(entry)
        db.commit()
        return entry

    return _make


# Route-level fixtures


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def identity_client() -> FakeIdentityAdminClient:
    return FakeIdentityAdminClient()


@pytest.fixture
def client(db: Session, email_sender, identity_client):
    """Create a test client bound to the test database."""
    from simbay.api.dependencies.database import get_db
    from simbay.api.dependencies.services import get_email_sender, get_identity_client
    from simbay.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_identity_client] = lambda: identity_client

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def auth_headers_for() -> Callable[[Profile], Dict[str, str]]:
    def _headers(profile: Profile) -> Dict[str, str]:
        token = create_access_token(profile.id, profile.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers
