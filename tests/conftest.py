"""Shared fixtures: in-memory database, fake identity provider, fixed clock."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("HEARTBEAT_SWEEP_ENABLED", "0")

import uuid  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session  # noqa: E402

from nakshatra_talks.db import (Astrologer, AstrologerStatus, User,  # noqa: E402
                                UserRole)
from nakshatra_talks.db.sessions import (create_db_engine, get_session,  # noqa: E402
                                         init_db)
from nakshatra_talks.main import app  # noqa: E402
from nakshatra_talks.providers import IdentityProviderABC  # noqa: E402
from nakshatra_talks.schemas import IdentitySession, IdentityUser  # noqa: E402
from nakshatra_talks.services import (PricingGate, SessionLifecycle,  # noqa: E402
                                      WalletLedger)

VALID_OTP = "123456"
T0 = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def _rejected(status_code: int, path: str, msg: str) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", f"http://identity.test/auth/v1{path}")
    response = httpx.Response(status_code, json={"msg": msg}, request=request)
    return httpx.HTTPStatusError(msg, request=request, response=response)


class FakeIdentityProvider(IdentityProviderABC):
    """In-memory stand-in: accepts VALID_OTP and tokens registered with ``issue_token``."""

    def __init__(self) -> None:
        self.tokens: dict[str, IdentityUser] = {}
        self.otp_requests: list[str] = []
        self.closed = False

    def issue_token(self, user_id: uuid.UUID, phone: str | None = None) -> str:
        token = f"token-{user_id}"
        self.tokens[token] = IdentityUser(id=user_id, phone=phone)
        return token

    async def send_otp(self, phone: str) -> None:
        self.otp_requests.append(phone)

    async def verify_otp(self, phone: str, otp: str) -> IdentitySession:
        if otp != VALID_OTP:
            raise _rejected(403, "/verify", "Token has expired or is invalid")
        user_id = uuid.uuid5(uuid.NAMESPACE_URL, f"tel:{phone}")
        token = self.issue_token(user_id, phone)
        return IdentitySession(
            access_token=token,
            refresh_token=f"refresh-{user_id}",
            expires_in=3600,
            user=self.tokens[token],
        )

    async def get_user(self, access_token: str) -> IdentityUser:
        if access_token not in self.tokens:
            raise _rejected(401, "/user", "invalid JWT")
        return self.tokens[access_token]

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def engine():
    db_engine = create_db_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(db):
    return WalletLedger(db)


@pytest.fixture
def lifecycle(db, ledger, clock):
    return SessionLifecycle(db, ledger, PricingGate(db, ledger), clock=clock)


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def client(engine, identity_provider, clock, monkeypatch):
    """TestClient without the lifespan; shared resources are injected on app.state."""
    monkeypatch.setattr(app.state, "engine", engine, raising=False)
    monkeypatch.setattr(app.state, "identity_provider", identity_provider, raising=False)
    monkeypatch.setattr(app.state, "clock", clock, raising=False)
    return TestClient(app)


def make_user(session: Session, balance: str = "0.00", role: UserRole = UserRole.USER, **fields) -> User:
    user = User(
        phone=fields.pop("phone", f"+91{uuid.uuid4().int % 10**10:010d}"),
        wallet_balance=Decimal(balance),
        role=role,
        **fields,
    )
    session.add(user)
    session.flush()
    return user


def make_astrologer(
    session: Session,
    chat_price: str = "10.00",
    call_price: str = "10.00",
    status: AstrologerStatus = AstrologerStatus.APPROVED,
    **fields,
) -> Astrologer:
    astrologer = Astrologer(
        phone=fields.pop("phone", f"+91{uuid.uuid4().int % 10**10:010d}"),
        name=fields.pop("name", "Pandit Sharma"),
        chat_price_per_minute=Decimal(chat_price),
        call_price_per_minute=Decimal(call_price),
        status=status,
        **fields,
    )
    session.add(astrologer)
    session.flush()
    return astrologer


@pytest.fixture
def seeded(engine, identity_provider):
    """Committed user (₹100), approved astrologer with its own login, and an admin.

    Returns plain ids and auth headers so tests never touch detached rows.
    """
    with get_session(engine) as session:
        user = make_user(session, balance="100.00", name="Asha")
        astrologer = make_astrologer(session, chat_price="10.00", call_price="15.00")
        make_user(session, role=UserRole.ASTROLOGER, id=astrologer.id, phone=astrologer.phone)
        admin = make_user(session, role=UserRole.ADMIN)
        ids = {"user": user.id, "astrologer": astrologer.id, "admin": admin.id}
        phones = {"user": user.phone, "astrologer": astrologer.phone, "admin": admin.phone}

    headers = {
        name: {"Authorization": f"Bearer {identity_provider.issue_token(ids[name], phones[name])}"}
        for name in ids
    }
    return {"ids": ids, "headers": headers}
