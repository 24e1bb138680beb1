import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["CONFLICT_RETRY_WAIT_SECONDS"] = "0"

from datetime import datetime, timezone
from decimal import Decimal
from itertools import count
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from phonedeals.api.deps import get_mailer
from phonedeals.data import models  # noqa: F401
from phonedeals.data.database import Base, get_db
from phonedeals.data.models import PhoneModel, ReviewModel, UserModel
from phonedeals.domain.schemas import SessionUser
from phonedeals.main import app

_ids = count(1)


class FakeSessionStore:
    """In-memory stand-in for the Redis backed SessionStore."""

    def __init__(self):
        self.sessions = {}

    def get(self, session_id):
        return self.sessions.get(session_id)

    def create(self, user_id, role="user", session_id=None):
        session_id = session_id or f"sid-{user_id}-{next(_ids)}"
        self.sessions[session_id] = SessionUser(id=user_id, role=role)
        return session_id

    def revoke(self, session_id):
        return self.sessions.pop(session_id, None) is not None

    def close(self):
        pass


class RecordingListener:
    def __init__(self, open_=True, fail=False):
        self.events = []
        self.open = open_
        self.fail = fail
        self.closed = False

    @property
    def is_open(self):
        return self.open

    def send(self, event):
        if self.fail:
            raise RuntimeError("socket gone")
        self.events.append(event)

    def close(self):
        self.closed = True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(role="user", firstname="Test", lastname="User"):
        n = next(_ids)
        user = UserModel(firstname=firstname, lastname=lastname, email=f"user{n}@example.com", role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_phone(db, make_user):
    def _make(seller=None, stock=5, price="100.00", brand="Samsung", title=None, disabled=False):
        seller = seller or make_user()
        phone = PhoneModel(
            title=title or f"Phone {next(_ids)}",
            brand=brand,
            image="phone.jpeg",
            price=Decimal(price),
            stock=stock,
            seller_id=seller.id,
        )
        if disabled:
            phone.disable()
        db.add(phone)
        db.commit()
        db.refresh(phone)
        return phone

    return _make


@pytest.fixture
def make_review(db):
    def _make(phone, reviewer, rating=5, comment="Great phone", hidden=False):
        review = ReviewModel(phone_id=phone.id, reviewer_id=reviewer.id, rating=rating, comment=comment)
        db.add(review)
        db.commit()
        if hidden:
            review.hidden_at = datetime.now(timezone.utc)
            db.commit()
        db.refresh(review)
        return review

    return _make


@pytest.fixture
def sessions():
    return FakeSessionStore()


@pytest.fixture
def login(sessions):
    def _login(user):
        return {"X-Session-Id": sessions.create(user.id, user.role)}

    return _login


@pytest.fixture
def mailer():
    return MagicMock()


@pytest.fixture
def client(session_factory, sessions, mailer):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer

    with TestClient(app) as c:
        app.state.session_store = sessions
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def make_listener():
    return RecordingListener
