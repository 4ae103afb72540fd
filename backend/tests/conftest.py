import os
from typing import Callable, Dict, Generator

os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite:///:memory:")
os.environ.setdefault("SHARE_ENCRYPTION_KEY", "unit-test-share-secret")
os.environ.setdefault("SECRET_KEY", "unit-test-jwt-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app import models
from app.api import deps
from app.core.config import settings
from app.core.security import create_access_token
from app.core.share_cipher import ShareCipher
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app


@pytest.fixture(scope="session")
def cipher() -> ShareCipher:
    return ShareCipher(settings.SHARE_ENCRYPTION_KEY, settings.SHARE_ENCRYPTION_SALT)


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db: Session, cipher: ShareCipher) -> Generator[TestClient, None, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_cipher] = lambda: cipher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db: Session, email: str, name: str, profile_image: str = None) -> models.User:
    user = models.User(email=email, name=name, profile_image=profile_image)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _make_record(db: Session, owner: models.User, **fields) -> models.MealRecord:
    values = {
        "name": "Kimchi stew",
        "photos": ["/uploads/stew.jpg"],
        "location": "Mapo, Seoul",
        "rating": 5,
        "memo": "Best in town",
        "price": 9000,
        "category": "restaurant",
    }
    values.update(fields)
    record = models.MealRecord(user_id=owner.id, **values)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@pytest.fixture()
def make_user(db: Session) -> Callable[..., models.User]:
    return lambda email, name, profile_image=None: _make_user(db, email, name, profile_image)


@pytest.fixture()
def make_record(db: Session) -> Callable[..., models.MealRecord]:
    return lambda owner, **fields: _make_record(db, owner, **fields)


@pytest.fixture()
def auth_headers() -> Callable[[models.User], Dict[str, str]]:
    return lambda user: {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def sharer(db: Session) -> models.User:
    return _make_user(db, "sharer@example.com", "Sharer", "https://cdn.example.com/a.png")


@pytest.fixture()
def viewer(db: Session) -> models.User:
    return _make_user(db, "viewer@example.com", "Viewer")


@pytest.fixture()
def record(db: Session, sharer: models.User) -> models.MealRecord:
    return _make_record(db, sharer)
