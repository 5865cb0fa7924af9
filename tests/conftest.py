from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from moturn import db
from moturn.auth.auth_handler import start_session
from moturn.main import app
from moturn.models.category import CategoryCreate
from moturn.models.item import ItemCreate
from moturn.models.user import UserUpsert
from moturn.realtime import chat_rooms
from moturn.storage import storage


@pytest.fixture(autouse=True)
def engine(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    monkeypatch.setattr(db, "engine", engine)
    db.create_db_and_tables()
    chat_rooms.clear()
    yield engine
    chat_rooms.clear()
    engine.dispose()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user():
    def _make(user_id, **fields):
        fields.setdefault("email", f"{user_id}@example.com")
        fields.setdefault("nickname", user_id)
        return storage.upsert_user(UserUpsert(id=user_id, **fields))
    return _make


@pytest.fixture
def login(make_user):
    """Create the user if needed and return auth headers for a live session."""
    def _login(user_id):
        if storage.get_user(user_id) is None:
            make_user(user_id)
        token = start_session(user_id, {"claims": {"sub": user_id}})
        return {"Authorization": f"Bearer {token}"}
    return _login


@pytest.fixture
def category():
    return storage.create_category(CategoryCreate(name="디지털기기", slug="digital"))


@pytest.fixture
def make_item(make_user, category):
    def _make(seller_id="seller", images=None, **fields):
        if storage.get_user(seller_id) is None:
            make_user(seller_id)
        data = {"title": "맥북 프로", "price": 1000, "category_id": category.id, "region_code": "성수동"}
        data.update(fields)
        return storage.create_item(seller_id, ItemCreate(**data), images or [])
    return _make


@pytest.fixture
def png_bytes():
    def _png(size=(800, 400), color=(200, 30, 30)):
        out = BytesIO()
        Image.new("RGB", size, color).save(out, format="PNG")
        return out.getvalue()
    return _png
