from datetime import timedelta

from sqlalchemy import DateTime
from sqlmodel import SQLModel

from moturn.db import utcnow
from moturn.models.category import CategoryCreate
from moturn.storage import storage


def test_timestamp_columns_store_naive_utc(engine):
    columns = [
        column
        for table in SQLModel.metadata.sorted_tables
        for column in table.columns
        if column.name in ("created_at", "updated_at", "expire")
    ]
    assert len(columns) == 10
    for column in columns:
        assert type(column.type) is DateTime, column
        assert column.type.timezone is False, column


def test_naive_timestamps_round_trip(make_user):
    expire = utcnow() + timedelta(hours=1)
    storage.save_auth_session("sid-1", {"claims": {}}, expire)
    assert storage.get_auth_session("sid-1").expire == expire

    user = make_user("user1")
    category = storage.create_category(CategoryCreate(name="도서", slug="books"))
    assert user.created_at.tzinfo is None
    assert category.created_at <= utcnow()
