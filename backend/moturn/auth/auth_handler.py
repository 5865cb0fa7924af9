from datetime import timedelta
from typing import Optional
from uuid import uuid4

from jose import jwt

from moturn import config
from moturn.db import utcnow
from moturn.storage import storage

ALGORITHM = "HS256"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token):
    return jwt.decode(token, config.SECRET_KEY, algorithms=[ALGORITHM])


def start_session(user_id: str, sess: dict) -> str:
    """Persist a session row for user_id and return the signed token pointing at it."""
    sid = uuid4().hex
    storage.save_auth_session(sid, sess, utcnow() + config.SESSION_TTL)
    return create_access_token({"sub": user_id, "sid": sid}, expires_delta=config.SESSION_TTL)


def end_session(token: str) -> None:
    payload = decode_token(token)
    if payload.get("sid"):
        storage.delete_auth_session(payload["sid"])
