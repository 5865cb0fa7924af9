import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from moturn import config
from moturn.auth import provider
from moturn.auth.auth_handler import decode_token
from moturn.db import utcnow
from moturn.storage import storage

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


def session_token(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """Bearer header wins over the session cookie."""
    return token or request.cookies.get(config.SESSION_COOKIE)


def _refresh(sid: str, sess: dict, expire: datetime) -> bool:
    refresh_token = sess.get("refresh_token")
    if not refresh_token:
        return False
    try:
        tokens = provider.refresh_tokens(refresh_token)
        claims = provider.id_token_claims(tokens) if "id_token" in tokens else sess.get("claims", {})
    except provider.ProviderError as e:
        logger.warning(f"Refreshing session {sid} failed: {e}")
        return False

    refreshed = provider.session_data(tokens, claims)
    if not refreshed["refresh_token"]:
        refreshed["refresh_token"] = refresh_token
    storage.save_auth_session(sid, refreshed, expire)
    return True


def authenticate(token: Optional[str]) -> Optional[str]:
    """Resolve a session token to a user id, or None when it does not name a live session."""
    if not token:
        return None
    try:
        payload = decode_token(token)
    except JWTError:
        return None

    user_id, sid = payload.get("sub"), payload.get("sid")
    if not user_id or not sid:
        return None

    auth_session = storage.get_auth_session(sid)
    if auth_session is None or auth_session.expire <= utcnow():
        return None

    expires_at = auth_session.sess.get("expires_at")
    if expires_at and datetime.fromisoformat(expires_at) <= utcnow():
        if not _refresh(sid, auth_session.sess, auth_session.expire):
            return None
    return user_id


def get_current_user(token: Optional[str] = Depends(session_token)) -> str:
    user_id = authenticate(token)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id


def get_optional_user(token: Optional[str] = Depends(session_token)) -> Optional[str]:
    return authenticate(token)
