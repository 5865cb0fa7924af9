import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError

from moturn import config
from moturn.auth import provider
from moturn.auth.auth_handler import end_session, start_session
from moturn.auth.dependencies import get_current_user, session_token
from moturn.models.user import UserRead, UserUpsert
from moturn.storage import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])

STATE_COOKIE = "moturn_oauth_state"


@router.get("/login")
def login():
    """
    Start the sign-in flow by redirecting the browser to the identity provider.
    """
    if not provider.is_configured():
        raise HTTPException(status_code=500, detail="Identity provider is not configured")

    state = secrets.token_urlsafe(24)
    try:
        url = provider.authorization_url(state)
    except provider.ProviderError as e:
        logger.error(f"Cannot start login: {e}")
        raise HTTPException(status_code=502, detail="Identity provider is unavailable")

    response = RedirectResponse(url=url, status_code=302)
    response.set_cookie(STATE_COOKIE, state, max_age=600, httponly=True, samesite="lax")
    return response


@router.get("/callback")
def callback(request: Request, code: Optional[str] = None, state: Optional[str] = None):
    """
    Provider redirect target: trade the code for tokens, upsert the user, open a session.
    """
    if not code:
        raise HTTPException(status_code=400, detail="Authorization code is missing")
    expected_state = request.cookies.get(STATE_COOKIE)
    if not state or not expected_state or not secrets.compare_digest(state, expected_state):
        raise HTTPException(status_code=400, detail="Invalid state parameter")

    try:
        tokens = provider.exchange_code(code)
        claims = provider.id_token_claims(tokens)
    except provider.ProviderError as e:
        logger.warning(f"Login callback failed: {e}")
        raise HTTPException(status_code=401, detail="Login failed")

    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Login failed")

    try:
        user = storage.upsert_user(UserUpsert(
            id=str(claims["sub"]),
            email=claims.get("email"),
            first_name=claims.get("first_name"),
            last_name=claims.get("last_name"),
            profile_image_url=claims.get("profile_image_url"),
        ))
        token = start_session(user.id, provider.session_data(tokens, claims))
    except SQLAlchemyError:
        logger.exception(f"Error signing in user {claims['sub']}")
        raise HTTPException(status_code=500, detail="Failed to sign in")
    logger.info(f"User {user.id} signed in")

    response = RedirectResponse(url="/", status_code=302)
    response.delete_cookie(STATE_COOKIE)
    response.set_cookie(
        config.SESSION_COOKIE,
        token,
        max_age=int(config.SESSION_TTL.total_seconds()),
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/logout")
def logout(token: Optional[str] = Depends(session_token)):
    if token:
        try:
            end_session(token)
        except JWTError:
            logger.debug("Logout with an unreadable session token")

    url = "/"
    if provider.is_configured():
        try:
            url = provider.end_session_url() or "/"
        except provider.ProviderError as e:
            logger.warning(f"No end-session URL from provider: {e}")

    response = RedirectResponse(url=url, status_code=302)
    response.delete_cookie(config.SESSION_COOKIE)
    return response


@router.get("/auth/user", response_model=UserRead)
def get_auth_user(user_id: str = Depends(get_current_user)):
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
