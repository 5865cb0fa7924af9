"""
OpenID Connect client for the external identity provider.

Only the authorization-code flow is used: /api/login sends the browser to the
provider, the provider sends it back to /api/callback with a code, and the code
is traded for tokens here.
"""
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
from urllib.parse import urlencode

import requests
from jose import jwt

from moturn import config
from moturn.db import utcnow

logger = logging.getLogger(__name__)

TIMEOUT = 10


class ProviderError(Exception):
    pass


def is_configured() -> bool:
    return bool(config.OIDC_ISSUER_URL and config.OIDC_CLIENT_ID)


@lru_cache(maxsize=4)
def discover(issuer_url: str) -> dict:
    url = issuer_url.rstrip("/") + "/.well-known/openid-configuration"
    try:
        response = requests.get(url, timeout=TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise ProviderError(f"Failed to reach identity provider: {e}") from e
    if response.status_code != 200:
        raise ProviderError(f"Discovery failed with status {response.status_code}")
    return response.json()


def metadata() -> dict:
    return discover(config.OIDC_ISSUER_URL)


def authorization_url(state: str) -> str:
    params = {
        "client_id": config.OIDC_CLIENT_ID,
        "response_type": "code",
        "redirect_uri": config.OIDC_REDIRECT_URI,
        "scope": config.OIDC_SCOPE,
        "prompt": "login consent",
        "state": state,
    }
    return f"{metadata()['authorization_endpoint']}?{urlencode(params)}"


def end_session_url() -> Optional[str]:
    endpoint = metadata().get("end_session_endpoint")
    if not endpoint:
        return None
    params = {
        "client_id": config.OIDC_CLIENT_ID,
        "post_logout_redirect_uri": config.POST_LOGOUT_REDIRECT_URI,
    }
    return f"{endpoint}?{urlencode(params)}"


def _token_request(data: dict) -> dict:
    data = dict(data, client_id=config.OIDC_CLIENT_ID)
    if config.OIDC_CLIENT_SECRET:
        data["client_secret"] = config.OIDC_CLIENT_SECRET
    try:
        response = requests.post(
            metadata()["token_endpoint"],
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        raise ProviderError(f"Token request failed: {e}") from e

    if response.status_code != 200:
        logger.warning(f"Token endpoint returned {response.status_code}: {response.text}")
        raise ProviderError(f"Token request failed with status {response.status_code}")
    return response.json()


def exchange_code(code: str) -> dict:
    return _token_request({
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": config.OIDC_REDIRECT_URI,
    })


def refresh_tokens(refresh_token: str) -> dict:
    return _token_request({"grant_type": "refresh_token", "refresh_token": refresh_token})


def id_token_claims(tokens: dict) -> dict:
    # came straight from the token endpoint over TLS, so the signature is not rechecked
    if "id_token" not in tokens:
        raise ProviderError("Token response has no id_token")
    return jwt.get_unverified_claims(tokens["id_token"])


def session_data(tokens: dict, claims: dict) -> dict:
    """What gets stored in the sessions table for a signed-in user."""
    expires_at = None
    if tokens.get("expires_in"):
        expires_at = (utcnow() + timedelta(seconds=int(tokens["expires_in"]))).isoformat()
    elif claims.get("exp"):
        expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc).replace(tzinfo=None).isoformat()
    return {
        "claims": claims,
        "access_token": tokens.get("access_token"),
        "refresh_token": tokens.get("refresh_token"),
        "expires_at": expires_at,
    }

