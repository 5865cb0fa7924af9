import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "production")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///moturn.db")

# Signs the session token handed to the browser
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
SESSION_COOKIE = "moturn_session"
SESSION_TTL = timedelta(days=7)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# OpenID Connect identity provider
OIDC_ISSUER_URL = os.getenv("OIDC_ISSUER_URL", "https://replit.com/oidc")
OIDC_CLIENT_ID = os.getenv("OIDC_CLIENT_ID")
OIDC_CLIENT_SECRET = os.getenv("OIDC_CLIENT_SECRET")
OIDC_REDIRECT_URI = os.getenv("OIDC_REDIRECT_URI", "http://localhost:8000/api/callback")
OIDC_SCOPE = "openid email profile offline_access"
POST_LOGOUT_REDIRECT_URI = os.getenv("POST_LOGOUT_REDIRECT_URI", "http://localhost:8000/")

# Item images; without a bucket thumbnails are stored inline as data URLs
S3_BUCKET = os.getenv("S3_BUCKET")
S3_REGION = os.getenv("S3_REGION", "ap-northeast-2")

DEFAULT_REGION_CODE = os.getenv("DEFAULT_REGION_CODE", "성수동")


def is_development():
    return APP_ENV == "development"
