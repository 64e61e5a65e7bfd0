# backend/pos_backend/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///pos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Sale transactions: retry on transient lock failures (deadlock victim,
    # "database is locked", lock timeout). Business-rule failures never retry.
    SALE_RETRY_ATTEMPTS = int(os.environ.get("SALE_RETRY_ATTEMPTS", "3"))
    SALE_RETRY_BACKOFF = float(os.environ.get("SALE_RETRY_BACKOFF", "0.1"))

    # PostgreSQL only: SET LOCAL lock_timeout for the sale transaction. 0 keeps the server default.
    SALE_LOCK_TIMEOUT_MS = int(os.environ.get("SALE_LOCK_TIMEOUT_MS", "0"))

    # Identity headers populated by the authenticating gateway in front of this service
    AUTH_BUSINESS_HEADER = os.environ.get("AUTH_BUSINESS_HEADER", "X-Business-ID")
    AUTH_USER_HEADER = os.environ.get("AUTH_USER_HEADER", "X-User-ID")
    AUTH_ROLE_HEADER = os.environ.get("AUTH_ROLE_HEADER", "X-User-Role")

    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]
