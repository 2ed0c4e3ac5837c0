# backend/shopdesk/config.py
from __future__ import annotations
import os


def _csv(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/shopdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///shopdesk.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Printed on invoices and statements
    BUSINESS_NAME = os.environ.get("BUSINESS_NAME", "Hygienic & Comfort Co.")
    BUSINESS_ADDRESS = os.environ.get(
        "BUSINESS_ADDRESS",
        "Shop no.1, Bhausaheb Paranjape Chawl Near Shiv mandir, "
        "Ambernath East, Thane Central, MAHARASHTRA - 421502",
    )
    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "₹")

    # Prefixed to the stored 10-digit phone when building messaging links
    PHONE_COUNTRY_CODE = os.environ.get("PHONE_COUNTRY_CODE", "91")

    DEFAULT_MIN_STOCK = int(os.environ.get("DEFAULT_MIN_STOCK", "5"))
    PRODUCTS_PER_PAGE = int(os.environ.get("PRODUCTS_PER_PAGE", "8"))

    # Upper bound on how long a worker serves a cached dashboard snapshot
    DASHBOARD_CACHE_SECONDS = float(os.environ.get("DASHBOARD_CACHE_SECONDS", "5"))
    DEFAULT_CATEGORIES = _csv("DEFAULT_CATEGORIES", "General,Hygienic,Comfort")

    CORS_ALLOWED_ORIGINS = set(_csv(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
    ))

    PASSWORD_RESET_TTL_MINUTES = int(os.environ.get("PASSWORD_RESET_TTL_MINUTES", "30"))
