# app/config.py
import os
from pathlib import Path

DEFAULT_ALLOWED_CLIENTS_PATH = Path(__file__).parent / "funding" / "allowed_clients.json"


class Settings:
    # Runtime info
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.getenv("APP_PORT", "8001"))
    APP_WORKERS: int = int(os.getenv("APP_WORKERS", "1"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Provider domain used for CSP script/connect sources and SDK loader checks
    PROVIDER_DOMAIN: str = os.getenv("PROVIDER_DOMAIN", "paypal.com")
    # Global the provider SDK installs on window
    SDK_NAMESPACE: str = os.getenv("SDK_NAMESPACE", "paypal")

    # Structured SDK cookie
    SDK_COOKIE_NAME: str = os.getenv("SDK_COOKIE_NAME", "sdk_cookie")
    SDK_COOKIE_MAX_AGE_SECONDS: int = int(
        os.getenv("SDK_COOKIE_MAX_AGE_SECONDS", str(10 * 365 * 24 * 60 * 60))
    )
    # The iframe is loaded cross-site, so the cookie must be SameSite=None; Secure
    SDK_COOKIE_SECURE: bool = os.getenv("SDK_COOKIE_SECURE", "1") == "1"
    SDK_COOKIE_SAMESITE: str = os.getenv("SDK_COOKIE_SAMESITE", "none")

    # Static allow-list of clients for the remember-funding iframe
    ALLOWED_CLIENTS_PATH: str = os.getenv(
        "ALLOWED_CLIENTS_PATH", str(DEFAULT_ALLOWED_CLIENTS_PATH)
    )


settings = Settings()
