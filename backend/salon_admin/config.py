import json
import os
import threading
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


def _parse_allowed_origins(raw_allowed_origins: str) -> list[str]:
    # Support both CSV format and JSON array format
    allowed_origins: list[str] = []
    if raw_allowed_origins.startswith("["):
        try:
            parsed_list = json.loads(raw_allowed_origins)
        except json.JSONDecodeError as exc:
            raise ValueError(f"ALLOWED_ORIGINS JSON is malformed: {exc}") from exc
        if not isinstance(parsed_list, list):
            raise ValueError("ALLOWED_ORIGINS JSON must be an array")
        allowed_origins = [
            origin.strip() for origin in parsed_list if isinstance(origin, str) and origin.strip()
        ]
    else:
        allowed_origins = [
            origin.strip() for origin in raw_allowed_origins.split(",") if origin.strip()
        ]

    if not allowed_origins:
        raise ValueError("ALLOWED_ORIGINS must contain at least one origin")

    if "*" in allowed_origins:
        raise ValueError(
            "ALLOWED_ORIGINS cannot contain '*' when credentialed requests are used"
        )

    for origin in allowed_origins:
        parsed = urlparse(origin)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                "ALLOWED_ORIGINS must contain valid http/https origins with host"
            )
    return allowed_origins


class Settings(BaseModel):
    app_name: str = Field(default="Salon Admin Console")
    debug: bool = Field(default=False)
    allowed_origins: list[str] = Field(default_factory=list)
    admin_api_base_url: str = Field(default="")
    admin_api_timeout_seconds: float = Field(default=10.0)
    secret_key: str | None = Field(default=None)
    algorithm: str = Field(default="HS256")

    @classmethod
    def from_env(cls) -> "Settings":
        secret_key = os.getenv("SECRET_KEY", "").strip()
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set")

        raw_allowed_origins = os.getenv("ALLOWED_ORIGINS", "").strip()
        if not raw_allowed_origins:
            raise ValueError("ALLOWED_ORIGINS environment variable must be set")
        allowed_origins = _parse_allowed_origins(raw_allowed_origins)

        admin_api_base_url = os.getenv("ADMIN_API_BASE_URL", "").strip()
        if not admin_api_base_url:
            raise ValueError("ADMIN_API_BASE_URL environment variable must be set")

        parsed_api = urlparse(admin_api_base_url)
        if parsed_api.scheme not in {"http", "https"} or not parsed_api.hostname:
            raise ValueError("ADMIN_API_BASE_URL must be an http/https URL with host")

        raw_timeout = os.getenv(
            "ADMIN_API_TIMEOUT_SECONDS",
            str(cls.model_fields["admin_api_timeout_seconds"].default),
        ).strip()
        try:
            admin_api_timeout_seconds = float(raw_timeout)
        except ValueError as exc:
            raise ValueError("ADMIN_API_TIMEOUT_SECONDS must be a number") from exc
        if admin_api_timeout_seconds <= 0:
            raise ValueError("ADMIN_API_TIMEOUT_SECONDS must be greater than 0")

        return cls(
            app_name=os.getenv("APP_NAME", cls.model_fields["app_name"].default),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            allowed_origins=allowed_origins,
            admin_api_base_url=admin_api_base_url.rstrip("/"),
            admin_api_timeout_seconds=admin_api_timeout_seconds,
            secret_key=secret_key,
            algorithm=os.getenv("ALGORITHM", cls.model_fields["algorithm"].default),
        )


# Settings are created on first access so modules import without environment validation
_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    Uses double-checked locking so concurrent first accesses build a single
    instance.

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None


class _SettingsProxy:
    """Proxy to defer settings creation until first attribute access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
