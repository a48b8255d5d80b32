"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``opsboard/__init__.py`` selects the appropriate
config based on the FLASK_ENV environment variable.

The primary contact store is any database SQLAlchemy can reach through
``DATABASE_URL``.  When that variable is unset the store lookup is
disabled and customer searches rely on the external directory alone.
"""

import logging
import os

# Module-level logger for startup warnings emitted by config classes.
_logger = logging.getLogger(__name__)

# Fallback URI so Flask-SQLAlchemy can initialize when no store is set.
_LOCAL_SQLITE_URI = "sqlite:///opsboard-dev.db"


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


class BaseConfig:
    """
    Shared configuration values inherited by all environments.

    Secrets and connection strings are loaded from environment variables
    so they never appear in source control.
    """

    # -- SQLAlchemy --------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("DATABASE_URL", _LOCAL_SQLITE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ECHO: bool = False

    # -- Primary contact store ---------------------------------------------
    # Enabled only when a real store is configured.  Override explicitly
    # with CONTACT_STORE_ENABLED=true to query the local SQLite fallback.
    CONTACT_STORE_ENABLED: bool = _env_flag(
        "CONTACT_STORE_ENABLED",
        "true" if os.environ.get("DATABASE_URL") else "false",
    )

    # Row cap for the loose ``phone LIKE '%NNNN'`` lookup.
    CONTACT_STORE_ROW_LIMIT: int = _env_int("CONTACT_STORE_ROW_LIMIT", 50)

    # -- External contact directory (CRM) ----------------------------------
    DIRECTORY_API_BASE_URL: str = os.environ.get(
        "DIRECTORY_API_BASE_URL",
        "https://restyle-backend.netlify.app/.netlify/functions",
    )
    DIRECTORY_CONTACTS_ENDPOINT: str = os.environ.get(
        "DIRECTORY_CONTACTS_ENDPOINT", "getcontacts"
    )
    # Optional bearer token.  The directory accepts anonymous reads.
    DIRECTORY_API_KEY: str = os.environ.get("DIRECTORY_API_KEY", "")

    # -- Customer search ---------------------------------------------------
    CUSTOMER_SEARCH_DEFAULT_PAGES: int = _env_int("CUSTOMER_SEARCH_DEFAULT_PAGES", 10)
    CUSTOMER_SEARCH_MAX_PAGES: int = _env_int("CUSTOMER_SEARCH_MAX_PAGES", 20)

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # =====================================================================
    # Production validation helpers
    # =====================================================================

    @classmethod
    def validate_production_settings(cls, app_config: dict) -> None:
        """
        Verify that the production settings are usable.

        Called by ``create_app()`` when ``config_name == 'production'``.
        Raises ``RuntimeError`` for hard requirements and logs warnings
        for soft requirements.

        Args:
            app_config: The ``app.config`` dict after loading the
                        config class.

        Raises:
            RuntimeError: If any critical setting is missing or unsafe.
        """
        errors: list[str] = []

        # -- Directory URL must be HTTPS (hard fail) -----------------------
        base_url = app_config.get("DIRECTORY_API_BASE_URL", "")
        if not base_url:
            errors.append("DIRECTORY_API_BASE_URL is not set.")
        elif not base_url.startswith("https://"):
            errors.append(
                f"DIRECTORY_API_BASE_URL ({base_url}) must use HTTPS "
                "in production."
            )

        # -- Page ceiling bounds (hard fail) -------------------------------
        default_pages = app_config.get("CUSTOMER_SEARCH_DEFAULT_PAGES", 0)
        max_pages = app_config.get("CUSTOMER_SEARCH_MAX_PAGES", 0)
        if not 1 <= default_pages <= max_pages:
            errors.append(
                "CUSTOMER_SEARCH_DEFAULT_PAGES must be between 1 and "
                f"CUSTOMER_SEARCH_MAX_PAGES (got {default_pages} / {max_pages})."
            )

        if errors:
            combined = "\n  - ".join(errors)
            raise RuntimeError(f"Production configuration errors:\n  - {combined}")

        # -- Primary store (soft warning) ----------------------------------
        # Searches still work against the directory alone.
        if not app_config.get("CONTACT_STORE_ENABLED"):
            _logger.warning(
                "Primary contact store is disabled (DATABASE_URL not set) — "
                "customer search will only scan the external directory."
            )

        # -- LOG_LEVEL sanity check (soft warning) -------------------------
        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "LOG_LEVEL=DEBUG is not recommended in production — "
                "SQL queries and directory URLs may appear in logs."
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, SQL echo enabled."""

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment: in-memory SQLite store, fake directory URL.

    Tests replace the HTTP transport, so the directory URL never
    leaves the process.
    """

    TESTING: bool = True

    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    CONTACT_STORE_ENABLED: bool = True

    DIRECTORY_API_BASE_URL: str = "https://directory.test/functions"
    DIRECTORY_CONTACTS_ENDPOINT: str = "getcontacts"
    DIRECTORY_API_KEY: str = ""

    CUSTOMER_SEARCH_DEFAULT_PAGES: int = 10
    CUSTOMER_SEARCH_MAX_PAGES: int = 20

    LOG_LEVEL: str = "DEBUG"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    The application factory calls ``validate_production_settings()``
    at startup and will refuse to launch if critical values are wrong.
    """

    DEBUG: bool = False
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
