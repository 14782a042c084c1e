"""
Settings read from the environment, database URL checks and logging setup.

The database is chosen with ``PETCLINIC_DATABASE_URL`` or, when that is not
set, the individual ``DB_HOST``/``DB_PORT``/``DB_NAME``/``DB_USER``/
``DB_PASSWORD``/``DB_ECHO`` variables.
"""

import logging
import logging.config
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import parse_qs, urlparse

TRUTHY_VALUES = ("true", "1", "yes", "on", "enabled")


class ConfigError(Exception):
    """A setting is missing or cannot be parsed."""


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _missing(key: str) -> ConfigError:
    return ConfigError(f"Required environment variable '{key}' is not set")


class EnvironmentConfig:
    """Typed accessors for environment variables."""

    @staticmethod
    def get_str(
        key: str, default: Optional[str] = None, required: bool = False
    ) -> Optional[str]:
        value = os.getenv(key, default)
        if required and value is None:
            raise _missing(key)
        return value

    @staticmethod
    def get_int(
        key: str, default: Optional[int] = None, required: bool = False
    ) -> Optional[int]:
        """
        Raises:
            ConfigError: If the variable is required and unset, or not an integer
        """
        raw = os.getenv(key)
        if raw is None:
            if required:
                raise _missing(key)
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"Environment variable '{key}' must be an integer, got: {raw}")

    @staticmethod
    def get_bool(
        key: str, default: Optional[bool] = None, required: bool = False
    ) -> Optional[bool]:
        """Anything outside ``TRUTHY_VALUES`` (case-insensitive) reads as False."""
        raw = os.getenv(key)
        if raw is None:
            if required:
                raise _missing(key)
            return default
        return raw.lower() in TRUTHY_VALUES

    @staticmethod
    def get_list(
        key: str,
        separator: str = ",",
        default: Optional[List[str]] = None,
        required: bool = False,
    ) -> Optional[List[str]]:
        """Split on ``separator``, stripping items and dropping empty ones."""
        raw = os.getenv(key)
        if raw is None:
            if required:
                raise _missing(key)
            return default or []
        return [item.strip() for item in raw.split(separator) if item.strip()]


class DatabaseURLValidator:
    """Checks that a URL names a backend the clinic can run on."""

    SUPPORTED_DRIVERS = {
        "postgresql": ["postgresql", "postgresql+asyncpg", "postgresql+psycopg2"],
        "sqlite": ["sqlite", "sqlite+aiosqlite"],
    }

    @classmethod
    def backend_for(cls, scheme: str) -> Optional[str]:
        for backend, schemes in cls.SUPPORTED_DRIVERS.items():
            if scheme in schemes:
                return backend
        return None

    @classmethod
    def validate_url(cls, url: str) -> Dict[str, Any]:
        """
        Parse ``url`` and check it.

        SQLite URLs need no host or database name; PostgreSQL URLs need both.

        Returns:
            The parsed parts: ``backend``, ``scheme``, ``hostname``, ``port``,
            ``database``, ``username``, ``password`` and ``query``

        Raises:
            ConfigError: If the URL is empty, malformed or unsupported
        """
        if not url:
            raise ConfigError("Database URL cannot be empty")

        try:
            parsed = urlparse(url)
            port = parsed.port
        except ValueError as e:
            raise ConfigError(f"Invalid URL format: {e}")

        if not parsed.scheme:
            raise ConfigError("Database URL must include a scheme (e.g., postgresql://)")

        backend = cls.backend_for(parsed.scheme)
        if backend is None:
            supported = [s for schemes in cls.SUPPORTED_DRIVERS.values() for s in schemes]
            raise ConfigError(
                f"Unsupported database driver '{parsed.scheme}'. "
                f"Supported: {', '.join(supported)}"
            )

        database = parsed.path.lstrip("/")
        if backend == "postgresql":
            if not parsed.hostname:
                raise ConfigError("Database URL must include a hostname")
            if not database:
                raise ConfigError("Database URL must include a database name")

        return {
            "valid": True,
            "backend": backend,
            "scheme": parsed.scheme,
            "hostname": parsed.hostname,
            "port": port,
            "database": database,
            "username": parsed.username,
            "password": parsed.password,
            "query": parse_qs(parsed.query),
        }


@dataclass
class DatabaseSettings:
    """PostgreSQL connection settings."""

    host: str
    port: int
    database: str
    username: str
    password: str
    driver: str = "postgresql+asyncpg"
    echo: bool = False

    @property
    def url(self) -> str:
        credentials = self.username
        if self.password:
            credentials += f":{self.password}"
        return f"{self.driver}://{credentials}@{self.host}:{self.port}/{self.database}"

    @classmethod
    def from_url(cls, url: str) -> "DatabaseSettings":
        """
        Raises:
            ConfigError: If ``url`` has no scheme or no host
        """
        parsed = urlparse(url)
        if not parsed.scheme:
            raise ConfigError("Database URL must include a scheme")
        if not parsed.hostname:
            raise ConfigError("Database URL must include a hostname")

        echo = parse_qs(parsed.query).get("echo", ["false"])[0]
        return cls(
            host=parsed.hostname,
            port=parsed.port or 5432,
            database=parsed.path.lstrip("/"),
            username=parsed.username or "",
            password=parsed.password or "",
            driver=parsed.scheme,
            echo=echo.lower() == "true",
        )

    @classmethod
    def from_environment(cls) -> "DatabaseSettings":
        """``PETCLINIC_DATABASE_URL`` if set, else the ``DB_*`` variables with local defaults."""
        url = EnvironmentConfig.get_str("PETCLINIC_DATABASE_URL")
        if url:
            return cls.from_url(url)

        env = EnvironmentConfig
        return cls(
            host=env.get_str("DB_HOST", "localhost"),
            port=env.get_int("DB_PORT", 5432),
            database=env.get_str("DB_NAME", "petclinic"),
            username=env.get_str("DB_USER", "postgres"),
            password=env.get_str("DB_PASSWORD", ""),
            echo=env.get_bool("DB_ECHO", False),
        )


class LoggingConfigurator:
    """Sets up logging for applications embedding the package."""

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @staticmethod
    def configure_basic_logging(
        level: Union[str, LogLevel] = LogLevel.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """``logging.basicConfig`` with the package format, appending to ``log_file`` if given."""
        options: Dict[str, Any] = {
            "level": level.value if isinstance(level, LogLevel) else level,
            "format": format_string or LoggingConfigurator.DEFAULT_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
        if log_file:
            options.update(filename=log_file, filemode="a")

        logging.basicConfig(**options)

    @staticmethod
    def configure_structured_logging(
        config_dict: Optional[Dict[str, Any]] = None, config_file: Optional[str] = None
    ) -> None:
        """Load an ini file if it exists, else ``config_dict``, else ``default_config()``."""
        if config_file and Path(config_file).exists():
            logging.config.fileConfig(config_file)
            return
        logging.config.dictConfig(config_dict or LoggingConfigurator.default_config())

    @staticmethod
    def default_config() -> Dict[str, Any]:
        """Console logging: INFO for ``petclinic``, WARNING for everything else."""
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": LoggingConfigurator.DEFAULT_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": "INFO",
                    "formatter": "standard",
                    "stream": "ext://sys.stdout",
                }
            },
            "loggers": {
                "petclinic": {"level": "INFO", "handlers": ["console"], "propagate": False}
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
        }
