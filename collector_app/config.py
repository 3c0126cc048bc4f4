from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from collector_app.exceptions import ConfigurationError


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below

    A JSON database config file (CONFIG_FILE) can override the DB_* values,
    see load_settings().
    """

    # Application
    app_name: str = "Hit Collector"
    app_version: str = "1.0.0"

    # Server
    host: str = "0.0.0.0"
    port: Optional[int] = None  # Defaults to 80 with TLS, 8000 without
    https_port: int = Field(default=443, validation_alias=AliasChoices("httpsport", "https_port"))
    domain: str = "gollector.bluetent.com"

    # TLS (certificates are provisioned outside the service)
    tls_enabled: bool = False
    certs_dir: str = "certs"
    ssl_certfile: Optional[str] = None
    ssl_keyfile: Optional[str] = None

    # Middleware
    cors_enabled: bool = True
    reject_non_post: bool = True

    # Database (MySQL by default, DATABASE_URL wins when set)
    db_user: str = ""
    db_pass: str = ""
    db_host: str = ""
    db_port: Optional[int] = None
    db_name: str = ""
    database_url: Optional[str] = None
    database_echo: bool = False

    # Structured database config file (JSON with host/port/user/pass/database)
    config_file: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_json_format: bool = False
    log_file: Optional[str] = None
    log_max_bytes: int = 10 * 1024 * 1024
    log_backup_count: int = 5

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("port", "db_port", mode="before")
    @classmethod
    def _empty_port(cls, value):
        # DB_PORT= and PORT= in a .env mean "use the default"
        return _blank_to_none(value)

    @property
    def listen_port(self) -> int:
        """Plain HTTP port: explicit PORT, else 80 behind TLS, else 8000"""
        if self.port is not None:
            return self.port
        return 80 if self.tls_enabled else 8000

    @property
    def database_url_resolved(self) -> URL:
        """SQLAlchemy URL for the hit store"""
        if self.database_url:
            return make_url(self.database_url)
        return URL.create(
            "mysql+pymysql",
            username=self.db_user or None,
            password=self.db_pass or None,
            host=self.db_host or None,
            port=self.db_port,
            database=self.db_name or None,
        )

    @property
    def certfile_path(self) -> Path:
        return Path(self.ssl_certfile) if self.ssl_certfile else Path(self.certs_dir) / f"{self.domain}.crt"

    @property
    def keyfile_path(self) -> Path:
        return Path(self.ssl_keyfile) if self.ssl_keyfile else Path(self.certs_dir) / f"{self.domain}.key"


class DatabaseFileConfig(BaseModel):
    """Database section read from CONFIG_FILE"""

    host: str = ""
    port: Optional[int] = None
    user: str = ""
    password: str = Field(default="", alias="pass")
    database: str = ""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("port", mode="before")
    @classmethod
    def _empty_port(cls, value):
        return _blank_to_none(value)


def read_database_file(path: str) -> DatabaseFileConfig:
    """
    Read a JSON database config file.

    Raises:
        ConfigurationError: if the file is missing, unreadable or malformed
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    try:
        return DatabaseFileConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Malformed config file {path}: {e}") from e


def load_settings(config_file: Optional[str] = None, **overrides) -> Settings:
    """
    Resolve the service configuration once at startup.

    Args:
        config_file: JSON database config file, takes precedence over CONFIG_FILE
        overrides: explicit values (used by tests and the entry point)

    Returns:
        Settings with the database file applied on top of the DB_* values

    Raises:
        ConfigurationError: invalid environment values or a bad config file
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    path = config_file or settings.config_file
    if not path:
        return settings

    file_config = read_database_file(path)
    return settings.model_copy(update={
        "config_file": path,
        "db_host": file_config.host,
        "db_port": file_config.port,
        "db_user": file_config.user,
        "db_pass": file_config.password,
        "db_name": file_config.database,
    })
