"""
Service Configuration

Environment-driven settings for the user service.
Values come from the process environment, optionally seeded from a .env file.
"""
import os
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple
from urllib.parse import quote_plus

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("atrium.config")

DEFAULT_REGION = "ap-southeast-2"
DEFAULT_DATABASE_URL = "postgresql://localhost:5432/atrium"


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    aws_region: str = DEFAULT_REGION
    user_pool_id: Optional[str] = None
    app_client_id: Optional[str] = None
    database_url: Optional[str] = None
    db_secret_name: Optional[str] = None
    cors_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    run_migrations: bool = False
    employee_groups: Tuple[str, ...] = field(default=("SuperAdmins", "DataStewards"))

    @property
    def jwks_url(self) -> str:
        return f"{self.issuer}/.well-known/jwks.json"

    @property
    def issuer(self) -> str:
        return f"https://cognito-idp.{self.aws_region}.amazonaws.com/{self.user_pool_id}"


def _to_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _split_csv(value: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value:
        return default
    items = tuple(part.strip() for part in value.split(",") if part.strip())
    return items or default


def load_settings() -> Settings:
    """Read settings from the environment."""
    return Settings(
        aws_region=os.getenv("AWS_REGION", DEFAULT_REGION),
        user_pool_id=os.getenv("COGNITO_USER_POOL_ID") or None,
        app_client_id=os.getenv("COGNITO_APP_CLIENT_ID") or None,
        database_url=os.getenv("DATABASE_URL") or None,
        db_secret_name=os.getenv("DB_SECRET_NAME") or None,
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS"), ("*",)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        run_migrations=_to_bool(os.getenv("RUN_MIGRATIONS")),
        employee_groups=_split_csv(os.getenv("EMPLOYEE_GROUPS"), ("SuperAdmins", "DataStewards")),
    )


def database_url_from_secret(secret: dict) -> str:
    """Build a connection URL from an RDS-style credentials secret."""
    try:
        username = quote_plus(str(secret["username"]))
        password = quote_plus(str(secret["password"]))
        host = secret["host"]
    except KeyError as e:
        raise ConfigurationError(f"Database secret is missing key: {e}") from e

    port = secret.get("port", 5432)
    dbname = secret.get("dbname") or secret.get("dbInstanceIdentifier") or "postgres"
    return f"postgresql://{username}:{password}@{host}:{port}/{dbname}"


def fetch_database_secret(secret_name: str, region: str, client=None) -> dict:
    """Load a JSON secret from AWS Secrets Manager."""
    client = client or boto3.client("secretsmanager", region_name=region)
    try:
        response = client.get_secret_value(SecretId=secret_name)
    except (ClientError, BotoCoreError) as e:
        raise ConfigurationError(f"Unable to read secret '{secret_name}': {e}") from e

    raw = response.get("SecretString")
    if not raw:
        raise ConfigurationError(f"Secret '{secret_name}' has no SecretString value")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Secret '{secret_name}' is not valid JSON") from e


def resolve_database_url(settings: Settings, secrets_client=None) -> str:
    """
    Pick the address-store URL.

    DATABASE_URL wins. Otherwise credentials are read from the Secrets Manager
    secret named by DB_SECRET_NAME.
    """
    if settings.database_url:
        return settings.database_url
    if settings.db_secret_name:
        logger.info(f"Loading database credentials from secret '{settings.db_secret_name}'")
        secret = fetch_database_secret(settings.db_secret_name, settings.aws_region, secrets_client)
        return database_url_from_secret(secret)
    raise ConfigurationError("Set DATABASE_URL or DB_SECRET_NAME to configure the address store.")


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


settings = load_settings()
