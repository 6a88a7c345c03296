# config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field
from pydantic_settings import BaseSettings
from util.enums import Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(..., validation_alias="APP_ENV")
    REDIS_URL: str = Field(..., validation_alias="REDIS_URL")
    REDIS_PREFIX: str = Field(default="authservice-server", validation_alias="REDIS_PREFIX")

    # Handshake lifetimes (seconds). Redis rejects EX 0, so both must be positive.
    TMP_STORAGE_TTL_SECONDS: int = Field(
        default=10 * 60, gt=0, validation_alias="TMP_STORAGE_TTL_SECONDS"
    )
    SESSION_TTL_SECONDS: int = Field(
        default=60 * 24 * 3600, gt=0, validation_alias="SESSION_TTL_SECONDS"
    )

    # Identity service integration
    AUTHSERVICE_SERVICE_HOST: str = Field(..., validation_alias="AUTHSERVICE_SERVICE_HOST")
    AUTHSERVICE_INTEGRATION_ID: str = Field(
        ..., validation_alias="AUTHSERVICE_INTEGRATION_ID"
    )
    AUTHSERVICE_INTEGRATION_API_KEY: str = Field(
        default="", validation_alias="AUTHSERVICE_INTEGRATION_API_KEY"
    )
    IDENTITY_TIMEOUT_SECONDS: float = Field(
        default=10.0, validation_alias="IDENTITY_TIMEOUT_SECONDS"
    )

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(default="*", validation_alias="ALLOWED_ORIGIN")
    RATE_LIMIT_TIMES: int = Field(default=30, validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(default=60, validation_alias="RATE_LIMIT_SECONDS")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Logging knobs
    LOGGER_NAME: str = "authservice-server"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
