"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with ITEMVAULT_ prefix.
The store URL and the token signing secret have no defaults: a process
started without them fails here, before serving a single request.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All app configuration. Set via ITEMVAULT_* env vars."""

    # Database
    database_url: str

    # Auth
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = 12

    # Attachments
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    model_config = {"env_prefix": "ITEMVAULT_"}

    @field_validator("database_url", "jwt_secret")
    @classmethod
    def not_blank(cls, value: str, info) -> str:
        if not value.strip():
            raise ValueError(
                f"ITEMVAULT_{info.field_name.upper()} must be set to a non-empty value"
            )
        return value

    @field_validator("bcrypt_rounds")
    @classmethod
    def valid_rounds(cls, value: int) -> int:
        # bcrypt accepts log2 cost factors 4..31
        if not 4 <= value <= 31:
            raise ValueError("ITEMVAULT_BCRYPT_ROUNDS must be between 4 and 31")
        return value


# Singleton — import this everywhere
settings = Settings()
