"""
Configuration and settings for the izz backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Firebase web app configuration. The REACT_APP_* names are shared with
    # the React client's build environment.
    firebase_api_key: Optional[str] = Field(
        default=None, validation_alias=_env("FIREBASE_API_KEY", "REACT_APP_API_KEY")
    )
    firebase_auth_domain: Optional[str] = Field(
        default=None,
        validation_alias=_env("FIREBASE_AUTH_DOMAIN", "REACT_APP_AUTH_DOMAIN"),
    )
    firebase_database_url: Optional[str] = Field(
        default=None,
        validation_alias=_env("FIREBASE_DATABASE_URL", "REACT_APP_DATABASE_URL"),
    )
    firebase_project_id: Optional[str] = Field(
        default=None,
        validation_alias=_env("FIREBASE_PROJECT_ID", "REACT_APP_PROJECT_ID"),
    )
    firebase_storage_bucket: Optional[str] = Field(
        default=None,
        validation_alias=_env("FIREBASE_STORAGE_BUCKET", "REACT_APP_STORAGE_BUCKET"),
    )
    firebase_messaging_sender_id: Optional[str] = Field(
        default=None,
        validation_alias=_env(
            "FIREBASE_MESSAGING_SENDER_ID", "REACT_APP_MESSAGING_SENDER_ID"
        ),
    )
    firebase_app_id: Optional[str] = Field(
        default=None, validation_alias=_env("FIREBASE_APP_ID", "REACT_APP_APP_ID")
    )
    firebase_measurement_id: Optional[str] = Field(
        default=None,
        validation_alias=_env("FIREBASE_MEASUREMENT_ID", "REACT_APP_MEASUREMENT_ID"),
    )

    # Service account JSON for the Admin SDK; application default
    # credentials are used when unset.
    firebase_credentials_path: Optional[str] = Field(
        default=None,
        validation_alias=_env(
            "FIREBASE_CREDENTIALS_PATH", "GOOGLE_APPLICATION_CREDENTIALS"
        ),
    )

    environment: str = Field(
        default="development", validation_alias=_env("NODE_ENV", "APP_ENV")
    )
    static_build_dir: str = Field(
        default="client/build", validation_alias=_env("STATIC_BUILD_DIR")
    )
    uploads_dir: str = Field(default="uploads", validation_alias=_env("UPLOADS_DIR"))
    users_collection: str = Field(
        default="users", validation_alias=_env("USERS_COLLECTION")
    )
    # Comma-separated, e.g. "https://a.example,https://b.example".
    cors_origins: str = Field(default="*", validation_alias=_env("CORS_ORIGINS"))
    identity_request_timeout: float = Field(
        default=30.0, validation_alias=_env("IDENTITY_REQUEST_TIMEOUT")
    )
    log_level: str = Field(default="INFO", validation_alias=_env("LOG_LEVEL"))

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias=_env("IZZ_USE_IN_MEMORY_BACKENDS")
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def google_continue_uri(self) -> str:
        """Firebase's hosted popup handler for this project."""
        if self.firebase_auth_domain:
            return f"https://{self.firebase_auth_domain}/__/auth/handler"
        return "http://localhost/__/auth/handler"

    def firebase_web_config(self) -> dict:
        """The public config a Firebase web client initializes with."""
        return {
            "apiKey": self.firebase_api_key,
            "authDomain": self.firebase_auth_domain,
            "databaseURL": self.firebase_database_url,
            "projectId": self.firebase_project_id,
            "storageBucket": self.firebase_storage_bucket,
            "messagingSenderId": self.firebase_messaging_sender_id,
            "appId": self.firebase_app_id,
            "measurementId": self.firebase_measurement_id,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
