"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    OPENAI_MODEL=gpt-4o uvicorn app.main:app     # one-off model swap
    export MAX_IMAGE_UPLOAD_MB=12                 # staging override

`.env` and `.env.local` files at the project root are loaded automatically
(`.env.local` wins).
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,   # OPENAI_MODEL == openai_model
        extra="ignore",         # silently drop unknown env vars
        populate_by_name=True,
    )

    # ------------------------------------------------------------------ #
    # Service                                                             #
    # ------------------------------------------------------------------ #
    service_name: str = Field(
        "vero-backend", description="Name reported by GET /"
    )
    host: str = Field(
        "0.0.0.0", description="Bind address when run via `python -m app.main`"
    )
    port: int = Field(
        3000, description="Listen port when run via `python -m app.main`"
    )
    log_level: str = Field(
        "INFO", description="Root logging level"
    )
    app_env: str = Field(
        "production",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
        description="Deployment environment; anything but 'production' enables debug by default",
    )
    debug: Optional[bool] = Field(
        None, description="Expose internal error details on 500 replies (unset → derived from app_env)"
    )

    # ------------------------------------------------------------------ #
    # OpenAI                                                              #
    # ------------------------------------------------------------------ #
    openai_api_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "OPENAI_KEY", "VERO_OPENAI_API_KEY"),
        description="API credential; /detect answers 500 while it is missing",
    )
    openai_model: str = Field(
        "gpt-4o-mini", description="Vision model used for classification"
    )
    openai_api_style: str = Field(
        "auto", description="'responses', 'chat' or 'auto' (pick once at startup)"
    )
    openai_timeout_sec: float = Field(
        60.0, description="SDK request timeout (seconds)"
    )
    openai_image_detail: str = Field(
        "auto", description="Image detail hint sent with the upload: low | high | auto"
    )

    # ------------------------------------------------------------------ #
    # File Size Limits                                                    #
    # ------------------------------------------------------------------ #
    max_image_upload_mb: int = Field(
        10, description="Max MB for multipart image uploads"
    )

    # ------------------------------------------------------------------ #
    # Derived properties                                                  #
    # ------------------------------------------------------------------ #
    @property
    def max_image_upload_bytes(self) -> int:
        return self.max_image_upload_mb * 1024 * 1024

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.strip())

    @property
    def is_debug(self) -> bool:
        if self.debug is not None:
            return self.debug
        return self.app_env.strip().lower() != "production"


# Single shared instance — import this everywhere.
settings = Settings()
