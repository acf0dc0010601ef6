"""Application configuration using pydantic-settings."""

import warnings

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Athlete Mindset API"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Firebase (Auth + Firestore)
    firebase_project_id: str = ""
    firebase_service_account_key: str = ""  # JSON blob; empty = application default credentials
    users_collection: str = "swift_users"

    # Stripe
    stripe_secret_key: str = ""
    stripe_publishable_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_monthly_price_id: str = ""
    stripe_yearly_price_id: str = ""
    trial_period_days: int = 3
    free_sessions_limit: int = 2

    # Public web app (checkout / portal redirects)
    app_url: str = "https://athletemindset.app"

    # Upstream services proxied for the browser
    tts_api_endpoint: str = "https://athlete-mindset-api-soygfl7erq-uc.a.run.app/api/tts/generate"
    cloud_functions_url: str = "https://us-central1-fabled-emissary-476021-g0.cloudfunctions.net"
    proxy_timeout_seconds: float = 120.0

    # LLM (LiteLLM)
    default_llm_model: str = "gemini/gemini-2.0-flash-001"
    gemini_api_key: str = ""

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    @model_validator(mode="after")
    def _ensure_app_url_in_cors(self) -> "Settings":
        """Ensure the configured app_url is always in cors_origins."""
        if self.app_url and self.app_url not in self.cors_origins:
            self.cors_origins.append(self.app_url)
        return self

    @model_validator(mode="after")
    def _validate_secrets(self) -> "Settings":
        """Reject a missing Stripe key in production and warn in development."""
        if not self.stripe_secret_key:
            if self.environment == "production":
                raise ValueError("STRIPE_SECRET_KEY must be set in production.")
            warnings.warn(
                "STRIPE_SECRET_KEY is not set — billing routes will fail against Stripe. "
                "Set it in your .env file.",
                UserWarning,
                stacklevel=1,
            )
        return self

    @property
    def checkout_success_url(self) -> str:
        return f"{self.app_url}/dashboard?success=true&session_id={{CHECKOUT_SESSION_ID}}"

    @property
    def checkout_cancel_url(self) -> str:
        return f"{self.app_url}/dashboard?canceled=true"

    @property
    def portal_return_url(self) -> str:
        return f"{self.app_url}/profile"

    @property
    def livekit_token_url(self) -> str:
        return f"{self.cloud_functions_url.rstrip('/')}/getLivekitToken"


settings = Settings()
