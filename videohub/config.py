from functools import lru_cache
import logging

from pydantic_settings import BaseSettings

from videohub.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Used only when SECRET_KEY is unset outside production.
FALLBACK_SECRET_KEY = "default_secret"

MAX_UPLOAD_BYTES = 100 * 1024 * 1024  # 100 MiB

STORAGE_BACKENDS = ("auto", "local", "cloudinary")


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./videohub.db"

    # JWT
    secret_key: str = ""
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    # CORS: comma-separated origins; frontend_url is appended when set
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    frontend_url: str = ""

    # Runtime signals used to pick the storage backend once at startup
    environment: str = "development"
    vercel: str = ""
    aws_lambda_function_name: str = ""

    # Storage: auto | local | cloudinary
    storage_backend: str = "auto"
    # Local disk: folder for uploaded videos (empty = <project>/uploads)
    video_upload_dir: str = ""
    # Cloudinary unsigned upload
    cloudinary_cloud_name: str = ""
    cloudinary_upload_preset: str = ""
    storage_timeout_seconds: float = 120.0

    max_upload_bytes: int = MAX_UPLOAD_BYTES

    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def is_serverless(self) -> bool:
        """True on Vercel/Lambda or in production, where local disk is not durable."""
        return self.vercel.strip() == "1" or bool(self.aws_lambda_function_name.strip()) or self.is_production

    @property
    def cors_origins_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def jwt_secret(self) -> str:
        return self.secret_key or FALLBACK_SECRET_KEY

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_upload_preset)

    def validate_for_startup(self) -> None:
        """Refuse to start on unsafe or unusable configuration."""
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ConfigurationError(
                f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {self.storage_backend!r}"
            )
        if self.max_upload_bytes <= 0:
            raise ConfigurationError("MAX_UPLOAD_BYTES must be positive")
        if not self.secret_key:
            if self.is_production:
                raise ConfigurationError("SECRET_KEY must be set in production")
            logger.warning("SECRET_KEY is not set; using the insecure fallback secret (development only)")


@lru_cache
def get_settings() -> Settings:
    return Settings()
