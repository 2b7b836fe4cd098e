from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


# ──────────────────────────────────────────────
# Settings (from environment variables / .env)
# ──────────────────────────────────────────────
class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file.

    Built once at startup and handed to ``create_app``; frozen so request
    handlers can never mutate it.
    """

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3000
    base_url: str | None = None

    # Auth settings
    api_key: str | None = None

    # CORS settings
    cors_origins: str = "*"
    cors_allow_credentials: bool = False
    cors_allow_methods: str = "*"
    cors_allow_headers: str = "*"

    # Upload settings
    upload_dir: Path = Path("public") / "uploads"
    max_upload_size: int = 5 * 1024 * 1024  # 5 MB
    allowed_mime_types: str = "image/jpeg,image/png,image/gif,image/webp"

    # Application settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def public_base_url(self) -> str:
        """Base of every returned image URL, without a trailing slash."""
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"http://localhost:{self.port}"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def cors_methods_list(self) -> list[str]:
        """Parse CORS methods from comma-separated string."""
        if self.cors_allow_methods == "*":
            return ["*"]
        return [method.strip() for method in self.cors_allow_methods.split(",")]

    @property
    def cors_headers_list(self) -> list[str]:
        """Parse CORS headers from comma-separated string."""
        if self.cors_allow_headers == "*":
            return ["*"]
        return [header.strip() for header in self.cors_allow_headers.split(",")]

    @property
    def allowed_mime_types_set(self) -> set[str]:
        """Parse allowed MIME types from comma-separated string (matched case-sensitively)."""
        return {mime.strip() for mime in self.allowed_mime_types.split(",") if mime.strip()}

    @property
    def max_upload_size_mb(self) -> int:
        return self.max_upload_size // (1024 * 1024)


# ──────────────────────────────────────────────
# Static mount
# ──────────────────────────────────────────────
UPLOADS_URL_PREFIX = "/uploads"

# ──────────────────────────────────────────────
# Response headers added to every response
# ──────────────────────────────────────────────
SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}
