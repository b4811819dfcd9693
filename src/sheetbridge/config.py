"""Configuration management for SheetBridge."""

import os
import secrets
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Target spreadsheet (process-wide, read-only after startup)
    spreadsheet_id: str = os.getenv("SPREADSHEET_ID", "")

    # Service account credentials; relative paths resolve against resources_dir
    credentials_file_path: Path = Path(os.getenv("GOOGLE_CREDENTIALS_PATH", "credentials.json"))
    resources_dir: Path = Path(os.getenv("RESOURCES_DIR", "."))

    application_name: str = os.getenv("APPLICATION_NAME", "SheetBridge")
    url_prefix: str = os.getenv("URL_PREFIX", "")

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Google OAuth login (web flow)
    google_client_id: Optional[str] = os.getenv("GOOGLE_CLIENT_ID")
    google_client_secret: Optional[str] = os.getenv("GOOGLE_CLIENT_SECRET")
    google_redirect_uri: str = os.getenv(
        "GOOGLE_REDIRECT_URI", "http://localhost:8000/login/oauth2/callback"
    )
    session_secret: str = os.getenv("SESSION_SECRET") or secrets.token_urlsafe(32)

    # Meta Conversions API
    meta_graph_api_version: str = os.getenv("META_GRAPH_API_VERSION", "v19.0")
    pixel_currency: str = os.getenv("PIXEL_CURRENCY", "krw")

    @property
    def resolved_credentials_path(self) -> Path:
        """Credentials path with relative values anchored at resources_dir."""
        if self.credentials_file_path.is_absolute():
            return self.credentials_file_path
        return self.resources_dir / self.credentials_file_path

    @property
    def oauth_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)


settings = Settings()
