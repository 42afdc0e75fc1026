import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables (only in development)
# In containers, environment variables are set directly
if os.getenv("ENVIRONMENT") != "production":
    load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Database configuration
DATABASE_TYPE = os.getenv("DATABASE_TYPE", "json")  # Options: 'json', 'memory'
JSON_DB_PATH = os.getenv("JSON_DB_PATH", str(BASE_DIR / "data" / "library"))

# Synchronized store configuration
STORAGE_TYPE = os.getenv("STORAGE_TYPE", "synced_folder")  # Options: 'synced_folder', 's3', 'none'
CONTAINER_IDENTIFIER = os.getenv("CONTAINER_IDENTIFIER", "iCloud.com.pdfshelf.library")
STORE_SUBPATH = os.getenv("STORE_SUBPATH", "Documents/PDFs")

# Synced folder configuration (iCloud Drive, Dropbox, ...)
SYNC_ROOT = os.getenv("SYNC_ROOT", str(Path.home() / "Library" / "Mobile Documents"))
DOWNLOAD_COMMAND = os.getenv("DOWNLOAD_COMMAND", "brctl download")

# S3 storage configuration
S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL")  # For S3-compatible services (MinIO, etc.)
S3_MIRROR_DIR = os.getenv("S3_MIRROR_DIR", str(BASE_DIR / "data" / "mirror"))

# AI extraction configuration
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
AI_EXTRACTION_ENABLED = _env_flag("AI_EXTRACTION_ENABLED", "true")
AI_PROVIDER = os.getenv("AI_PROVIDER", "anthropic")  # Options: 'anthropic', 'mock'
CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "claude-sonnet-4-6")
CLAUDE_CANDIDATE_MODELS = [
    model.strip()
    for model in os.getenv(
        "CLAUDE_CANDIDATE_MODELS",
        "claude-sonnet-4-6,claude-3-5-sonnet-20241022,claude-3-haiku-20240307"
    ).split(",")
    if model.strip()
]
AI_MAX_TOKENS = int(os.getenv("AI_MAX_TOKENS", "1024"))
AI_TEXT_PAGE_LIMIT = int(os.getenv("AI_TEXT_PAGE_LIMIT", "3"))
AI_TEXT_CHAR_LIMIT = int(os.getenv("AI_TEXT_CHAR_LIMIT", "15000"))
AI_REQUEST_TIMEOUT = float(os.getenv("AI_REQUEST_TIMEOUT", "60"))
AI_MAX_CONCURRENT = int(os.getenv("AI_MAX_CONCURRENT", "3"))  # Extractions running at once
ENRICHMENT_HISTORY_LIMIT = int(os.getenv("ENRICHMENT_HISTORY_LIMIT", "200"))  # Finished tasks kept for status

# Reconciliation
SYNC_POLL_INTERVAL = float(os.getenv("SYNC_POLL_INTERVAL", "5"))


@dataclass(frozen=True)
class AIConfig:
    """
    Settings for AI metadata enrichment.

    Built once at the call site and handed to the import pipeline,
    so no service reads the API key on its own.
    """
    enabled: bool = False
    api_key: Optional[str] = None
    model: str = CLAUDE_MODEL
    provider: str = AI_PROVIDER

    @property
    def is_active(self) -> bool:
        """Enrichment runs only when switched on and a key is present."""
        if not self.enabled:
            return False
        if self.provider == "mock":
            return True
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_env(cls, model: Optional[str] = None) -> "AIConfig":
        return cls(
            enabled=AI_EXTRACTION_ENABLED,
            api_key=ANTHROPIC_API_KEY,
            model=model or CLAUDE_MODEL,
            provider=AI_PROVIDER,
        )
