"""Centralised settings for the Catalog Hub backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("CATALOG_WORKSPACE", Path.home() / ".catalog_data")
        )
    )
    backend: str = field(
        default_factory=lambda: os.environ.get("CATALOG_BACKEND", "sqlite").lower()
    )
    db_file: str = field(
        default_factory=lambda: os.environ.get("CATALOG_DB_FILE", "catalog.db")
    )
    csv_dir_override: str = field(
        default_factory=lambda: os.environ.get("CATALOG_CSV_DIR", "")
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / self.db_file

    @property
    def csv_dir(self) -> Path:
        """Directory holding ``content_rows.csv`` and ``links_rows.csv``."""
        if self.csv_dir_override:
            return Path(self.csv_dir_override)
        return self.workspace_dir / "data"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------
    max_page_size: int = field(
        default_factory=lambda: int(os.environ.get("MAX_PAGE_SIZE", "100"))
    )
    public_page_size: int = field(
        default_factory=lambda: int(os.environ.get("PUBLIC_PAGE_SIZE", "12"))
    )

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------
    top_urls_limit: int = field(
        default_factory=lambda: int(os.environ.get("TOP_URLS_LIMIT", "20"))
    )
    visit_ip_salt: str = field(
        default_factory=lambda: os.environ.get("VISIT_IP_SALT", "")
    )

    # ------------------------------------------------------------------
    # Download redirector
    # ------------------------------------------------------------------
    app_prefix_url: str = field(
        default_factory=lambda: os.environ.get("APP_PREFIX_URL", "")
    )
    app_suffix_url: str = field(
        default_factory=lambda: os.environ.get("APP_SUFFIX_URL", "")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton, import this everywhere:
#   from catalog.config import settings
settings = Settings()
