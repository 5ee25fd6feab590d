"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment (and an
optional .env file) or passed explicitly in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

_DEFAULT_CLIENT_DIR = Path.home() / ".agri-market"


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the marketplace profiles service.

    No module-level globals: construct via from_env() or pass explicitly.
    """
    project_root: Path

    # Database
    db_path: str = "marketplace.db"

    # JWT
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_hours: int = 24

    # REST adapter
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    # Device-local client (CLI)
    api_base_url: str = "http://localhost:8000"
    client_dir: Path = field(default=_DEFAULT_CLIENT_DIR)

    @property
    def guest_wishlist_path(self) -> Path:
        return self.client_dir / "guest_wishlist.json"

    @property
    def session_path(self) -> Path:
        return self.client_dir / "session.json"

    @classmethod
    def from_env(cls, project_root: Optional[Path] = None) -> Settings:
        """Build Settings from environment variables and .env."""
        from dotenv import load_dotenv
        load_dotenv()

        root = project_root or Path(__file__).resolve().parent.parent.parent
        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            project_root=root,
            db_path=os.getenv("DB_PATH", "marketplace.db"),
            jwt_secret=os.getenv("JWT_SECRET", "change-me-in-production"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expiry_hours=int(os.getenv("JWT_EXPIRY_HOURS", "24")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            api_base_url=os.getenv("API_BASE_URL", "http://localhost:8000"),
            client_dir=Path(os.getenv("AGRI_MARKET_HOME", str(_DEFAULT_CLIENT_DIR))).expanduser(),
        )
