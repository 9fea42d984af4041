# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — Application Configuration
All settings are loaded from environment variables with storefront
defaults. Override via backend/.env or environment.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Rendering Surface ───────────────────────────────────────────────────
    # Logical editor size (square). Backing buffer = surface_size × pixel ratio
    surface_size: int = 640
    default_pixel_ratio: float = 1.0

    # ─── Safe Area Geometry (logical px) ─────────────────────────────────────
    safe_area_inset: int = 28
    safe_area_radius: int = 34
    # Nested inside the safe area
    bleed_inset: int = 16

    # ─── Pricing ─────────────────────────────────────────────────────────────
    base_price: float = 29.99
    currency: str = "gbp"

    # ─── Assets ──────────────────────────────────────────────────────────────
    static_root: Path = Path("./static")
    # When set, relative image refs are fetched from this origin over HTTP
    asset_base_url: Optional[str] = None
    template_ref: Optional[str] = "/preview.png"
    texture_catalog_path: Optional[Path] = None
    asset_fetch_timeout_s: float = 10.0
    upload_max_mb: int = 25

    # ─── Storage ─────────────────────────────────────────────────────────────
    storage_root: Path = Path("./storage")
    # Absolute origin for asset URLs handed to external collaborators
    public_base_url: Optional[str] = None

    # ─── Session Store ───────────────────────────────────────────────────────
    session_ttl_seconds: int = 3600  # 1 hour idle

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ─── Server ──────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = [
        "http://localhost:5173",   # Vite dev server
        "http://localhost:3000",
    ]

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def upload_max_bytes(self) -> int:
        return self.upload_max_mb * 1024 * 1024

    @property
    def safe_area_size(self) -> int:
        return self.surface_size - self.safe_area_inset * 2


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
