"""
Central configuration for the stillbecoming engine.
All environment-driven settings live here; the ritual sequence and the
generation ranges are design constants and stay in their modules.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    # ── Identity ────────────────────────────────────────────────────
    MASTER_SEED: str = "STILLBECOMING_2026"
    EDITION_CAP: int = Field(default=100, ge=1)

    # ── Ritual blending ─────────────────────────────────────────────
    SMOOTHING_FACTOR: float = Field(default=0.05, gt=0.0, le=1.0)
    SMOOTHING_MODE: Literal["frame", "time"] = "frame"
    # Decay rate for "time" mode; 3.0776/s matches 0.05 per frame at 60 fps
    SMOOTHING_RATE: float = Field(default=3.0776, gt=0.0)
    FRAME_RATE: int = Field(default=60, ge=1)

    # ── Canvas / export ─────────────────────────────────────────────
    CANVAS_SIZE: int = 720
    EXPORT_SIZE: int = 3000

    # ── Logging ─────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── Paths ───────────────────────────────────────────────────────
    PROJECT_ROOT: Path = Path(__file__).parent
    STATE_DIR: Optional[Path] = None
    OUTPUTS_DIR: Optional[Path] = None

    @model_validator(mode="after")
    def _set_default_paths(self) -> Settings:
        if self.STATE_DIR is None:
            self.STATE_DIR = self.PROJECT_ROOT / "state"
        if self.OUTPUTS_DIR is None:
            self.OUTPUTS_DIR = self.PROJECT_ROOT / "outputs"
        self.STATE_DIR.mkdir(parents=True, exist_ok=True)
        self.OUTPUTS_DIR.mkdir(parents=True, exist_ok=True)
        return self

    @property
    def store_path(self) -> Path:
        return self.STATE_DIR / "visitor.json"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton instance
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a single stream handler to the root logger."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(handler)
