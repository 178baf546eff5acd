"""
Configuration settings for the menu trainer.

Uses Pydantic Settings for environment variable management with .env file support.
Variables use the MENU_TRAINER_ prefix (e.g. MENU_TRAINER_LOG_LEVEL=DEBUG).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_MENU_DATA = PACKAGE_DIR / "data" / "menu_items.json"
DEFAULT_CUSTOMER_QUESTIONS = PACKAGE_DIR / "data" / "customer_questions.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MENU_TRAINER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".menu_trainer",
        description="Directory for the state database and backups",
    )
    state_db_name: str = Field(
        default="state.db",
        description="SQLite file name inside data_dir",
    )
    storage_namespace: str = Field(
        default="mastros-menu-app-storage",
        description="Key under which the application state blob is stored",
    )

    # ========================================
    # Content
    # ========================================
    menu_data_path: Path = Field(
        default=DEFAULT_MENU_DATA,
        description="JSON dataset of menu items",
    )
    customer_questions_path: Path = Field(
        default=DEFAULT_CUSTOMER_QUESTIONS,
        description="JSON dataset of guest questions for customer-questions mode",
    )

    # ========================================
    # Study sessions
    # ========================================
    questions_per_round: int = Field(
        default=10,
        ge=1,
        description="Default number of questions in a round",
    )
    auto_advance_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Delay before moving on after a correct answer",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum level for the stderr log sink",
    )

    @property
    def state_db_path(self) -> Path:
        return self.data_dir / self.state_db_name


@lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
