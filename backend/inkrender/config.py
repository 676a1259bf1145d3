"""Application configuration from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    inkrender_env: str = "development"
    inkrender_log_level: str = "info"

    # Root of the page store and thumbnail files
    data_dir: Path = Path("./data")

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Thumbnails
    thumbnail_width: int = 200
    thumbnail_max_age: int = 60

    # Recognition handoff image width (tracks the recognizer's high media resolution)
    recognition_width: int = 1120

    # PNG export scale clamp applied to ?scale=
    png_scale_min: float = 0.1
    png_scale_max: float = 4.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
