"""Application configuration."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "ParcelHub"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/parcelhub.db"

    # Paths
    base_dir: Path = Path(__file__).parent.parent.parent
    platforms_dir: Path = Path(__file__).parent / "platforms"
    data_dir: Path = base_dir / "data"

    # Listings
    parcel_page_size: int = 20
    handover_parcel_page_size: int = 10
    max_page_size: int = 500

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "PARCELHUB_"


settings = Settings()

# Ensure data directory exists
settings.data_dir.mkdir(parents=True, exist_ok=True)
