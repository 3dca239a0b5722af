"""Configuration settings for the VynorNews client."""

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    google_api_key: str = os.getenv("GEMINI_API_KEY", os.getenv("GOOGLE_API_KEY", ""))

    # Feed generation (LiteLLM model identifier)
    feed_model: str = "gemini/gemini-3-flash-preview"
    feed_max_tokens: int = 4096
    feed_temperature: float = 0.7
    page_size: int = 5  # items requested per page

    # Logging
    log_level: str = "INFO"

    # Offline asset cache
    cache_name: str = "vynor-cache-v1"
    bootstrap_assets: list[str] = ["/", "/index.html", "/manifest.json"]
    asset_base_url: str = "http://localhost:3000"

    # Paths
    project_root: Path = Path(__file__).parent.parent.parent
    package_dir: Path = Path(__file__).parent.parent
    config_dir: Path = package_dir / "config"
    storage_dir: Path = Path.home() / ".vynornews"

    # Config files
    onboarding_file: Path = config_dir / "onboarding.yaml"

    class Config:
        env_file = ".env"
        env_prefix = "VYNOR_"
        extra = "ignore"


# Global settings instance
settings = Settings()
