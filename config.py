from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables or .env file."""
    api_key: str = "dev_key"  # API key for securing endpoints
    log_level: str = "INFO"
    log_file: str = "dispense_calculator.log"

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 5175
    cors_origins: List[str] = ["*"]

    # Quantity and package selection policy
    unusual_quantity_threshold: float = 1000
    combination_variance_threshold: float = 20.0
    high_severity_percent: float = 20.0
    medium_severity_percent: float = 10.0
    prn_frequency_factor: float = 0.5
    prn_default_frequency: float = 2.0
    max_days_supply: int = 365

    # Upper bound for a pluggable (e.g. AI) SIG parser before falling back to rules
    parser_timeout_seconds: float = 5.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

# Create global settings instance
settings = Settings()

# Setup logging
import logging

logging_level = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(
    level=logging_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(settings.log_file)
    ]
)
logger = logging.getLogger("dispense_calculator")
