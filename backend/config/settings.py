from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can come from:
    - docker-compose.yml environment section
    - .env file (for database credentials)
    - System environment

    Variable names match docker-compose conventions:
    - POSTGRES_HOST, POSTGRES_PORT, etc. (for the calibrations database)
    - PUBLISHED_STATUS, IMAGE_URL_ROOT (for calibration hydration)
    """

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # PostgreSQL (from docker-compose)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "fcd_user"
    postgres_password: str = "fcd_pass"
    postgres_db: str = "fossil_calibrations"
    postgres_pool_min_size: int = 2
    postgres_pool_max_size: int = 10

    # Calibrations with any other status are invisible to every caller
    published_status: int = 4

    # Publication and tree images are served by the main FCD site
    image_url_root: str = "https://fossilcalibrations.org/publication_image.php?id="

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lower-case level names from the environment"""
        return str(v).upper() if v else "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
