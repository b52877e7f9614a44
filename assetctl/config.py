"""Configuration management for the assetctl application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration with sensible defaults."""

    # Asset resolution (control side)
    CATALOG_PATH: str = os.getenv("ASSETCTL_CATALOG", "")
    FILE_REPOSITORY: str = os.getenv("ASSETCTL_FILE_REPOSITORY", "")
    REMOTE_HASHES: bool = _env_bool("ASSETCTL_REMOTE_HASHES", "true")

    # Node bootstrap (data side)
    INSTALL_DIR: str = os.getenv("ASSETCTL_INSTALL_DIR", "/opt/assetctl")

    # Timeouts (in seconds)
    API_TIMEOUT: int = int(os.getenv("API_TIMEOUT", "30"))
    FETCH_CONNECT_TIMEOUT: int = int(os.getenv("FETCH_CONNECT_TIMEOUT", "20"))

    # Retry configuration
    FETCH_RETRIES: int = int(os.getenv("FETCH_RETRIES", "6"))
    FETCH_RETRY_DELAY: int = int(os.getenv("FETCH_RETRY_DELAY", "10"))
    FETCH_BACKOFF: float = float(os.getenv("FETCH_BACKOFF", "60"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @classmethod
    def validate(cls) -> None:
        """Validate numeric configuration."""
        positive = {
            "API_TIMEOUT": cls.API_TIMEOUT,
            "FETCH_CONNECT_TIMEOUT": cls.FETCH_CONNECT_TIMEOUT,
        }
        non_negative = {
            "FETCH_RETRIES": cls.FETCH_RETRIES,
            "FETCH_RETRY_DELAY": cls.FETCH_RETRY_DELAY,
            "FETCH_BACKOFF": cls.FETCH_BACKOFF,
        }
        bad = [k for k, v in positive.items() if v <= 0]
        bad += [k for k, v in non_negative.items() if v < 0]
        if bad:
            raise ValueError(f"Invalid configuration values: {', '.join(bad)}")

# Don't validate on import to allow for dynamic configuration
# Call Config.validate() explicitly when needed
