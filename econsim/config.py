"""
Econsim Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Session persistence
    # Every session is stored under "<prefix><simulation_id>"
    STORAGE_PREFIX: str = os.getenv("ECONSIM_STORAGE_PREFIX", "sim_")
    # Directory used by JsonFileStore when no explicit path is given
    STORAGE_DIR: Path = Path(os.getenv("ECONSIM_STORAGE_DIR", ".econsim"))

    # Catalog of authored simulations
    PACKAGE_ROOT: Path = Path(__file__).parent
    CATALOG_DIR: Path = Path(
        os.getenv("ECONSIM_CATALOG_DIR", str(PACKAGE_ROOT / "simulations"))
    )

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are unusable."""
        if not cls.STORAGE_PREFIX:
            raise ValueError(
                "ECONSIM_STORAGE_PREFIX must not be empty; sessions from different "
                "applications would share keys"
            )

        if cls.LOG_LEVEL.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(
                f"LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR (got {cls.LOG_LEVEL!r})"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Econsim Configuration:",
            f"  Storage prefix: {cls.STORAGE_PREFIX}",
            f"  Storage dir: {cls.STORAGE_DIR}",
            f"  Catalog dir: {cls.CATALOG_DIR}",
            f"  Log level: {cls.LOG_LEVEL}",
        ]
        return "\n".join(lines)
