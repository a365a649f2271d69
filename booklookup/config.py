"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Open Library endpoints
    OPENLIBRARY_BASE_URL = os.getenv("OPENLIBRARY_BASE_URL", "https://openlibrary.org")
    OPENLIBRARY_COVERS_URL = os.getenv("OPENLIBRARY_COVERS_URL", "https://covers.openlibrary.org/b")

    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_SEARCH_LIMIT = int(os.getenv("DEFAULT_SEARCH_LIMIT", "10"))
    DEBOUNCE_DELAY_MS = int(os.getenv("DEBOUNCE_DELAY_MS", "300"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @property
    def debounce_delay(self) -> float:
        """Debounce quiet period in seconds."""
        return self.DEBOUNCE_DELAY_MS / 1000
