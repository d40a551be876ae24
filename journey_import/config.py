import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _parse_float(raw_value: str, default: float) -> float:
    try:
        return float(raw_value)
    except (TypeError, ValueError):
        return default


class Settings:
    # Project info
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Journey Import")
    VERSION: str = os.getenv("VERSION", "1.0.0")

    # API settings
    API_TITLE: str = os.getenv("API_TITLE", f"{PROJECT_NAME} API")

    # Environment
    ENVIRONMENT_NAME: str = os.getenv("ENVIRONMENT_NAME", "development")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Share page fetching
    FETCH_TIMEOUT_SECONDS: float = _parse_float(os.getenv("FETCH_TIMEOUT_SECONDS", "15"), 15.0)
    FETCH_USER_AGENT: str = os.getenv(
        "FETCH_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    )

    # Input limits (enforced by the HTTP layer, not by the extraction engine)
    MAX_EXPORT_FILE_BYTES: int = int(os.getenv("MAX_EXPORT_FILE_BYTES", str(10 * 1024 * 1024)))
    MAX_PASTE_CHARS: int = int(os.getenv("MAX_PASTE_CHARS", "500000"))

    # Pasted text shorter than this is rejected before parsing
    MIN_PASTE_CHARS: int = int(os.getenv("MIN_PASTE_CHARS", "20"))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT_NAME == "production"


# Create settings instance
settings = Settings()
