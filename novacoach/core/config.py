"""
Configuration and constants for the Nova Coach service.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Provider Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_TIMEOUT_SECONDS: float = float(os.getenv("OPENAI_TIMEOUT_SECONDS", 90))

    # Shared secret expected from the calling backend
    INTERNAL_API_SECRET: str = os.getenv("INTERNAL_API_SECRET", "")

    # Model per capability tier
    FAST_MODEL: str = os.getenv("NOVA_FAST_MODEL", "gpt-4.1-mini")
    PRO_MODEL: str = os.getenv("NOVA_PRO_MODEL", "gpt-4.1")
    SEARCH_MODEL: str = os.getenv("NOVA_SEARCH_MODEL", "gpt-4o-mini-search-preview")
    IMAGE_MODEL: str = os.getenv("NOVA_IMAGE_MODEL", "gpt-image-1-mini")
    IMAGE_PRO_MODEL: str = os.getenv("NOVA_IMAGE_PRO_MODEL", "gpt-image-1")
    VIDEO_MODEL: str = os.getenv("NOVA_VIDEO_MODEL", "sora-2")

    # Server Configuration
    PORT: int = int(os.getenv("PORT", 10000))
    HOST: str = "0.0.0.0"

    # AI Temperature Settings
    TEMPERATURE_PLAN: float = 0.8        # Training plans
    TEMPERATURE_CHAT: float = 0.7        # Coach conversation
    TEMPERATURE_ANALYSIS: float = 0.4    # Biometric analysis, nutrition

    # Video Jobs
    VIDEO_POLL_INTERVAL_SECONDS: float = float(os.getenv("VIDEO_POLL_INTERVAL_SECONDS", 10))
    VIDEO_MAX_WAIT_SECONDS: float = float(os.getenv("VIDEO_MAX_WAIT_SECONDS", 600))
    ASSET_DOWNLOAD_TIMEOUT: int = 120

    # Local Storage
    MEDIA_DIR: str = os.getenv("NOVA_MEDIA_DIR", os.path.join(os.getcwd(), "media"))
    STORE_PATH: str = os.getenv("NOVA_STORE_PATH", os.path.join(os.getcwd(), "nova_store.json"))

    DEFAULT_LANGUAGE: str = os.getenv("NOVA_DEFAULT_LANGUAGE", "ar")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration on startup."""
        missing = []

        if not cls.OPENAI_API_KEY:
            missing.append("OPENAI_API_KEY")

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

        if cls.VIDEO_POLL_INTERVAL_SECONDS < 0 or cls.VIDEO_MAX_WAIT_SECONDS <= 0:
            raise ValueError("Video polling interval and wait budget must be positive.")


settings = Settings()
