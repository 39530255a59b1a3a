"""
Wardrobe Colors Configuration
Manages environment variables and defaults for the color services.
"""
import os
from typing import Optional


class Config:
    """Configuration class for wardrobe color services."""

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("WARDROBE_MAX_FILE_MB", "5"))
    MAX_EDGE: int = int(os.environ.get("WARDROBE_MAX_EDGE", "1024"))

    # Extraction defaults
    DEFAULT_SENSITIVITY: int = int(os.environ.get("WARDROBE_DEFAULT_SENSITIVITY", "50"))
    DEFAULT_TOP_N: int = int(os.environ.get("WARDROBE_DEFAULT_TOP_N", "5"))
    MIN_SENSITIVITY: int = 10
    MAX_SENSITIVITY: int = 100
    MAX_TOP_N: int = 10
    FALLBACK_MAX_SAMPLES: int = int(os.environ.get("WARDROBE_FALLBACK_MAX_SAMPLES", "20000"))

    # Logging
    LOG_LEVEL: str = os.environ.get("WARDROBE_LOG_LEVEL", "INFO")
    LOG_JSON: bool = bool(int(os.environ.get("WARDROBE_LOG_JSON", "0")))

    # External outfit analysis service
    OUTFIT_API_BASE_URL: str = os.environ.get("WARDROBE_OUTFIT_API_BASE_URL", "http://localhost:8000")
    OUTFIT_API_ANALYSIS_ENDPOINT: str = os.environ.get(
        "WARDROBE_OUTFIT_API_ANALYSIS_ENDPOINT", "/api/v1/analysis/complete"
    )
    OUTFIT_API_TIMEOUT: float = float(os.environ.get("WARDROBE_OUTFIT_API_TIMEOUT", "30"))
    OUTFIT_API_RETRIES: int = int(os.environ.get("WARDROBE_OUTFIT_API_RETRIES", "3"))
    OUTFIT_API_KEY: Optional[str] = os.environ.get("WARDROBE_OUTFIT_API_KEY")

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get(
        "WARDROBE_ALLOWED_ORIGINS", "http://localhost:3333,http://localhost:5173"
    )

    # Supported image formats
    SUPPORTED_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]
    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}

    @classmethod
    def validate_sensitivity(cls, sensitivity: int) -> bool:
        """Validate background-removal sensitivity."""
        return cls.MIN_SENSITIVITY <= sensitivity <= cls.MAX_SENSITIVITY

    @classmethod
    def validate_top_n(cls, top_n: int) -> bool:
        """Validate number of dominant colors requested."""
        return 1 <= top_n <= cls.MAX_TOP_N

    @classmethod
    def allowed_origins(cls) -> list:
        """Split the CORS origins setting into a list."""
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global config instance
config = Config()
