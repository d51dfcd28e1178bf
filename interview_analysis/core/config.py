import os
from dotenv import load_dotenv

from interview_analysis.core.exceptions import ConfigurationError

# Load environment variables
load_dotenv()


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


class Settings:
    # --- Google Cloud ---
    GOOGLE_CLOUD_PROJECT_ID: str = os.getenv("GOOGLE_CLOUD_PROJECT_ID", "")
    GOOGLE_APPLICATION_CREDENTIALS: str = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "")
    SPEECH_LOCATION: str = os.getenv("SPEECH_LOCATION", "global")
    GCS_BUCKET_NAME: str = os.getenv("GCS_BUCKET_NAME", "career-advisor-interview-temp")
    STAGING_PREFIX: str = os.getenv("STAGING_PREFIX", "transcription-temp")

    # --- Content analysis (Gemini) ---
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-pro")
    GEMINI_MAX_RETRIES: int = _env_int("GEMINI_MAX_RETRIES", 3)

    DEFAULT_LANGUAGE_CODE: str = os.getenv("DEFAULT_LANGUAGE_CODE", "en-US")

    # --- Routing by payload size (MB) ---
    INLINE_ONLY_MAX_MB: float = _env_float("INLINE_ONLY_MAX_MB", 1.0)
    STAGED_ONLY_MIN_MB: float = _env_float("STAGED_ONLY_MIN_MB", 10.0)

    # --- Empirical thresholds, recalibrate per deployment ---
    CASCADE_ACCEPT_CONFIDENCE: float = _env_float("CASCADE_ACCEPT_CONFIDENCE", 0.5)
    QUALITY_CRITICAL_BELOW: float = _env_float("QUALITY_CRITICAL_BELOW", 0.7)
    QUALITY_WARNING_BELOW: float = _env_float("QUALITY_WARNING_BELOW", 0.85)
    QUALITY_MIN_WORDS: int = _env_int("QUALITY_MIN_WORDS", 20)
    LONG_PAUSE_SECONDS: float = _env_float("LONG_PAUSE_SECONDS", 2.0)

    # --- Video analysis ---
    VIDEO_TIMEOUT_SECONDS: float = _env_float("VIDEO_TIMEOUT_SECONDS", 300.0)
    VIDEO_STAGING_PREFIX: str = os.getenv("VIDEO_STAGING_PREFIX", "interview-recordings")

    # --- Staged job deadline: min(base + per_mb * size, max) ---
    STAGED_TIMEOUT_BASE_MS: int = _env_int("STAGED_TIMEOUT_BASE_MS", 300_000)
    STAGED_TIMEOUT_PER_MB_MS: int = _env_int("STAGED_TIMEOUT_PER_MB_MS", 60_000)
    STAGED_TIMEOUT_MAX_MS: int = _env_int("STAGED_TIMEOUT_MAX_MS", 600_000)

    def staged_timeout_ms(self, size_mb: float) -> float:
        return min(
            self.STAGED_TIMEOUT_BASE_MS + self.STAGED_TIMEOUT_PER_MB_MS * size_mb,
            self.STAGED_TIMEOUT_MAX_MS,
        )

    def validate(self):
        """Fail fast when the cloud services cannot be initialized."""
        if not self.GOOGLE_CLOUD_PROJECT_ID:
            raise ConfigurationError("GOOGLE_CLOUD_PROJECT_ID is not set")
        if not self.GEMINI_API_KEY:
            raise ConfigurationError("GEMINI_API_KEY is not set")


settings = Settings()
