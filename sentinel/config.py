"""
Configuration for the PO Sentinel dashboard.
"""

# Load environment variables FIRST
from dotenv import load_dotenv
load_dotenv()

import os
import re
from typing import Optional


class Config:
    """Base configuration."""

    # LLM Configuration
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "gemini")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gemini-2.5-flash")
    LLM_FALLBACK_MODEL: str = os.getenv("LLM_FALLBACK_MODEL", "gemini-2.5-pro")
    LLM_MOCK_MODE: bool = os.getenv("LLM_MOCK_MODE", "false").lower() == "true"  # Mock mode for testing
    LLM_API_KEY: str = os.getenv("LLM_API_KEY", "")  # OpenAI-compatible providers
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", os.getenv("API_KEY", ""))
    LLM_API_BASE: Optional[str] = os.getenv("LLM_API_BASE", None)
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.3"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "1500"))

    # Urgency Engine
    URGENCY_TIER_TABLE: str = os.getenv("URGENCY_TIER_TABLE", "standard")  # standard (8) or extended (11)
    OVERDUE_AFTER_DAYS: int = int(os.getenv("OVERDUE_AFTER_DAYS", "30"))
    STUCK_PENDING_ESCALATION: bool = os.getenv("STUCK_PENDING_ESCALATION", "true").lower() == "true"
    STUCK_PENDING_AFTER_DAYS: int = int(os.getenv("STUCK_PENDING_AFTER_DAYS", "7"))

    # Alerts
    MAX_ALERT_HISTORY: int = int(os.getenv("MAX_ALERT_HISTORY", "50"))

    # Reminder schedule (Mon-Sat at 09:30, Sunday off)
    REMINDER_CUTOFF: str = os.getenv("REMINDER_CUTOFF", "09:30")
    REMINDER_DAY_OFF: int = int(os.getenv("REMINDER_DAY_OFF", "6"))  # datetime.weekday(), 6 = Sunday
    REMINDER_POLL_SECONDS: int = int(os.getenv("REMINDER_POLL_SECONDS", "60"))
    REMINDER_RECIPIENT: str = os.getenv("REMINDER_RECIPIENT", "procurement@example.com")
    REMINDER_RECIPIENT_NAME: str = os.getenv("REMINDER_RECIPIENT_NAME", "Procurement Team")
    REMINDER_MAX_ITEMS: int = 15  # mailto links get truncated beyond this

    # Import / order defaults
    IMPORT_DEFAULT_LEAD_DAYS: int = 30
    FORM_DEFAULT_LEAD_DAYS: int = 45

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    # Data Paths
    STORE_PATH: str = os.getenv(
        "STORE_PATH",
        os.path.join(os.path.expanduser("~"), ".po_sentinel", "store.json"),
    )

    @classmethod
    def validate(cls) -> None:
        """Validate configuration."""
        if cls.LLM_PROVIDER not in ["openai", "azure", "custom", "gemini", "mock"]:
            raise ValueError(f"Invalid LLM_PROVIDER: {cls.LLM_PROVIDER}")

        if cls.URGENCY_TIER_TABLE not in ["standard", "extended"]:
            raise ValueError(f"Invalid URGENCY_TIER_TABLE: {cls.URGENCY_TIER_TABLE}")

        if not re.fullmatch(r"([01]\d|2[0-3]):[0-5]\d", cls.REMINDER_CUTOFF):
            raise ValueError(f"REMINDER_CUTOFF must be HH:MM, got {cls.REMINDER_CUTOFF!r}")

        if not 0 <= cls.REMINDER_DAY_OFF <= 6:
            raise ValueError(f"REMINDER_DAY_OFF must be 0-6, got {cls.REMINDER_DAY_OFF}")

        if cls.MAX_ALERT_HISTORY < 1:
            raise ValueError("MAX_ALERT_HISTORY must be positive")


class DevelopmentConfig(Config):
    """Development configuration."""
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production configuration."""
    LLM_TEMPERATURE = 0.2
    LOG_LEVEL = "INFO"


class TestConfig(Config):
    """Test configuration."""
    LLM_TEMPERATURE = 0.0
    LOG_LEVEL = "DEBUG"
    LLM_MOCK_MODE = True


def get_config(env: str = None) -> Config:
    """Get configuration based on environment."""
    if env is None:
        env = os.getenv("ENV", "development").lower()

    if env == "production":
        config = ProductionConfig()
    elif env == "test":
        config = TestConfig()
    else:
        config = DevelopmentConfig()

    # Validate configuration on creation
    config.validate()
    return config
