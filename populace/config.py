"""
Populace Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Oracle Configuration. "heuristic" is the offline keyword oracle; anything
    # else is handed to mirascope as a provider name (openai, anthropic, ...).
    ORACLE_PROVIDER: str = os.getenv("ORACLE_PROVIDER", "heuristic")
    ORACLE_MODEL: str | None = os.getenv("ORACLE_MODEL")
    ORACLE_TIMEOUT_SECONDS: float = float(os.getenv("ORACLE_TIMEOUT_SECONDS", "30"))

    # API Keys
    ANTHROPIC_API_KEY: str | None = os.getenv("ANTHROPIC_API_KEY") or os.getenv("CLAUDE_API_KEY")
    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")

    # Simulation Configuration
    TIME_SCALE: float = float(os.getenv("TIME_SCALE", "1.0"))
    TICK_INTERVAL_SECONDS: float = float(os.getenv("TICK_INTERVAL_SECONDS", "0.1"))
    REFLECTION_THRESHOLD: int = int(os.getenv("REFLECTION_THRESHOLD", "10"))
    POPULATION_SIZE: int = int(os.getenv("POPULATION_SIZE", "100"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if required values are missing."""
        provider = cls.ORACLE_PROVIDER.lower()

        if provider != "heuristic" and not cls.ORACLE_MODEL:
            raise ValueError(
                f"ORACLE_MODEL is required when using the '{cls.ORACLE_PROVIDER}' provider"
            )

        if provider == "anthropic" and not cls.ANTHROPIC_API_KEY:
            raise ValueError(
                "ANTHROPIC_API_KEY (or CLAUDE_API_KEY) is required when using the 'anthropic' provider"
            )

        if provider == "openai" and not cls.OPENAI_API_KEY:
            raise ValueError(
                "OPENAI_API_KEY is required when using the 'openai' provider"
            )

        if cls.TIME_SCALE <= 0:
            raise ValueError("TIME_SCALE must be positive")
        if cls.TICK_INTERVAL_SECONDS <= 0:
            raise ValueError("TICK_INTERVAL_SECONDS must be positive")
        if cls.ORACLE_TIMEOUT_SECONDS <= 0:
            raise ValueError("ORACLE_TIMEOUT_SECONDS must be positive")
        if cls.REFLECTION_THRESHOLD < 1:
            raise ValueError("REFLECTION_THRESHOLD must be >= 1")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Populace Configuration:",
            f"  Oracle Provider: {cls.ORACLE_PROVIDER}",
            f"  Oracle Model: {cls.ORACLE_MODEL or '(none)'}",
            f"  Oracle Timeout: {cls.ORACLE_TIMEOUT_SECONDS}s",
            f"  Time Scale: {cls.TIME_SCALE}x",
            f"  Tick Interval: {cls.TICK_INTERVAL_SECONDS}s",
            f"  Reflection Threshold: {cls.REFLECTION_THRESHOLD}",
            f"  Population Size: {cls.POPULATION_SIZE}",
        ]
        return "\n".join(lines)
