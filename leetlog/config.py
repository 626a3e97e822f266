"""
Configuration settings for the LeetLog backend.
Values come from environment variables (optionally loaded from a .env file).
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def get_cors_origins() -> List[str]:
    """Get allowed CORS origins from a comma separated environment variable."""
    return [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///./leetlog.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = os.getenv("LOG_FILE")


@dataclass
class LeetCodeSettings:
    """Problem metadata source settings."""
    graphql_url: str = os.getenv("LEETCODE_GRAPHQL_URL", "https://leetcode.com/graphql")
    timeout: float = float(os.getenv("LEETCODE_TIMEOUT", "15"))


@dataclass
class JournalSettings:
    """Log history settings."""
    # Newest logs loaded per problem for read views
    log_fetch_limit: int = _int_env("LOG_FETCH_LIMIT", 20)
    # Non-expired logs kept per problem after filtering
    log_retain_limit: int = _int_env("LOG_RETAIN_LIMIT", 10)
    # Attempts at persisting a snapshot before giving up on a version conflict
    snapshot_retries: int = _int_env("SNAPSHOT_RETRIES", 3)


@dataclass
class ApiSettings:
    """HTTP API settings."""
    cors_origins: List[str] = field(default_factory=get_cors_origins)


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    leetcode: LeetCodeSettings = field(default_factory=LeetCodeSettings)
    journal: JournalSettings = field(default_factory=JournalSettings)
    api: ApiSettings = field(default_factory=ApiSettings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.journal.log_fetch_limit < 1:
            raise ValueError("LOG_FETCH_LIMIT must be positive")

        if self.journal.log_retain_limit < 1:
            raise ValueError("LOG_RETAIN_LIMIT must be positive")

        if self.journal.log_retain_limit > self.journal.log_fetch_limit:
            raise ValueError("LOG_RETAIN_LIMIT cannot be greater than LOG_FETCH_LIMIT")

        if self.journal.snapshot_retries < 1:
            raise ValueError("SNAPSHOT_RETRIES must be positive")

        if self.leetcode.timeout <= 0:
            raise ValueError("LEETCODE_TIMEOUT must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
