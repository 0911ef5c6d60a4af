"""
redis-cleaner Configuration Management

Environment-based configuration with validation and type checking.
Loads from .env file and environment variables.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class RedisProtocol(str, Enum):
    """Connection URL scheme."""
    REDIS = "redis"    # plain TCP
    REDISS = "rediss"  # TLS (default, managed Redis services)


@dataclass
class CleanerConfig:
    """
    Complete redis-cleaner configuration.

    Passed explicitly to the coordinator and notifier; nothing reads the
    environment after from_env() returns.
    """

    # Redis connection
    redis_host: str = ""
    redis_port: int = 6379
    redis_username: str = ""
    redis_password: str = ""
    # Kept as given so validate() can reject unknown schemes
    redis_protocol: str = RedisProtocol.REDISS.value

    # Notification (empty webhook URL disables delivery)
    webhook_url: str = ""
    notification_title: str = "Redis Cleanup"
    notification_timeout_secs: float = 10.0
    notification_template_file: str = ""

    # Sweep tuning
    max_iterations: int = 100_000
    server_side: bool = False

    # Observability
    log_level: LogLevel = LogLevel.INFO

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "CleanerConfig":
        """
        Load configuration from environment variables (and .env if present).

        Environment variable names:
        - REDIS_HOST
        - REDIS_PORT
        - REDIS_USERNAME
        - REDIS_PASSWORD
        - REDIS_PROTOCOL
        - NOTIFICATION_WEBHOOK_URL
        - NOTIFICATION_CLEANUP_TITLE
        - NOTIFICATION_TIMEOUT_SECS
        - NOTIFICATION_TEMPLATE_FILE
        - REDIS_CLEANER_MAX_ITERATIONS
        - REDIS_CLEANER_SERVER_SIDE
        - REDIS_CLEANER_LOG_LEVEL
        """
        if dotenv:
            load_dotenv()

        def get_int(key: str, default: int) -> int:
            try:
                return int(os.getenv(key, default))
            except ValueError:
                return default

        def get_float(key: str, default: float) -> float:
            try:
                return float(os.getenv(key, default))
            except ValueError:
                return default

        def get_bool(key: str, default: bool) -> bool:
            value = os.getenv(key, str(default)).lower()
            return value in ("true", "1", "yes", "on")

        def get_str(key: str, default: str) -> str:
            return os.getenv(key, default)

        def get_enum(key: str, enum_cls, default):
            value = get_str(key, default.value)
            try:
                return enum_cls(value)
            except ValueError:
                return default

        return cls(
            redis_host=get_str("REDIS_HOST", ""),
            redis_port=get_int("REDIS_PORT", 6379),
            redis_username=get_str("REDIS_USERNAME", ""),
            redis_password=get_str("REDIS_PASSWORD", ""),
            redis_protocol=get_str("REDIS_PROTOCOL", RedisProtocol.REDISS.value).strip().lower(),
            webhook_url=get_str("NOTIFICATION_WEBHOOK_URL", ""),
            notification_title=get_str("NOTIFICATION_CLEANUP_TITLE", "Redis Cleanup"),
            notification_timeout_secs=get_float("NOTIFICATION_TIMEOUT_SECS", 10.0),
            notification_template_file=get_str("NOTIFICATION_TEMPLATE_FILE", ""),
            max_iterations=get_int("REDIS_CLEANER_MAX_ITERATIONS", 100_000),
            server_side=get_bool("REDIS_CLEANER_SERVER_SIDE", False),
            log_level=get_enum("REDIS_CLEANER_LOG_LEVEL", LogLevel, LogLevel.INFO),
        )

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if valid, raises ValueError if invalid
        """
        if not self.redis_host:
            raise ValueError("REDIS_HOST is required")

        if self.redis_port < 1 or self.redis_port > 65535:
            raise ValueError(f"Invalid redis_port: {self.redis_port}")

        try:
            RedisProtocol(self.redis_protocol)
        except ValueError:
            choices = ", ".join(p.value for p in RedisProtocol)
            raise ValueError(
                f"Invalid redis_protocol: {self.redis_protocol!r} (expected one of: {choices})"
            ) from None

        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive: {self.max_iterations}")

        if self.notification_timeout_secs <= 0:
            raise ValueError(
                f"notification_timeout_secs must be positive: {self.notification_timeout_secs}"
            )

        if self.webhook_url and not self.webhook_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid webhook_url: {self.webhook_url}")

        if self.notification_template_file and not Path(self.notification_template_file).is_file():
            raise ValueError(
                f"Notification template not found: {self.notification_template_file}"
            )

        return True

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.webhook_url)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (credentials masked)."""
        return {
            "redis_host": self.redis_host,
            "redis_port": self.redis_port,
            "redis_username": self.redis_username,
            "redis_password": "***" if self.redis_password else "",
            "redis_protocol": getattr(self.redis_protocol, "value", self.redis_protocol),
            "notifications_enabled": self.notifications_enabled,
            "notification_title": self.notification_title,
            "notification_timeout_secs": self.notification_timeout_secs,
            "notification_template_file": self.notification_template_file,
            "max_iterations": self.max_iterations,
            "server_side": self.server_side,
            "log_level": self.log_level.value,
        }

    def __str__(self) -> str:
        """Pretty print configuration."""
        lines = ["redis-cleaner Configuration:"]
        for key, value in self.to_dict().items():
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
