"""Enums shared by the config and logging layers."""

from enum import Enum


class Environment(Enum):
    DEVELOPMENT = "dev"
    TESTING = "test"
    STAGING = "staging"
    PRODUCTION = "prod"


class LogLevel(Enum):
    """Log levels; ``priority`` matches the stdlib ``logging`` numbers."""

    DEBUG = ("DEBUG", 10)
    INFO = ("INFO", 20)
    WARNING = ("WARNING", 30)
    ERROR = ("ERROR", 40)

    def __init__(self, level_name: str, priority: int):
        self.level_name = level_name
        self.priority = priority

    def to_logging_level(self) -> int:
        return self.priority


class LogFormat(Enum):
    JSON = "json"
    CONSOLE = "console"
    PLAIN = "plain"
