"""Module de logging."""

from exeq.logging.base import Logger
from exeq.logging.file_logger import FileLogger
from exeq.logging.security_logger import (
    SecurityEvent,
    SecurityEventType,
    SecurityLogger,
)

__all__ = [
    "Logger",
    "FileLogger",
    "SecurityEvent",
    "SecurityEventType",
    "SecurityLogger",
]
