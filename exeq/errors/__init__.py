"""Module de gestion des erreurs."""

from exeq.errors.base import ErrorHandler, ErrorHandlerChain
from exeq.errors.exceptions import (ApplicationError,
                                    ConfigurationError,
                                    FileConfigurationError,
                                    CommandError,
                                    CommandParseError,
                                    CommandDecodeError,
                                    AuthorizationError,
                                    RedirectSetupError,
                                    ExecutionError,
                                    StreamWriteError,
                                    ShortWriteError)
from exeq.errors.console_handler import ConsoleErrorHandler
from exeq.errors.logger_handler import LoggerErrorHandler


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "FileConfigurationError",
    "CommandError",
    "CommandParseError",
    "CommandDecodeError",
    "AuthorizationError",
    "RedirectSetupError",
    "ExecutionError",
    "StreamWriteError",
    "ShortWriteError",
    "ErrorHandler",
    "ConsoleErrorHandler",
    "LoggerErrorHandler",
    "ErrorHandlerChain",
]
