"""
exeq - Exécution distante de commandes avec redirections.

Modules disponibles:
- commands: Analyse de la syntaxe de redirection (parse_command),
  codec de transport et moteur d'exécution (LinuxCommandExecutor)
- authorization: Liste blanche des exécutables (WhitelistAuthorizer)
- config: Chargement et validation des paramètres (TOML, JSON)
- logging: Gestion des logs (Logger, FileLogger, SecurityLogger)
- errors: Hiérarchie d'exceptions et chaîne de gestionnaires
"""

__version__ = "1.0.0"

from exeq.logging import (
    Logger,
    FileLogger,
    SecurityEvent,
    SecurityEventType,
    SecurityLogger,
)
from exeq.errors import (
    ApplicationError,
    ConfigurationError,
    FileConfigurationError,
    CommandError,
    CommandParseError,
    CommandDecodeError,
    AuthorizationError,
    RedirectSetupError,
    ExecutionError,
    StreamWriteError,
    ShortWriteError,
    ErrorHandler,
    ErrorHandlerChain,
    ConsoleErrorHandler,
    LoggerErrorHandler,
)
from exeq.commands import (
    Command,
    ExecutionOptions,
    ExecutionResult,
    CommandExecutor,
    LinuxCommandExecutor,
    CancellationContext,
    OutputSink,
    FileSink,
    ConsoleSink,
    MemorySink,
    MultiSink,
    CommandFormatter,
    PlainCommandFormatter,
    AnsiCommandFormatter,
    parse_command,
    parse_command_line,
    encode_command,
    decode_command,
    dumps_command,
    task_type,
    queue_for_host,
)
from exeq.authorization import WhitelistAuthorizer
from exeq.config import (
    ConfigLoader,
    FileConfigLoader,
    ExeqSettings,
    LoggingSettings,
    load_settings,
)

__all__ = [
    # Logging
    "Logger",
    "FileLogger",
    "SecurityEvent",
    "SecurityEventType",
    "SecurityLogger",
    # Erreurs
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
    "ErrorHandlerChain",
    "ConsoleErrorHandler",
    "LoggerErrorHandler",
    # Commandes
    "Command",
    "ExecutionOptions",
    "ExecutionResult",
    "CommandExecutor",
    "LinuxCommandExecutor",
    "CancellationContext",
    "OutputSink",
    "FileSink",
    "ConsoleSink",
    "MemorySink",
    "MultiSink",
    "CommandFormatter",
    "PlainCommandFormatter",
    "AnsiCommandFormatter",
    "parse_command",
    "parse_command_line",
    "encode_command",
    "decode_command",
    "dumps_command",
    "task_type",
    "queue_for_host",
    # Autorisation
    "WhitelistAuthorizer",
    # Configuration
    "ConfigLoader",
    "FileConfigLoader",
    "ExeqSettings",
    "LoggingSettings",
    "load_settings",
]
