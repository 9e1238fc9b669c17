"""Module d'analyse et d'exécution de commandes.

Ce module transforme une commande de type shell (nom + arguments avec
redirections ">", "1>", "2>") en Command, puis l'exécute en recopiant
sa sortie vers des fichiers et/ou la console.

Classes disponibles :
    Command : Commande analysée, immuable.
    ExecutionOptions : Options de routage de la sortie.
    ExecutionResult : Résultat immuable d'une exécution.
    CommandExecutor : Interface abstraite pour les exécuteurs.
    LinuxCommandExecutor : Exécuteur concret via subprocess.
    CancellationContext : Annulation et délai d'expiration.
    OutputSink, FileSink, ConsoleSink, MemorySink, MultiSink :
        Destinations d'écriture.
    CommandFormatter : Interface abstraite de formatage.
    PlainCommandFormatter : Formatage texte brut (logs fichier).
    AnsiCommandFormatter : Formatage ANSI coloré (console).

Fonctions disponibles :
    parse_command, parse_command_line : Analyse de la syntaxe.
    encode_command, decode_command, dumps_command : Codec de transport.
    task_type, queue_for_host : Clés de routage.
"""

from exeq.commands.base import (
    AuthorizationCheck,
    Command,
    CommandExecutor,
    ExecutionOptions,
    ExecutionResult,
)
from exeq.commands.cancellation import CancellationContext
from exeq.commands.codec import (
    DEFAULT_QUEUE,
    CommandPayload,
    decode_command,
    dumps_command,
    encode_command,
    queue_for_host,
    task_type,
)
from exeq.commands.formatter import (
    AnsiCommandFormatter,
    CommandFormatter,
    PlainCommandFormatter,
    render_command,
)
from exeq.commands.parser import (
    normalize_tokens,
    parse_command,
    parse_command_line,
)
from exeq.commands.runner import LinuxCommandExecutor
from exeq.commands.sinks import (
    ConsoleSink,
    FileSink,
    MemorySink,
    MultiSink,
    OutputSink,
)

__all__ = [
    # Structures de données
    "Command",
    "ExecutionOptions",
    "ExecutionResult",
    "AuthorizationCheck",
    # Analyse
    "normalize_tokens",
    "parse_command",
    "parse_command_line",
    # Codec
    "CommandPayload",
    "DEFAULT_QUEUE",
    "encode_command",
    "decode_command",
    "dumps_command",
    "task_type",
    "queue_for_host",
    # Annulation
    "CancellationContext",
    # Destinations
    "OutputSink",
    "FileSink",
    "ConsoleSink",
    "MemorySink",
    "MultiSink",
    # Formateurs
    "render_command",
    "CommandFormatter",
    "PlainCommandFormatter",
    "AnsiCommandFormatter",
    # Interface abstraite et implémentation Linux
    "CommandExecutor",
    "LinuxCommandExecutor",
]
