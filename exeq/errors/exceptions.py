"""
Module contenant les exceptions personnalisées d'exeq.

Toutes les exceptions métier héritent de ApplicationError pour
s'intégrer dans la chaîne d'error handlers (ConsoleErrorHandler,
LoggerErrorHandler).
"""
from typing import Optional, Sequence, Tuple


class ApplicationError(Exception):
    """Exception de base pour toute l'application."""
    pass


class ConfigurationError(ApplicationError):
    """Exception de base pour toutes les configurations."""
    pass


class FileConfigurationError(ConfigurationError):
    """Fichier de configuration illisible ou invalide."""
    pass


class CommandError(ApplicationError):
    """Exception de base pour toutes les erreurs liées à une commande."""
    pass


class CommandParseError(CommandError):
    """Syntaxe de commande invalide ou non supportée.

    Attributes:
        name: Nom de la commande analysée.
        raw_args: Arguments bruts fournis par l'appelant.
        reason: Raison lisible de l'échec.
    """

    def __init__(
        self,
        reason: str,
        name: str = "",
        args: Sequence[str] = (),
    ) -> None:
        self.name = name
        self.raw_args: Tuple[str, ...] = tuple(args)
        self.reason = reason
        super().__init__(f"{reason} '{name}' {list(self.raw_args)}")


class CommandDecodeError(CommandError):
    """Enregistrement de transport malformé ou incomplet."""
    pass


class AuthorizationError(CommandError):
    """L'exécutable demandé n'est pas autorisé.

    Attributes:
        name: Nom de l'exécutable refusé.
        allowed: Ensemble des exécutables autorisés (diagnostic).
    """

    def __init__(self, name: str, allowed: Sequence[str] = ()) -> None:
        self.name = name
        self.allowed = tuple(allowed)
        super().__init__(
            f"`{name}` n'est pas un exécutable autorisé. "
            f"Autorisés : {list(self.allowed)}"
        )


class RedirectSetupError(CommandError):
    """Impossible d'ouvrir un fichier de redirection.

    Attributes:
        path: Chemin du fichier de redirection.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(
            f"Impossible d'ouvrir le fichier de redirection "
            f"{path} : {reason}"
        )


class ExecutionError(CommandError):
    """Échec du lancement ou de l'attente d'un sous-processus."""

    def __init__(self, message: str, command: Optional[object] = None):
        self.command = command
        super().__init__(message)


class StreamWriteError(ExecutionError):
    """Échec d'écriture vers une destination pendant l'exécution."""
    pass


class ShortWriteError(OSError):
    """Une destination a accepté moins d'octets que fournis."""
    pass
