"""Interfaces abstraites et structures de données pour l'exécution
de commandes.

Ce module définit :
    - Command : Description immuable d'une invocation d'exécutable.
    - ExecutionOptions : Options de routage de la sortie.
    - ExecutionResult : Résultat immuable d'une exécution.
    - CommandExecutor : Interface abstraite pour les exécuteurs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from exeq.commands.cancellation import CancellationContext

# Lève AuthorizationError pour refuser un exécutable
AuthorizationCheck = Callable[[str], None]


@dataclass(frozen=True)
class Command:
    """Invocation d'un exécutable avec redirections optionnelles.

    Attributes:
        name: Exécutable à lancer (jamais vide).
        args: Arguments dans l'ordre d'origine, sans les jetons de
            redirection ni leurs cibles.
        stdout_target: Fichier de redirection de stdout ("" = aucun).
        stderr_target: Fichier de redirection de stderr ("" = aucun).
    """

    name: str
    args: Tuple[str, ...] = ()
    stdout_target: str = ""
    stderr_target: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Le nom de la commande est requis.")
        # Accepte une liste en entrée, stocke toujours un tuple
        object.__setattr__(self, "args", tuple(self.args))

    @property
    def argv(self) -> List[str]:
        """Vecteur d'arguments transmis au système."""
        return [self.name, *self.args]

    def to_tokens(self) -> List[str]:
        """Reconstruit la forme jetons acceptée par parse_command.

        Returns:
            Liste [name, *args, ">", stdout, "2>", stderr], les
            redirections n'apparaissant que si elles sont définies.
        """
        tokens = self.argv
        if self.stdout_target:
            tokens += [">", self.stdout_target]
        if self.stderr_target:
            tokens += ["2>", self.stderr_target]
        return tokens


@dataclass(frozen=True)
class ExecutionOptions:
    """Options de routage de la sortie d'une exécution.

    Attributes:
        echo_to_console: Recopier stdout/stderr du sous-processus
            sur la sortie standard/erreur courante.
        allow_file_redirect: Autoriser l'ouverture des fichiers de
            redirection. Si False, les cibles sont ignorées.
    """

    echo_to_console: bool = False
    allow_file_redirect: bool = False


@dataclass(frozen=True)
class ExecutionResult:
    """Résultat de l'exécution d'une commande.

    Un code retour non nul n'est pas une erreur du moteur : c'est
    l'issue propre du sous-processus, rapportée telle quelle.

    Attributes:
        command: Commande exécutée.
        return_code: Code de retour du processus, None si le
            processus n'a jamais été lancé.
        success: True si code 0 et non annulé.
        cancelled: True si l'exécution a été interrompue par
            annulation (le groupe de processus a été tué).
        duration: Durée d'exécution en secondes.
        executed_as_root: True si lancé par root (uid 0).
        close_errors: Erreurs de fermeture des fichiers de
            redirection (enregistrées, non fatales).
    """

    command: Command
    return_code: Optional[int]
    success: bool
    cancelled: bool
    duration: float
    executed_as_root: bool = False
    close_errors: Tuple[str, ...] = ()


class CommandExecutor(ABC):
    """Interface abstraite pour l'exécution de commandes."""

    @abstractmethod
    def run(
        self,
        command: Command,
        is_authorized: AuthorizationCheck,
        cancel: Optional[CancellationContext] = None,
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionResult:
        """Exécute une commande et retourne le résultat.

        Args:
            command: Commande analysée.
            is_authorized: Prédicat d'autorisation, lève
                AuthorizationError pour refuser.
            cancel: Contexte d'annulation externe.
            options: Options de routage de la sortie.

        Returns:
            Résultat de l'exécution.
        """
        pass

    @abstractmethod
    def run_payload(
        self,
        payload: Union[Mapping[str, Any], str, bytes],
        is_authorized: AuthorizationCheck,
        cancel: Optional[CancellationContext] = None,
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionResult:
        """Décode un enregistrement de transport puis l'exécute.

        Args:
            payload: Enregistrement sérialisé de la commande.
            is_authorized: Prédicat d'autorisation.
            cancel: Contexte d'annulation externe.
            options: Options de routage de la sortie.

        Returns:
            Résultat de l'exécution.
        """
        pass
