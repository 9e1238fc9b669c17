"""Autorisation des exécutables par liste blanche.

Le moteur d'exécution ne décide pas lui-même de ce qui peut être lancé :
il consulte un prédicat fourni par l'appelant. WhitelistAuthorizer est
le prédicat standard : en mode privilégié tout est autorisé, sinon seuls
les exécutables de la liste blanche le sont.
"""

from typing import Iterable, Optional, Tuple

from exeq.errors.exceptions import AuthorizationError
from exeq.logging.security_logger import (
    SecurityEvent,
    SecurityEventType,
    SecurityLogger,
)


class WhitelistAuthorizer:
    """Prédicat d'autorisation utilisable par LinuxCommandExecutor.

    Attributes:
        privileged: True si toute commande est autorisée.
    """

    def __init__(
        self,
        whitelist: Iterable[str],
        privileged: bool = False,
        security_logger: Optional[SecurityLogger] = None,
    ) -> None:
        """Initialise l'autorisateur.

        Args:
            whitelist: Noms d'exécutables autorisés.
            privileged: Autorise toute commande si True.
            security_logger: Journal d'audit optionnel.
        """
        self._whitelist = frozenset(whitelist)
        self.privileged = privileged
        self._security_logger = security_logger

    @property
    def allowed(self) -> Tuple[str, ...]:
        """Exécutables autorisés, triés."""
        return tuple(sorted(self._whitelist))

    def _audit(self, event: SecurityEvent) -> None:
        if self._security_logger:
            self._security_logger.log_event(event)

    def __call__(self, name: str) -> None:
        """Vérifie qu'un exécutable peut être lancé.

        Args:
            name: Nom de l'exécutable.

        Raises:
            AuthorizationError: Si l'exécutable n'est pas autorisé.
        """
        if self.privileged:
            self._audit(SecurityEvent(
                event_type=SecurityEventType.COMMAND_PRIVILEGED,
                resource=name,
                details={"privileged": True},
                severity="warning",
            ))
            return

        if name not in self._whitelist:
            self._audit(SecurityEvent(
                event_type=SecurityEventType.COMMAND_DENIED,
                resource=name,
                details={"allowed": list(self.allowed)},
                severity="warning",
            ))
            raise AuthorizationError(name, self.allowed)

        self._audit(SecurityEvent(
            event_type=SecurityEventType.COMMAND_ALLOWED,
            resource=name,
        ))
