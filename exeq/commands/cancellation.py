"""Contexte d'annulation coopératif pour les exécutions.

L'annulation est déclenchée de l'extérieur (arrêt demandé en amont)
ou par une échéance. Elle n'est jamais une erreur : le moteur tue le
groupe de processus et rapporte un résultat annulé.

Example:
    Annulation automatique après 30 secondes :

        cancel = CancellationContext(timeout=30)
        try:
            result = executor.run(command, authorizer, cancel=cancel)
        finally:
            cancel.close()
"""

import threading
from typing import Callable, List, Optional


class CancellationContext:
    """Signal d'annulation partagé entre l'appelant et le moteur.

    Attributes:
        timeout: Échéance en secondes, None si aucune.
    """

    TIMEOUT_REASON = "timeout"

    def __init__(self, timeout: Optional[float] = None) -> None:
        """Initialise le contexte et arme l'échéance éventuelle.

        Args:
            timeout: Délai en secondes avant annulation automatique.

        Raises:
            ValueError: Si timeout est négatif.
        """
        if timeout is not None and timeout < 0:
            raise ValueError("Le timeout doit être positif.")
        self.timeout = timeout
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        self._reason: Optional[str] = None
        self._timer: Optional[threading.Timer] = None
        if timeout is not None:
            self._timer = threading.Timer(
                timeout, self.cancel, args=(self.TIMEOUT_REASON,)
            )
            self._timer.daemon = True
            self._timer.start()

    @property
    def cancelled(self) -> bool:
        """True si l'annulation a été déclenchée."""
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        """Raison de l'annulation, None tant qu'elle n'a pas eu lieu."""
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        """Déclenche l'annulation et notifie les callbacks enregistrés.

        Les appels suivants sont sans effet.

        Args:
            reason: Raison de l'annulation.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Bloque jusqu'à l'annulation ou l'expiration du délai.

        Returns:
            True si l'annulation a été déclenchée.
        """
        return self._event.wait(timeout)

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Enregistre un callback appelé à l'annulation.

        Si l'annulation a déjà eu lieu, le callback est appelé
        immédiatement.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Retire un callback précédemment enregistré."""
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def close(self) -> None:
        """Désarme l'échéance sans déclencher l'annulation."""
        if self._timer is not None:
            self._timer.cancel()
