"""Logging structuré des événements de sécurité.

Ce module fournit les primitives pour tracer les décisions
d'autorisation sur les exécutables (commande autorisée, refusée,
mode privilégié) via une interface typée et une sortie JSON
structurée.

SecurityLogger dépend de l'abstraction Logger, non d'une
implémentation concrète.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from exeq.logging.base import Logger


class SecurityEventType(StrEnum):
    """Types d'événements de sécurité traçables."""

    COMMAND_ALLOWED = "command.allowed"
    COMMAND_DENIED = "command.denied"
    COMMAND_PRIVILEGED = "command.privileged"


@dataclass(frozen=True)
class SecurityEvent:
    """Événement de sécurité structuré pour audit trail.

    Attributes:
        event_type: Type d'événement (SecurityEventType).
        resource: Exécutable ou fichier concerné.
        details: Contexte additionnel de l'événement.
        severity: Niveau de sévérité (info, warning, error, critical).
        timestamp: Horodatage ISO 8601 UTC (auto-généré).
    """

    event_type: SecurityEventType
    resource: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    severity: str = "info"
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class SecurityLogger:
    """Logger spécialisé pour les événements de sécurité.

    Utilisation :
        sec_logger = SecurityLogger(file_logger)
        sec_logger.log_event(SecurityEvent(
            event_type=SecurityEventType.COMMAND_DENIED,
            resource="rm",
            details={"allowed": ["ls", "echo"]},
            severity="warning",
        ))
    """

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def log_event(self, event: SecurityEvent) -> None:
        """Enregistre un événement de sécurité en JSON structuré.

        Args:
            event: Événement de sécurité à journaliser.
        """
        payload: dict[str, Any] = {
            "security_event": str(event.event_type),
            "timestamp": event.timestamp,
            "resource": event.resource,
            "severity": event.severity,
            "details": event.details,
        }

        message = json.dumps(payload, ensure_ascii=False, default=str)

        if event.severity in ("error", "critical"):
            self._logger.log_error(message)
        elif event.severity == "warning":
            self._logger.log_warning(message)
        else:
            self._logger.log_info(message)
