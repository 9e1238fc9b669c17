"""Paramètres d'exécution validés par Pydantic.

Exemple de fichier TOML :

    privileged = false
    echo = true
    allow_file_redirect = true
    jobs = 4
    timeout = 300
    whitelist = ["ls", "uptime", "df"]
    queue = "exeq"

    [logging]
    level = "INFO"
    file = "/var/log/exeq/exeq.log"
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from exeq.authorization import WhitelistAuthorizer
from exeq.commands.base import ExecutionOptions
from exeq.commands.cancellation import CancellationContext
from exeq.commands.codec import DEFAULT_QUEUE
from exeq.config.loader import ConfigLoader, FileConfigLoader
from exeq.errors.exceptions import FileConfigurationError
from exeq.logging.file_logger import DEFAULT_FORMAT, FileLogger
from exeq.logging.security_logger import SecurityLogger


class LoggingSettings(BaseModel):
    """Section [logging] : niveau, format et fichier de log."""

    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"
    format: str = DEFAULT_FORMAT
    file: Optional[str] = None


class ExeqSettings(BaseModel):
    """Paramètres d'un serveur d'exécution.

    Attributes:
        privileged: Autorise toute commande (ignore la liste blanche).
        echo: Recopie la sortie des commandes sur la console.
        allow_file_redirect: Autorise l'écriture des redirections.
        jobs: Nombre de commandes exécutées en parallèle, lu par le
            pool de workers externe.
        timeout: Délai maximal d'une commande en secondes (None =
            illimité).
        whitelist: Exécutables autorisés hors mode privilégié.
        queue: Nom de la file de tâches consommée, lu par le
            transport externe.
        logging: Paramètres de journalisation.
    """

    model_config = ConfigDict(extra="forbid")

    privileged: bool = False
    echo: bool = False
    allow_file_redirect: bool = False
    jobs: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)
    timeout: Optional[float] = Field(default=None, gt=0)
    whitelist: List[str] = Field(default_factory=list)
    queue: str = Field(default=DEFAULT_QUEUE, min_length=1)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def execution_options(self) -> ExecutionOptions:
        """Options de routage de la sortie."""
        return ExecutionOptions(
            echo_to_console=self.echo,
            allow_file_redirect=self.allow_file_redirect,
        )

    def authorizer(
        self,
        security_logger: Optional[SecurityLogger] = None
    ) -> WhitelistAuthorizer:
        """Construit le prédicat d'autorisation correspondant."""
        return WhitelistAuthorizer(
            self.whitelist,
            privileged=self.privileged,
            security_logger=security_logger,
        )

    def cancellation(self) -> CancellationContext:
        """Crée un contexte d'annulation armé avec le délai configuré.

        Un nouveau contexte doit être créé pour chaque commande.
        """
        return CancellationContext(timeout=self.timeout)

    def logging_config(self) -> Dict[str, Any]:
        """Configuration au format attendu par FileLogger."""
        return {
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "file": self.logging.file,
            }
        }

    def create_logger(self, console_output: bool = False) -> FileLogger:
        """Construit le FileLogger décrit par la section [logging].

        Args:
            console_output: Ajoute la sortie console au fichier.
                Sans fichier configuré, la console est toujours
                utilisée.
        """
        return FileLogger(
            self.logging.file,
            config=self.logging_config(),
            console_output=console_output,
        )


def load_settings(
    path: Optional[Union[str, Path]] = None,
    loader: Optional[ConfigLoader] = None,
) -> ExeqSettings:
    """Charge les paramètres depuis un fichier TOML ou JSON.

    Args:
        path: Chemin du fichier. Si None, retourne les valeurs par
            défaut.
        loader: Chargeur injectable (défaut: FileConfigLoader).

    Returns:
        Paramètres validés.

    Raises:
        FileConfigurationError: Fichier absent, illisible ou invalide.
    """
    if path is None:
        return ExeqSettings()

    loader = loader or FileConfigLoader()
    try:
        return loader.load(path, schema=ExeqSettings)
    except (OSError, ValueError) as e:
        raise FileConfigurationError(
            f"Configuration invalide ({path}) : {e}"
        ) from e
