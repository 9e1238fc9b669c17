"""Implémentation concrète du logger avec fichier."""

import logging
import os
from typing import Any, Dict, Optional

from exeq.logging.base import Logger

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class FileLogger(Logger):
    """
    Logger qui écrit dans un fichier avec option console.

    Caractéristiques:
    - Logger unique par instance (évite les conflits)
    - Encodage UTF-8 explicite
    - Flush immédiat après chaque log
    - Pas de propagation (évite les logs en double)
    - Support optionnel de la sortie console (stderr, pour ne pas
      se mélanger à la sortie des sous-processus sur stdout)
    """

    def __init__(
        self,
        log_file: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        console_output: bool = False
    ) -> None:
        """
        Initialise le logger.

        Args:
            log_file: Chemin du fichier de log. Si None, seule la
                      sortie console est utilisée.
            config: Configuration optionnelle (dict ou objet avec get())
                    Clés supportées: logging.level, logging.format
            console_output: Activer la sortie console en plus du fichier
        """
        self.log_file = log_file

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir, exist_ok=True)

        log_level_str, log_format = self._read_config(config)
        log_level = getattr(logging, str(log_level_str).upper(), logging.INFO)

        # Un logger par fichier, ou par instance en mode console seul
        self.logger = logging.getLogger(
            log_file or f"exeq.console.{id(self)}"
        )
        self.logger.setLevel(log_level)
        self.handler: Optional[logging.Handler] = None

        if not self.logger.handlers:
            formatter = logging.Formatter(log_format)
            if log_file:
                file_handler = logging.FileHandler(log_file, encoding='utf-8')
                file_handler.setLevel(log_level)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)
                self.handler = file_handler

            if console_output or not log_file:
                console_handler = logging.StreamHandler()
                console_handler.setLevel(log_level)
                console_handler.setFormatter(formatter)
                self.logger.addHandler(console_handler)
                if self.handler is None:
                    self.handler = console_handler
        else:
            self.handler = self.logger.handlers[0]

        # Ne pas propager pour éviter les logs en double
        self.logger.propagate = False

    @staticmethod
    def _read_config(config: Any) -> tuple[str, str]:
        """Extrait le niveau et le format depuis la configuration.

        Accepte un dict standard ({"logging": {...}}) ou un objet
        exposant get() avec accès par chemin pointé.
        """
        if config is None or not (
            hasattr(config, 'get') and callable(config.get)
        ):
            return "INFO", DEFAULT_FORMAT
        try:
            level = config.get("logging.level", None)
            fmt = config.get("logging.format", None)
            if level is not None or fmt is not None:
                return level or "INFO", fmt or DEFAULT_FORMAT
        except TypeError:
            pass
        logging_cfg = config.get("logging", {}) or {}
        return (
            logging_cfg.get("level", "INFO"),
            logging_cfg.get("format", DEFAULT_FORMAT),
        )

    def _flush(self) -> None:
        """Force l'écriture immédiate."""
        if self.handler:
            self.handler.flush()

    def log_debug(self, message: str) -> None:
        """Log un message de débogage."""
        self.logger.debug(message)
        self._flush()

    def log_info(self, message: str) -> None:
        """Log un message d'information."""
        self.logger.info(message)
        self._flush()

    def log_warning(self, message: str) -> None:
        """Log un avertissement."""
        self.logger.warning(message)
        self._flush()

    def log_error(self, message: str) -> None:
        """Log une erreur."""
        self.logger.error(message)
        self._flush()
