"""Formateurs pour les messages du cycle de vie d'une commande.

Ce module fournit une hiérarchie de formateurs permettant d'afficher
le lancement, la fin et l'annulation d'une commande différemment selon
le contexte (fichier de log ou console) et les privilèges d'exécution
(root ou utilisateur).

Classes :
    CommandFormatter : Interface abstraite de formatage.
    PlainCommandFormatter : Texte brut avec préfixes [ROOT]/[user].
    AnsiCommandFormatter : Codes ANSI colorés pour la console.

Note :
    AnsiCommandFormatter vérifie automatiquement si la sortie est
    un terminal (TTY) avant d'émettre des codes ANSI, évitant
    ainsi de polluer les pipes ou les redirections.
"""

import shlex
import sys
from abc import ABC, abstractmethod
from typing import Optional

from exeq.commands.base import Command


def render_command(command: Command) -> str:
    """Rend une commande sous forme de ligne shell lisible.

    Args:
        command: Commande à afficher.

    Returns:
        Ligne quotée, redirections comprises (ex: "ls -la > /tmp/out").
    """
    return " ".join(
        token if token in (">", "2>") else shlex.quote(token)
        for token in command.to_tokens()
    )


class CommandFormatter(ABC):
    """Interface abstraite pour formater les messages de commande.

    Les formateurs reçoivent le contexte d'exécution (is_root)
    pour adapter leur affichage en conséquence.
    """

    @abstractmethod
    def format_start(self, command: Command, is_root: bool) -> str:
        """Formate le message de lancement.

        Args:
            command: Commande lancée.
            is_root: True si la commande est exécutée en root.

        Returns:
            Message formaté prêt à l'affichage.
        """
        pass

    @abstractmethod
    def format_exit(
        self, command: Command, return_code: int, is_root: bool
    ) -> str:
        """Formate le message de fin avec le code de retour.

        Args:
            command: Commande terminée.
            return_code: Code de retour du processus.
            is_root: True si la commande est exécutée en root.

        Returns:
            Message formaté prêt à l'affichage.
        """
        pass

    @abstractmethod
    def format_cancel(
        self, command: Command, reason: Optional[str], is_root: bool
    ) -> str:
        """Formate le message d'annulation.

        Args:
            command: Commande annulée.
            reason: Raison de l'annulation (ex: "timeout").
            is_root: True si la commande est exécutée en root.

        Returns:
            Message formaté prêt à l'affichage.
        """
        pass


class PlainCommandFormatter(CommandFormatter):
    """Formateur texte brut pour les logs fichier.

    Example :
        [user] Exécution : rsync -av /src /dst > /tmp/rsync.log
        [ROOT] Code retour 0 : rsync -av /src /dst
    """

    _ROOT_PREFIX = "[ROOT]"
    _USER_PREFIX = "[user]"

    def _prefix(self, is_root: bool) -> str:
        return self._ROOT_PREFIX if is_root else self._USER_PREFIX

    def format_start(self, command: Command, is_root: bool) -> str:
        return (
            f"{self._prefix(is_root)} Exécution : "
            f"{render_command(command)}"
        )

    def format_exit(
        self, command: Command, return_code: int, is_root: bool
    ) -> str:
        return (
            f"{self._prefix(is_root)} Code retour {return_code} : "
            f"{render_command(command)}"
        )

    def format_cancel(
        self, command: Command, reason: Optional[str], is_root: bool
    ) -> str:
        return (
            f"{self._prefix(is_root)} Annulée ({reason or 'annulation'}) : "
            f"{render_command(command)}"
        )


class AnsiCommandFormatter(CommandFormatter):
    """Formateur ANSI coloré pour la sortie console.

    Distingue visuellement les exécutions root (jaune-or gras) des
    exécutions utilisateur (vert). Les fins en échec et les
    annulations sont affichées en rouge.

    Styles ANSI :
        ROOT    → \\033[1;33m (jaune-or gras)
        user    → \\033[0;32m (vert normal)
        échec   → \\033[0;31m (rouge)
        reset   → \\033[0m
    """

    RESET = "\033[0m"
    ROOT_STYLE = "\033[1;33m"
    USER_STYLE = "\033[0;32m"
    FAIL_STYLE = "\033[0;31m"

    def __init__(self) -> None:
        self._plain = PlainCommandFormatter()

    def _is_tty(self) -> bool:
        """Vérifie si stderr est un terminal interactif (TTY).

        Les messages de cycle de vie sont affichés sur stderr pour ne
        pas se mélanger à la sortie recopiée sur stdout.
        """
        return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()

    def _style(self, text: str, style: str) -> str:
        if not self._is_tty():
            return text
        return f"{style}{text}{self.RESET}"

    def _role_style(self, is_root: bool) -> str:
        return self.ROOT_STYLE if is_root else self.USER_STYLE

    def format_start(self, command: Command, is_root: bool) -> str:
        return self._style(
            self._plain.format_start(command, is_root),
            self._role_style(is_root),
        )

    def format_exit(
        self, command: Command, return_code: int, is_root: bool
    ) -> str:
        style = (
            self._role_style(is_root) if return_code == 0
            else self.FAIL_STYLE
        )
        return self._style(
            self._plain.format_exit(command, return_code, is_root), style
        )

    def format_cancel(
        self, command: Command, reason: Optional[str], is_root: bool
    ) -> str:
        return self._style(
            self._plain.format_cancel(command, reason, is_root),
            self.FAIL_STYLE,
        )
