"""Tests pour les formateurs du cycle de vie des commandes."""

from unittest.mock import patch

import pytest

from exeq.commands import (
    AnsiCommandFormatter,
    Command,
    CommandFormatter,
    PlainCommandFormatter,
    render_command,
)

LS = Command("ls", ("-la", "mon dossier"), "/tmp/out", "")


class TestRenderCommand:
    """Tests de render_command."""

    def test_quote_et_redirections(self):
        """Les arguments sont quotés, les redirections restent nues."""
        assert render_command(LS) == "ls -la 'mon dossier' > /tmp/out"

    def test_stderr(self):
        """La redirection de stderr est affichée."""
        assert render_command(Command("df", (), "", "/e")) == "df 2> /e"


class TestPlainCommandFormatter:
    """Tests pour PlainCommandFormatter."""

    def setup_method(self):
        """Initialise le formateur."""
        self.formatter = PlainCommandFormatter()

    def test_implemente_l_interface(self):
        """PlainCommandFormatter implémente CommandFormatter."""
        assert isinstance(self.formatter, CommandFormatter)

    @pytest.mark.parametrize("is_root,prefix", [
        (True, "[ROOT]"),
        (False, "[user]"),
    ])
    def test_format_start(self, is_root, prefix):
        """Le lancement porte le préfixe de privilège."""
        assert self.formatter.format_start(LS, is_root) == (
            f"{prefix} Exécution : ls -la 'mon dossier' > /tmp/out"
        )

    def test_format_exit(self):
        """La fin affiche le code retour."""
        assert self.formatter.format_exit(Command("ls"), 2, False) == (
            "[user] Code retour 2 : ls"
        )

    def test_format_cancel(self):
        """L'annulation affiche sa raison."""
        assert self.formatter.format_cancel(
            Command("ls"), "timeout", True
        ) == "[ROOT] Annulée (timeout) : ls"

    def test_format_cancel_sans_raison(self):
        """Sans raison, un libellé générique est utilisé."""
        assert "(annulation)" in self.formatter.format_cancel(
            Command("ls"), None, False
        )


class TestAnsiCommandFormatter:
    """Tests pour AnsiCommandFormatter."""

    def setup_method(self):
        """Initialise le formateur."""
        self.formatter = AnsiCommandFormatter()

    @patch("exeq.commands.formatter.sys.stderr")
    def test_sans_tty_texte_brut(self, mock_stderr):
        """Hors terminal, aucun code ANSI n'est émis."""
        mock_stderr.isatty.return_value = False
        message = self.formatter.format_start(Command("ls"), False)
        assert message == "[user] Exécution : ls"

    @patch("exeq.commands.formatter.sys.stderr")
    def test_couleur_root(self, mock_stderr):
        """Le lancement root est en jaune-or gras."""
        mock_stderr.isatty.return_value = True
        message = self.formatter.format_start(Command("ls"), True)
        assert message.startswith(AnsiCommandFormatter.ROOT_STYLE)
        assert message.endswith(AnsiCommandFormatter.RESET)

    @patch("exeq.commands.formatter.sys.stderr")
    def test_couleur_user(self, mock_stderr):
        """Le lancement utilisateur est en vert."""
        mock_stderr.isatty.return_value = True
        message = self.formatter.format_exit(Command("ls"), 0, False)
        assert message.startswith(AnsiCommandFormatter.USER_STYLE)

    @patch("exeq.commands.formatter.sys.stderr")
    def test_echec_en_rouge(self, mock_stderr):
        """Un code retour non nul est affiché en rouge."""
        mock_stderr.isatty.return_value = True
        message = self.formatter.format_exit(Command("ls"), 1, True)
        assert message.startswith(AnsiCommandFormatter.FAIL_STYLE)

    @patch("exeq.commands.formatter.sys.stderr")
    def test_annulation_en_rouge(self, mock_stderr):
        """L'annulation est toujours affichée en rouge."""
        mock_stderr.isatty.return_value = True
        message = self.formatter.format_cancel(Command("ls"), "timeout", False)
        assert message.startswith(AnsiCommandFormatter.FAIL_STYLE)
        assert "Annulée (timeout)" in message
