"""Tests pour l'analyse de la syntaxe de redirection."""

import pytest

from exeq.commands import (
    Command,
    normalize_tokens,
    parse_command,
    parse_command_line,
)
from exeq.errors import CommandParseError


# --- Tests normalize_tokens ---


class TestNormalizeTokens:
    """Tests de la passe de normalisation des formes collées."""

    def test_arguments_sans_redirection_inchanges(self):
        """Les arguments ordinaires passent sans modification."""
        assert normalize_tokens("ls", ["-la", "/tmp"]) == ["-la", "/tmp"]

    def test_arguments_vides_ignores(self):
        """Les arguments vides sont supprimés."""
        assert normalize_tokens("ls", ["", "-l", ""]) == ["-l"]

    def test_arguments_courts_inchanges(self):
        """Les jetons de une ou deux lettres ne sont pas découpés."""
        assert normalize_tokens("ls", [">", "1>", "2>", ">>"]) == [
            ">", "1>", "2>", ">>",
        ]

    def test_stdout_colle(self):
        """">fichier" devient deux jetons."""
        assert normalize_tokens("ls", [">/tmp/out"]) == [">", "/tmp/out"]

    def test_stdout_explicite_colle(self):
        """"1>fichier" devient deux jetons."""
        assert normalize_tokens("ls", ["1>out"]) == ["1>", "out"]

    def test_stderr_colle(self):
        """"2>fichier" devient deux jetons."""
        assert normalize_tokens("ls", ["2>/err"]) == ["2>", "/err"]

    def test_ajout_colle(self):
        """">>fichier" produit un jeton d'ajout."""
        assert normalize_tokens("ls", [">>/log"]) == [">>", "/log"]

    def test_prefixe_inconnu_rejete(self):
        """Une redirection collée à un argument est rejetée."""
        with pytest.raises(CommandParseError, match="ajoutez un espace"):
            normalize_tokens("ls", ["ls>/tmp/out"])

    def test_prefixe_un_caractere_rejete(self):
        """"x>fichier" n'est pas une redirection valide."""
        with pytest.raises(CommandParseError, match="ajoutez un espace"):
            normalize_tokens("ls", ["x>file"])

    def test_trois_parties_rejetees(self):
        """"a>b>c" est une syntaxe illisible."""
        with pytest.raises(CommandParseError, match="illisible"):
            normalize_tokens("ls", ["a>b>c"])

    def test_ajout_explicite_rejete(self):
        """"1>>x" est une syntaxe illisible."""
        with pytest.raises(CommandParseError, match="illisible"):
            normalize_tokens("ls", ["1>>x"])

    def test_plus_de_deux_chevrons_rejete(self):
        """Plus de deux ">" dans un argument est rejeté."""
        with pytest.raises(CommandParseError, match="illisible"):
            normalize_tokens("ls", [">>>x"])

    def test_pipe_rejete(self):
        """Un pipe dans un argument est rejeté."""
        with pytest.raises(CommandParseError, match="pipes"):
            normalize_tokens("ls", ["|"])


# --- Tests parse_command ---


class TestParseCommand:
    """Tests de parse_command."""

    @pytest.mark.parametrize("args", [
        [],
        ["-la"],
        ["-la", "/tmp", "--color=never"],
        ["a", "b", "c", "d", "e"],
        ["--life", "2", "-q"],
    ])
    def test_arguments_sans_redirection(self, args):
        """Sans redirection, les arguments sont conservés dans l'ordre."""
        assert parse_command("foo", args) == Command("foo", tuple(args))

    def test_stdout_colle_et_separe_equivalents(self):
        """Les formes collée et séparée donnent la même commande."""
        expected = Command("foo", (), "/bar", "")
        assert parse_command("foo", [">/bar"]) == expected
        assert parse_command("foo", [">", "/bar"]) == expected

    def test_stdout_explicite(self):
        """"1>" est équivalent à ">"."""
        assert parse_command("foo", ["1>bar"]).stdout_target == "bar"
        assert parse_command("foo", ["1>", "bar"]).stdout_target == "bar"

    def test_stderr(self):
        """"2>" affecte la cible stderr."""
        glued = parse_command("foo", ["2>/bar"])
        spaced = parse_command("foo", ["2>", "/bar"])
        assert glued == spaced
        assert glued.stderr_target == "/bar"
        assert glued.stdout_target == ""

    def test_redirections_entrelacees(self):
        """Les redirections sont extraites quelle que soit leur place."""
        assert parse_command("foo", [">/out", "2>/err", "spam"]) == Command(
            "foo", ("spam",), "/out", "/err"
        )

    def test_redirections_melangees_aux_options(self):
        """Options courtes et valeurs numériques restent des arguments."""
        cmd = parse_command(
            "foo", [">/out", "--life", "2", "-q", "2>", "/err", "spam"]
        )
        assert cmd == Command(
            "foo", ("--life", "2", "-q", "spam"), "/out", "/err"
        )

    def test_meme_fichier_pour_les_deux_flux(self):
        """stdout et stderr peuvent viser le même fichier."""
        cmd = parse_command("foo", [">", "/log", "2>", "/log"])
        assert cmd.stdout_target == cmd.stderr_target == "/log"

    def test_arguments_vides_ignores(self):
        """Les arguments vides n'apparaissent pas dans le résultat."""
        assert parse_command("foo", ["", "a", ""]).args == ("a",)

    @pytest.mark.parametrize("args", [
        [">/a", ">/b"],
        [">", "/a", "1>", "/b"],
        ["1>/a", ">/b"],
    ])
    def test_stdout_en_double_rejete(self, args):
        """Une double redirection de stdout est toujours rejetée."""
        with pytest.raises(CommandParseError, match="stdout en double"):
            parse_command("foo", args)

    def test_stderr_en_double_rejete(self):
        """Une double redirection de stderr est toujours rejetée."""
        with pytest.raises(CommandParseError, match="stderr en double"):
            parse_command("foo", ["2>/a", "2>", "/b"])

    @pytest.mark.parametrize("args", [
        ["|"],
        ["a|b"],
        ["-l", "|", "grep", "x"],
        [">", "out|err"],
    ])
    def test_pipe_rejete(self, args):
        """Tout jeton contenant un pipe est rejeté."""
        with pytest.raises(CommandParseError, match="pipes"):
            parse_command("foo", args)

    def test_pipe_dans_le_nom_rejete(self):
        """Un pipe dans le nom est rejeté."""
        with pytest.raises(CommandParseError, match="pipes"):
            parse_command("foo|bar", [])

    def test_redirection_collee_au_nom_rejetee(self):
        """"foo>bar" est rejeté (limitation documentée)."""
        with pytest.raises(CommandParseError, match="ajoutez un espace"):
            parse_command("foo>bar", [])

    def test_nom_vide_rejete(self):
        """Un nom vide est rejeté."""
        with pytest.raises(CommandParseError, match="manquant"):
            parse_command("", ["-l"])

    @pytest.mark.parametrize("args", [[">>/log"], [">>", "/log"]])
    def test_ajout_rejete(self, args):
        """La redirection en ajout n'est pas supportée."""
        with pytest.raises(CommandParseError, match="ajout"):
            parse_command("foo", args)

    @pytest.mark.parametrize("args", [[">"], ["-l", "2>"], ["1>"]])
    def test_redirection_sans_cible_rejetee(self, args):
        """Une redirection en fin de liste est rejetée."""
        with pytest.raises(CommandParseError, match="cible manquante"):
            parse_command("foo", args)

    def test_redirection_comme_cible_rejetee(self):
        """Un jeton de redirection ne peut pas servir de cible."""
        with pytest.raises(CommandParseError, match="cible manquante"):
            parse_command("foo", [">", "2>", "/err"])

    def test_erreur_porte_nom_et_arguments(self):
        """L'erreur rappelle la commande fautive."""
        with pytest.raises(CommandParseError) as exc_info:
            parse_command("foo", ["a|b"])
        assert exc_info.value.name == "foo"
        assert exc_info.value.raw_args == ("a|b",)
        assert "foo" in str(exc_info.value)
        assert "a|b" in str(exc_info.value)

    def test_to_tokens_reproduit_la_commande(self):
        """La forme jetons d'une commande se ré-analyse à l'identique."""
        cmd = Command("foo", ("-l", "x"), "/out", "/err")
        tokens = cmd.to_tokens()
        assert parse_command(tokens[0], tokens[1:]) == cmd


# --- Tests parse_command_line ---


class TestParseCommandLine:
    """Tests de parse_command_line."""

    def test_ligne_simple(self):
        """Une ligne est découpée selon les règles du shell."""
        assert parse_command_line("ls -la /tmp") == Command(
            "ls", ("-la", "/tmp")
        )

    def test_ligne_avec_redirections(self):
        """Les redirections de la ligne sont extraites."""
        cmd = parse_command_line("ls -la > /tmp/out 2>/tmp/err")
        assert cmd == Command("ls", ("-la",), "/tmp/out", "/tmp/err")

    def test_quotes_preservees(self):
        """Un argument quoté contenant des espaces reste entier."""
        cmd = parse_command_line("echo 'bonjour le monde'")
        assert cmd.args == ("bonjour le monde",)

    def test_pas_d_expansion(self):
        """Variables et motifs ne sont pas développés."""
        cmd = parse_command_line("echo $HOME *.txt")
        assert cmd.args == ("$HOME", "*.txt")

    def test_ligne_vide_rejetee(self):
        """Une ligne vide est rejetée."""
        with pytest.raises(CommandParseError, match="vide"):
            parse_command_line("   ")

    def test_quotes_non_fermees_rejetees(self):
        """Des quotes non fermées sont rejetées."""
        with pytest.raises(CommandParseError, match="invalide"):
            parse_command_line("echo 'oups")

    def test_pipe_rejete(self):
        """Un pipe dans la ligne est rejeté."""
        with pytest.raises(CommandParseError, match="pipes"):
            parse_command_line("ls | grep x")
