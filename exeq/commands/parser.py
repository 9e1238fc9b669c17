"""Analyse de la syntaxe de redirection de type shell.

Transforme un nom d'exécutable et ses arguments bruts en Command.
L'analyse se fait en deux passes :

    1. Normalisation : les formes collées (">fichier", "1>fichier",
       "2>fichier", ">>fichier") sont séparées en deux jetons.
    2. Consommation : un automate à états finis parcourt les jetons,
       affecte les cibles de redirection et collecte les arguments.

Seules les redirections ">", "1>" et "2>" sont supportées. Les pipes,
la redirection en ajout (">>"), l'expansion de motifs et de variables
ne le sont pas et sont rejetés explicitement.

Limitation connue : une redirection collée au nom de la commande
("ls>/tmp/out") ou à un argument ("a>/tmp/out") est rejetée au lieu
d'être découpée ; l'appelant doit insérer un espace.

Example:
    Redirections collées et séparées mélangées aux arguments :

        from exeq.commands import parse_command

        cmd = parse_command("ls", ["-la", ">/tmp/out", "2>", "/tmp/err"])
        # Résultat : Command(name="ls", args=("-la",),
        #                    stdout_target="/tmp/out",
        #                    stderr_target="/tmp/err")
"""

import shlex
from enum import Enum
from typing import List, Sequence

from exeq.commands.base import Command
from exeq.errors.exceptions import CommandParseError

STDOUT = ">"
STDOUT_EXPLICIT = "1>"
STDERR = "2>"
APPEND = ">>"
PIPE = "|"

REDIRECT_TOKENS = frozenset({STDOUT, STDOUT_EXPLICIT, STDERR, APPEND})

_GLUED_ERROR = (
    "Syntaxe de redirection illisible, "
    "ajoutez un espace entre la commande et la redirection"
)
_SYNTAX_ERROR = "Syntaxe de redirection illisible"
_PIPE_ERROR = "Les pipes ne sont pas disponibles"
_APPEND_ERROR = "La redirection en ajout (>>) n'est pas supportée"


class _ScanState(Enum):
    """États de l'automate de consommation des jetons."""

    ARGUMENT = "argument"
    STDOUT_TARGET = "stdout_target"
    STDERR_TARGET = "stderr_target"


def normalize_tokens(name: str, raw_args: Sequence[str]) -> List[str]:
    """Sépare les redirections collées en jetons distincts.

    Args:
        name: Nom de la commande (pour les messages d'erreur).
        raw_args: Arguments bruts.

    Returns:
        Liste de jetons où chaque redirection est isolée.

    Raises:
        CommandParseError: Pipe, redirection collée à un argument ou
            plus de deux ">" dans un argument.
    """
    tokens: List[str] = []
    for arg in raw_args:
        if PIPE in arg:
            raise CommandParseError(_PIPE_ERROR, name, raw_args)
        if len(arg) == 0:
            continue
        if len(arg) <= 2:
            # Trop court pour contenir une redirection collée
            tokens.append(arg)
            continue

        parts = arg.split(">")
        if len(parts) == 1:
            tokens.append(arg)
        elif len(parts) == 2:
            prefix, target = parts
            if prefix == "":
                tokens += [STDOUT, target]
            elif prefix in ("1", "2"):
                tokens += [prefix + ">", target]
            else:
                raise CommandParseError(_GLUED_ERROR, name, raw_args)
        elif len(parts) == 3 and parts[0] == "" and parts[1] == "":
            tokens += [APPEND, parts[2]]
        else:
            raise CommandParseError(_SYNTAX_ERROR, name, raw_args)
    return tokens


def parse_command(name: str, raw_args: Sequence[str]) -> Command:
    """Analyse un nom de commande et ses arguments bruts.

    Args:
        name: Nom de l'exécutable.
        raw_args: Arguments bruts, redirections comprises.

    Returns:
        Command avec les arguments restants et les cibles de
        redirection.

    Raises:
        CommandParseError: Si la syntaxe est invalide ou non
            supportée. Aucune commande partielle n'est produite.
    """
    raw_args = list(raw_args)
    if not name:
        raise CommandParseError("Nom de commande manquant", name, raw_args)
    if STDOUT in name:
        raise CommandParseError(_GLUED_ERROR, name, raw_args)
    if PIPE in name:
        raise CommandParseError(_PIPE_ERROR, name, raw_args)

    tokens = normalize_tokens(name, raw_args)

    state = _ScanState.ARGUMENT
    args: List[str] = []
    stdout_target = ""
    stderr_target = ""

    for token in tokens:
        if state is _ScanState.ARGUMENT:
            if token in (STDOUT, STDOUT_EXPLICIT):
                if stdout_target:
                    raise CommandParseError(
                        "Redirection de stdout en double", name, tokens
                    )
                state = _ScanState.STDOUT_TARGET
            elif token == STDERR:
                if stderr_target:
                    raise CommandParseError(
                        "Redirection de stderr en double", name, tokens
                    )
                state = _ScanState.STDERR_TARGET
            elif token == APPEND:
                raise CommandParseError(_APPEND_ERROR, name, raw_args)
            elif token:
                args.append(token)
            continue

        # Une cible est attendue : un jeton de redirection n'en est pas une
        if token in REDIRECT_TOKENS:
            raise CommandParseError(
                f"{_SYNTAX_ERROR} : cible manquante", name, tokens
            )
        if state is _ScanState.STDOUT_TARGET:
            stdout_target = token
        else:
            stderr_target = token
        state = _ScanState.ARGUMENT

    if state is not _ScanState.ARGUMENT:
        raise CommandParseError(
            f"{_SYNTAX_ERROR} : cible manquante", name, tokens
        )

    return Command(
        name=name,
        args=tuple(args),
        stdout_target=stdout_target,
        stderr_target=stderr_target,
    )


def parse_command_line(line: str) -> Command:
    """Analyse une ligne de commande unique de type shell.

    La ligne est découpée selon les règles de quotation du shell
    (shlex), sans expansion de variables ni de motifs.

    Args:
        line: Ligne de commande (ex: "ls -la /tmp > /tmp/out").

    Returns:
        Command analysée.

    Raises:
        CommandParseError: Si la ligne est vide, mal quotée ou si la
            syntaxe de redirection est invalide.
    """
    try:
        parts = shlex.split(line)
    except ValueError as e:
        raise CommandParseError(
            f"Ligne de commande invalide ({e})", line
        ) from e
    if not parts:
        raise CommandParseError("Ligne de commande vide", line)
    return parse_command(parts[0], parts[1:])
