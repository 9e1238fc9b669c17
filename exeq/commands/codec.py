"""Encodage des commandes pour la file de tâches.

Une commande transite sous la forme d'un enregistrement JSON :

    {"name": "ls", "args": ["-la"], "stdoutFile": "", "stderrFile": ""}

Une cible vide signifie « pas de redirection ». Tous les champs sont
obligatoires ; un enregistrement incomplet ou mal typé est rejeté avant
toute autorisation.

Le nom de tâche ("exec:command:<nom>") et le nom de file
("exeq+<hôte>") sont les clés de routage utilisées par le transport.
"""

import json
from typing import Any, Dict, List, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from exeq.commands.base import Command
from exeq.errors.exceptions import CommandDecodeError

TASK_TYPE_PREFIX = "exec:command"
DEFAULT_QUEUE = "exeq"


class CommandPayload(BaseModel):
    """Schéma strict de l'enregistrement de transport."""

    model_config = ConfigDict(strict=True)

    name: str = Field(min_length=1)
    args: List[str]
    stdout_file: str = Field(alias="stdoutFile")
    stderr_file: str = Field(alias="stderrFile")


def task_type(name: str) -> str:
    """Retourne le type de tâche routé vers les serveurs autorisant name.

    Args:
        name: Nom de l'exécutable.

    Returns:
        Type de tâche (ex: "exec:command:ls").
    """
    return f"{TASK_TYPE_PREFIX}:{name}"


def queue_for_host(host: str) -> str:
    """Retourne le nom de file dédiée à un serveur (diffusion)."""
    return f"{DEFAULT_QUEUE}+{host}"


def encode_command(command: Command) -> Dict[str, Any]:
    """Sérialise une commande en enregistrement de transport.

    Args:
        command: Commande à encoder.

    Returns:
        Dictionnaire prêt pour la sérialisation JSON.
    """
    return CommandPayload(
        name=command.name,
        args=list(command.args),
        stdoutFile=command.stdout_target,
        stderrFile=command.stderr_target,
    ).model_dump(by_alias=True)


def dumps_command(command: Command) -> bytes:
    """Sérialise une commande en JSON UTF-8."""
    return json.dumps(
        encode_command(command), ensure_ascii=False
    ).encode("utf-8")


def decode_command(
    payload: Union[Mapping[str, Any], str, bytes]
) -> Command:
    """Reconstruit une commande depuis un enregistrement de transport.

    Args:
        payload: Dictionnaire ou document JSON (str ou bytes).

    Returns:
        Command identique à celle encodée.

    Raises:
        CommandDecodeError: JSON invalide, champ manquant ou mal typé.
    """
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except (ValueError, UnicodeDecodeError) as e:
            raise CommandDecodeError(
                f"Enregistrement JSON invalide : {e}"
            ) from e
    if not isinstance(payload, Mapping):
        raise CommandDecodeError(
            f"Enregistrement attendu sous forme d'objet, "
            f"reçu : {type(payload).__name__}"
        )

    try:
        record = CommandPayload.model_validate(dict(payload))
    except ValidationError as e:
        raise CommandDecodeError(
            f"Enregistrement de commande invalide : {e}"
        ) from e

    return Command(
        name=record.name,
        args=tuple(record.args),
        stdout_target=record.stdout_file,
        stderr_target=record.stderr_file,
    )
