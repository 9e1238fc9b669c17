"""Destinations d'écriture pour la sortie des sous-processus.

Chaque flux (stdout, stderr) d'un sous-processus est recopié vers une
liste ordonnée de destinations. Une destination expose seulement
write() et flush() ; les implémentations sont indépendantes et se
combinent via MultiSink.

Classes :
    OutputSink : Interface abstraite d'une destination.
    FileSink : Fichier de redirection (création/troncature).
    ConsoleSink : Sortie standard ou d'erreur du processus courant.
    MemorySink : Tampon mémoire (tests, capture).
    MultiSink : Composite ordonné avec détection d'écriture partielle.
"""

import io
from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional, TextIO, Union

from exeq.errors.exceptions import ShortWriteError


class OutputSink(ABC):
    """Interface d'une destination d'écriture."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Écrit un bloc d'octets.

        Args:
            data: Octets à écrire.

        Returns:
            Nombre d'octets acceptés.

        Raises:
            OSError: En cas d'échec d'écriture.
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """Vide les tampons vers la destination finale."""
        pass


class FileSink(OutputSink):
    """Destination fichier ouverte en création/troncature.

    Attributes:
        path: Chemin du fichier.
    """

    def __init__(self, path: str) -> None:
        """Ouvre (crée ou tronque) le fichier en mode binaire.

        Args:
            path: Chemin du fichier de redirection.

        Raises:
            OSError: Si le fichier ne peut pas être ouvert.
        """
        self.path = path
        self._handle: BinaryIO = open(path, "wb")

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def write(self, data: bytes) -> int:
        return self._handle.write(data)

    def flush(self) -> None:
        self._handle.flush()

    def close(self) -> None:
        """Ferme le fichier.

        Raises:
            OSError: Si la fermeture échoue (tampon non écrit).
        """
        self._handle.close()


class ConsoleSink(OutputSink):
    """Destination console (sys.stdout ou sys.stderr).

    Les octets sont écrits sur le tampon binaire du flux lorsqu'il
    existe, sinon décodés en UTF-8 et écrits en texte.
    """

    def __init__(self, stream: Union[TextIO, BinaryIO]) -> None:
        """Initialise la destination console.

        Args:
            stream: Flux console cible.
        """
        self._stream = stream

    def write(self, data: bytes) -> int:
        buffer = getattr(self._stream, "buffer", None)
        if buffer is not None:
            # Vide d'abord la couche texte pour conserver l'ordre
            self._stream.flush()
            return buffer.write(data)
        self._stream.write(data.decode("utf-8", errors="replace"))
        return len(data)

    def flush(self) -> None:
        buffer = getattr(self._stream, "buffer", None)
        if buffer is not None:
            buffer.flush()
        self._stream.flush()


class MemorySink(OutputSink):
    """Destination mémoire, utile pour les tests et la capture."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self.chunks: List[bytes] = []
        self.flush_count = 0

    def write(self, data: bytes) -> int:
        self.chunks.append(bytes(data))
        return self._buffer.write(data)

    def flush(self) -> None:
        self.flush_count += 1

    def getvalue(self) -> bytes:
        """Retourne l'ensemble des octets reçus."""
        return self._buffer.getvalue()


class MultiSink(OutputSink):
    """Composite ordonné de destinations.

    Chaque bloc est écrit dans toutes les destinations dans l'ordre
    de la liste. L'écriture s'arrête à la première erreur ou à la
    première écriture partielle.
    """

    def __init__(self, sinks: Optional[List[OutputSink]] = None) -> None:
        self.sinks: List[OutputSink] = list(sinks or [])

    def __len__(self) -> int:
        return len(self.sinks)

    def add(self, sink: OutputSink) -> "MultiSink":
        """Ajoute une destination en fin de liste.

        Returns:
            L'instance courante pour le chaînage.
        """
        self.sinks.append(sink)
        return self

    def write(self, data: bytes) -> int:
        """Écrit le bloc dans toutes les destinations.

        Raises:
            ShortWriteError: Si une destination accepte moins
                d'octets que fournis.
            OSError: Si une destination échoue.
        """
        for sink in self.sinks:
            written = sink.write(data)
            if written != len(data):
                raise ShortWriteError(
                    f"Écriture partielle vers {type(sink).__name__} : "
                    f"{written}/{len(data)} octets"
                )
        return len(data)

    def flush(self) -> None:
        for sink in self.sinks:
            sink.flush()
