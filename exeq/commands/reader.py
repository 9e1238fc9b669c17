"""Lecture des flux d'un sous-processus en blocs orientés ligne.

Un bloc se termine au premier "\\n" ; à défaut au premier "\\r"
(barres de progression) ; à défaut, en fin de flux, les octets
restants forment un dernier bloc sans terminateur.
"""

import queue
import threading
from typing import BinaryIO, Optional, Tuple

READ_SIZE = 4096

# Événement publié par un lecteur : (nom du flux, bloc ou None en fin)
StreamEvent = Tuple[str, Optional[bytes]]


def scan_chunk(data: bytes, at_eof: bool) -> Tuple[int, Optional[bytes]]:
    """Cherche le prochain bloc complet dans les données tamponnées.

    Args:
        data: Octets disponibles.
        at_eof: True si le flux est terminé.

    Returns:
        Tuple (octets consommés, bloc). Le bloc vaut None s'il faut
        attendre davantage de données.
    """
    if at_eof and not data:
        return 0, None
    index = data.find(b"\n")
    if index >= 0:
        return index + 1, data[:index + 1]
    index = data.find(b"\r")
    if index >= 0:
        return index + 1, data[:index + 1]
    if at_eof:
        return len(data), data
    return 0, None


class StreamReader(threading.Thread):
    """Thread qui découpe un flux en blocs et les publie dans une file.

    Chaque bloc est publié sous la forme (stream_name, bloc). En fin de
    flux, (stream_name, None) est publié pour signaler que le lecteur a
    terminé. Si la file est bornée, la publication attend qu'une place
    se libère.

    Attributes:
        stream_name: Nom du flux ("stdout" ou "stderr"). Le nom du
            thread est "exeq-<flux>-reader".
        error: Erreur de lecture ou de fermeture, None si aucune.
    """

    def __init__(
        self,
        name: str,
        stream: BinaryIO,
        events: "queue.Queue[StreamEvent]",
    ) -> None:
        super().__init__(name=f"exeq-{name}-reader", daemon=True)
        self.stream_name = name
        self._stream = stream
        self._events = events
        self.error: Optional[OSError] = None

    def _read(self) -> bytes:
        read1 = getattr(self._stream, "read1", None)
        if read1 is not None:
            return read1(READ_SIZE)
        return self._stream.read(READ_SIZE)

    def run(self) -> None:
        pending = b""
        try:
            while True:
                data = self._read()
                at_eof = not data
                pending += data
                while pending:
                    advance, chunk = scan_chunk(pending, at_eof)
                    if chunk is None:
                        break
                    self._events.put((self.stream_name, chunk))
                    pending = pending[advance:]
                if at_eof:
                    break
        except (OSError, ValueError) as e:
            # Flux fermé sous nos pieds (processus tué) : fin de lecture
            self.error = e if isinstance(e, OSError) else OSError(str(e))
        finally:
            try:
                self._stream.close()
            except OSError as e:
                if self.error is None:
                    self.error = e
            self._events.put((self.stream_name, None))
