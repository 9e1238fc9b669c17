"""Moteur d'exécution des commandes via subprocess.

Ce module fournit LinuxCommandExecutor, une implémentation concrète
de CommandExecutor qui lance une Command dans son propre groupe de
processus, recopie stdout et stderr bloc par bloc vers leurs
destinations (fichiers de redirection, console) et tue le groupe
entier en cas d'annulation.

Déroulement d'une exécution :
    1. Autorisation : le prédicat fourni par l'appelant est consulté
       avant tout effet de bord.
    2. Destinations : les fichiers de redirection sont ouverts si
       allow_file_redirect est vrai, sinon ignorés.
    3. Lancement : deux threads lecteurs découpent stdout et stderr.
    4. Recopie : une boucle unique écrit chaque bloc dans les
       destinations du flux et vide les tampons à chaque bloc. La
       file d'événements est bornée : un consommateur lent freine
       les lecteurs, et après un échec d'écriture les blocs restants
       sont consommés puis ignorés.
    5. Fin : attente du processus, classification du code retour,
       fermeture des fichiers sur tous les chemins.

Stratégie d'arrêt dépendante de la plateforme : sous POSIX, le groupe
de processus est tué par SIGKILL (os.killpg) ; ailleurs, seul le
processus suivi est tué (Popen.kill).

Example :
    Exécution avec recopie console et redirection autorisée :

        from exeq.authorization import WhitelistAuthorizer
        from exeq.commands import (
            CancellationContext,
            ExecutionOptions,
            LinuxCommandExecutor,
            parse_command,
        )

        executor = LinuxCommandExecutor(logger=logger)
        command = parse_command("ls", ["-la", ">/tmp/ls.out"])
        result = executor.run(
            command,
            WhitelistAuthorizer(["ls"]),
            cancel=CancellationContext(timeout=60),
            options=ExecutionOptions(
                echo_to_console=True, allow_file_redirect=True
            ),
        )
        print(result.return_code)
"""

import os
import queue
import signal
import subprocess  # nosec B404
import sys
import time
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Set, TextIO, Union

from exeq.commands.base import (
    AuthorizationCheck,
    Command,
    CommandExecutor,
    ExecutionOptions,
    ExecutionResult,
)
from exeq.commands.cancellation import CancellationContext
from exeq.commands.codec import decode_command
from exeq.commands.formatter import (
    CommandFormatter,
    PlainCommandFormatter,
)
from exeq.commands.reader import StreamEvent, StreamReader
from exeq.commands.sinks import ConsoleSink, FileSink, MultiSink
from exeq.errors.exceptions import (
    ExecutionError,
    RedirectSetupError,
    StreamWriteError,
)
from exeq.logging.base import Logger

STDOUT = "stdout"
STDERR = "stderr"
_CANCEL = "cancel"

# Blocs en attente au plus : au-delà, les lecteurs attendent la boucle
EVENT_QUEUE_SIZE = 256

_POSIX = os.name == "posix"


class _RedirectFiles:
    """Fichiers de redirection possédés par une seule exécution."""

    def __init__(self) -> None:
        self.stdout: Optional[FileSink] = None
        self.stderr: Optional[FileSink] = None

    def close(self) -> List[str]:
        """Ferme tous les fichiers ouverts.

        Returns:
            Messages des erreurs de fermeture rencontrées.
        """
        errors: List[str] = []
        seen = set()
        for sink in (self.stdout, self.stderr):
            if sink is None or id(sink) in seen:
                continue
            seen.add(id(sink))
            try:
                sink.close()
            except OSError as e:
                errors.append(f"{sink.path} : {e}")
        return errors


class LinuxCommandExecutor(CommandExecutor):
    """Exécuteur de commandes avec recopie de sortie et annulation.

    Chaque appel à run() est indépendant : aucun état n'est partagé
    entre exécutions concurrentes sur la même instance.

    Attributes:
        _logger: Logger optionnel.
        _is_root: True si le processus courant est root (uid 0).
        _plain: Formateur texte brut pour les logs.
        _console_formatter: Formateur optionnel pour la console.
        _stdout_stream: Flux console pour stdout (défaut sys.stdout).
        _stderr_stream: Flux console pour stderr (défaut sys.stderr).
        _poll_interval: Intervalle de vérification de l'annulation
            pendant l'attente du processus, en secondes.
        _join_timeout: Attente maximale des lecteurs après la fin
            du processus, en secondes.
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        console_formatter: Optional[CommandFormatter] = None,
        stdout_stream: Optional[TextIO] = None,
        stderr_stream: Optional[TextIO] = None,
        poll_interval: float = 0.05,
        join_timeout: float = 2.0,
    ) -> None:
        """Initialise l'exécuteur.

        Args:
            logger: Logger optionnel pour le cycle de vie.
            console_formatter: Formateur optionnel affichant le
                lancement et la fin des commandes sur stderr
                (ex: AnsiCommandFormatter()).
            stdout_stream: Flux de recopie de stdout. Si None,
                sys.stdout est résolu à chaque exécution.
            stderr_stream: Flux de recopie de stderr. Si None,
                sys.stderr est résolu à chaque exécution.
            poll_interval: Intervalle de vérification de l'annulation.
            join_timeout: Attente maximale des threads lecteurs.
        """
        self._logger = logger
        self._console_formatter = console_formatter
        self._stdout_stream = stdout_stream
        self._stderr_stream = stderr_stream
        self._poll_interval = poll_interval
        self._join_timeout = join_timeout
        self._is_root: bool = hasattr(os, "getuid") and os.getuid() == 0
        self._plain = PlainCommandFormatter()

    # --- Logging ---

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger.log_info(message)

    def _log_debug(self, message: str) -> None:
        if self._logger:
            self._logger.log_debug(message)

    def _log_warning(self, message: str) -> None:
        if self._logger:
            self._logger.log_warning(message)

    def _log_error(self, message: str) -> None:
        if self._logger:
            self._logger.log_error(message)

    def _console(self, message: str) -> None:
        """Affiche un message de cycle de vie sur stderr.

        N'affiche rien si aucun console_formatter n'est configuré.
        """
        if self._console_formatter:
            print(message, file=sys.stderr)

    # --- Destinations ---

    def _open_sink(self, path: str) -> FileSink:
        try:
            return FileSink(path)
        except OSError as e:
            self._log_error(
                f"Échec d'ouverture du fichier de redirection {path} : {e}"
            )
            raise RedirectSetupError(path, e.strerror or str(e)) from e

    def _open_redirects(
        self,
        command: Command,
        allow_file_redirect: bool,
    ) -> _RedirectFiles:
        """Ouvre les fichiers de redirection demandés par la commande.

        Args:
            command: Commande à exécuter.
            allow_file_redirect: Si False, les cibles sont ignorées
                et aucun fichier n'est créé.

        Returns:
            Fichiers ouverts (éventuellement aucun).

        Raises:
            RedirectSetupError: Si un fichier ne peut être ouvert.
                Les fichiers déjà ouverts sont refermés.
        """
        files = _RedirectFiles()
        if not (command.stdout_target or command.stderr_target):
            return files
        if not allow_file_redirect:
            self._log_warning(
                f"Redirections ignorées (non autorisées) : "
                f"stdout='{command.stdout_target}' "
                f"stderr='{command.stderr_target}'"
            )
            return files

        try:
            if command.stdout_target:
                files.stdout = self._open_sink(command.stdout_target)
            if command.stderr_target:
                if command.stderr_target == command.stdout_target:
                    files.stderr = files.stdout
                else:
                    files.stderr = self._open_sink(command.stderr_target)
        except RedirectSetupError:
            for message in files.close():
                self._log_error(f"Échec de fermeture : {message}")
            raise
        return files

    def _build_sinks(
        self,
        files: _RedirectFiles,
        echo_to_console: bool,
    ) -> Dict[str, MultiSink]:
        """Construit la liste ordonnée des destinations par flux.

        Le fichier (s'il existe) précède la console (si echo).
        """
        out = MultiSink()
        err = MultiSink()
        if files.stdout is not None:
            out.add(files.stdout)
        if files.stderr is not None:
            err.add(files.stderr)
        if echo_to_console:
            out.add(ConsoleSink(self._stdout_stream or sys.stdout))
            err.add(ConsoleSink(self._stderr_stream or sys.stderr))
        return {STDOUT: out, STDERR: err}

    # --- Processus ---

    def _spawn(self, command: Command) -> subprocess.Popen:
        try:
            return subprocess.Popen(  # nosec B603
                command.argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except OSError as e:
            self._log_error(f"Erreur système au lancement : {e}")
            raise ExecutionError(
                f"Impossible de lancer {command.name} : {e}", command
            ) from e

    def _kill_group(self, proc: subprocess.Popen) -> None:
        """Tue le groupe de processus entier (SIGKILL).

        Le processus a été lancé dans une nouvelle session : son pid
        est aussi l'identifiant de son groupe.
        """
        try:
            if _POSIX:
                os.killpg(proc.pid, signal.SIGKILL)
            else:
                proc.kill()
        except ProcessLookupError:
            self._log_debug(f"Processus {proc.pid} déjà terminé")
        except OSError as e:
            self._log_warning(
                f"Erreur lors de l'arrêt du processus {proc.pid} : {e}"
            )

    def _fan_out(
        self,
        events: "queue.Queue[StreamEvent]",
        sinks: Optional[Dict[str, MultiSink]],
        open_streams: Set[str],
        cancel: CancellationContext,
    ) -> bool:
        """Consomme les blocs reçus jusqu'à la fin des lecteurs.

        Chaque bloc est écrit puis vidé dans les destinations de son
        flux. Sans destinations (sinks=None), les blocs sont consommés
        et ignorés : les lecteurs ne restent jamais bloqués sur la
        file pleine.

        Args:
            events: File bornée alimentée par les lecteurs.
            sinks: Destinations par flux, None pour ignorer les blocs.
            open_streams: Flux non terminés, mis à jour sur place.
            cancel: Contexte d'annulation surveillé entre deux blocs.

        Returns:
            True si l'annulation a interrompu la boucle.

        Raises:
            OSError: Si une écriture ou un vidage échoue.
        """
        while open_streams:
            if cancel.cancelled:
                return True
            try:
                stream, chunk = events.get(timeout=self._poll_interval)
            except queue.Empty:
                continue
            if stream == _CANCEL:
                return True
            if chunk is None:
                open_streams.discard(stream)
                continue
            if sinks is None:
                continue
            sink = sinks[stream]
            sink.write(chunk)
            sink.flush()
        return False

    def _discard_remaining(
        self,
        events: "queue.Queue[StreamEvent]",
        open_streams: Set[str],
    ) -> None:
        """Vide la file après l'arrêt du processus.

        Débloque les lecteurs en attente sur la file pleine, dans la
        limite de join_timeout.
        """
        deadline = time.monotonic() + self._join_timeout
        while open_streams:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            try:
                stream, chunk = events.get(timeout=remaining)
            except queue.Empty:
                return
            if chunk is None:
                open_streams.discard(stream)

    def _wait(
        self,
        proc: subprocess.Popen,
        cancel: CancellationContext,
    ) -> bool:
        """Attend la fin du processus en surveillant l'annulation.

        Returns:
            True si l'annulation a provoqué l'arrêt du processus.
        """
        while True:
            try:
                proc.wait(timeout=self._poll_interval)
                return False
            except subprocess.TimeoutExpired:
                if cancel.cancelled:
                    self._kill_group(proc)
                    proc.wait()
                    return True

    def _join_readers(self, readers: List[StreamReader]) -> None:
        for reader in readers:
            reader.join(timeout=self._join_timeout)
            if reader.is_alive():
                self._log_warning(
                    f"Lecteur {reader.stream_name} toujours actif "
                    f"après {self._join_timeout}s"
                )
            elif reader.error is not None:
                self._log_debug(
                    f"Lecteur {reader.stream_name} interrompu : "
                    f"{reader.error}"
                )

    def _execute(
        self,
        command: Command,
        sinks: Dict[str, MultiSink],
        cancel: CancellationContext,
    ) -> ExecutionResult:
        """Lance le processus, recopie sa sortie et attend sa fin."""
        self._log(self._plain.format_start(command, self._is_root))
        if self._console_formatter:
            self._console(
                self._console_formatter.format_start(command, self._is_root)
            )

        start = time.monotonic()
        if cancel.cancelled:
            self._log_warning(
                self._plain.format_cancel(
                    command, cancel.reason, self._is_root
                )
            )
            return ExecutionResult(
                command=command,
                return_code=None,
                success=False,
                cancelled=True,
                duration=0.0,
                executed_as_root=self._is_root,
            )

        proc = self._spawn(command)
        events: "queue.Queue[StreamEvent]" = queue.Queue(
            maxsize=EVENT_QUEUE_SIZE
        )
        readers = [
            StreamReader(STDOUT, proc.stdout, events),
            StreamReader(STDERR, proc.stderr, events),
        ]
        for reader in readers:
            reader.start()

        def on_cancel() -> None:
            # File pleine : la boucle consulte cancel au bloc suivant
            try:
                events.put_nowait((_CANCEL, None))
            except queue.Full:
                pass

        open_streams = {STDOUT, STDERR}
        write_error: Optional[OSError] = None
        cancel.add_callback(on_cancel)
        try:
            try:
                cancelled = self._fan_out(
                    events, sinks, open_streams, cancel
                )
            except OSError as e:
                write_error = e
                self._log_error(
                    f"Échec d'écriture de la sortie de {command.name} : {e}"
                )
                cancelled = self._fan_out(
                    events, None, open_streams, cancel
                )
            if cancelled:
                self._kill_group(proc)
                proc.wait()
            else:
                cancelled = self._wait(proc, cancel)
        finally:
            cancel.remove_callback(on_cancel)
            if proc.poll() is None:
                self._kill_group(proc)
                proc.wait()
        self._discard_remaining(events, open_streams)
        self._join_readers(readers)

        duration = time.monotonic() - start
        return_code = proc.returncode

        if cancelled:
            self._log_warning(
                self._plain.format_cancel(
                    command, cancel.reason, self._is_root
                )
            )
            if self._console_formatter:
                self._console(
                    self._console_formatter.format_cancel(
                        command, cancel.reason, self._is_root
                    )
                )
            return ExecutionResult(
                command=command,
                return_code=return_code,
                success=False,
                cancelled=True,
                duration=duration,
                executed_as_root=self._is_root,
            )

        if write_error is not None:
            raise StreamWriteError(
                f"Échec d'écriture de la sortie de {command.name} : "
                f"{write_error}",
                command,
            ) from write_error

        if return_code < 0:
            message = (
                f"{command.name} terminé par le signal "
                f"{_signal_name(-return_code)}"
            )
            self._log_error(message)
            raise ExecutionError(message, command)

        exit_message = self._plain.format_exit(
            command, return_code, self._is_root
        )
        if return_code != 0:
            self._log_warning(exit_message)
        else:
            self._log(exit_message)
        if self._console_formatter:
            self._console(
                self._console_formatter.format_exit(
                    command, return_code, self._is_root
                )
            )
        self._log_debug(f"Terminé : {command.name} ({duration:.3f}s)")

        return ExecutionResult(
            command=command,
            return_code=return_code,
            success=return_code == 0,
            cancelled=False,
            duration=duration,
            executed_as_root=self._is_root,
        )

    def run(
        self,
        command: Command,
        is_authorized: AuthorizationCheck,
        cancel: Optional[CancellationContext] = None,
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionResult:
        """Exécute une commande autorisée et recopie sa sortie.

        Args:
            command: Commande analysée.
            is_authorized: Prédicat d'autorisation ; l'erreur qu'il
                lève est propagée telle quelle, sans lancer de
                processus.
            cancel: Contexte d'annulation. À l'annulation, le groupe
                de processus est tué et un résultat annulé est
                retourné.
            options: Options de routage (défaut: ni console ni
                fichiers).

        Returns:
            ExecutionResult. Un code retour non nul n'est pas une
            erreur.

        Raises:
            AuthorizationError: Si l'exécutable est refusé.
            RedirectSetupError: Si un fichier de redirection ne peut
                être ouvert (avant lancement).
            ExecutionError: Échec de lancement, mort par signal non
                provoquée par l'annulation.
            StreamWriteError: Échec d'écriture vers une destination.
        """
        options = options or ExecutionOptions()
        cancel = cancel or CancellationContext()

        is_authorized(command.name)

        files = self._open_redirects(command, options.allow_file_redirect)
        sinks = self._build_sinks(files, options.echo_to_console)
        result: Optional[ExecutionResult] = None
        try:
            result = self._execute(command, sinks, cancel)
        finally:
            close_errors = files.close()
            for message in close_errors:
                self._log_error(f"Échec de fermeture : {message}")

        if close_errors:
            result = replace(result, close_errors=tuple(close_errors))
        return result

    def run_payload(
        self,
        payload: Union[Mapping[str, Any], str, bytes],
        is_authorized: AuthorizationCheck,
        cancel: Optional[CancellationContext] = None,
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionResult:
        """Décode un enregistrement de transport puis l'exécute.

        Raises:
            CommandDecodeError: Si l'enregistrement est invalide
                (avant toute autorisation).
        """
        command = decode_command(payload)
        return self.run(command, is_authorized, cancel, options)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)
