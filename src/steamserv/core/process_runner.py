"""External process execution abstraction.

This module provides abstraction over running SteamCMD (and tar during setup),
enabling dependency injection for testing without mock.patch.

stderr is merged into stdout, so each mode drains a single pipe to the end and
the child never blocks on a full buffer, whether or not its output is shown.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from rich.console import Console

from steamserv.core.errors import SubprocessNonZeroExitError, SubprocessSpawnError
from steamserv.core.output_filter import OutputEvent, OutputFilter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessOutput:
    """Exit status and combined stdout/stderr of a finished process."""

    returncode: int
    output: str


class ProcessRunner(ABC):
    """Abstract interface for running external tools."""

    @abstractmethod
    def stream_filtered(self, args: Sequence[str]) -> None:
        """Run a command, printing its filtered output as it arrives.

        Noisy lines are dropped, status and progress lines are tagged, and
        everything else is forwarded verbatim.

        Raises:
            SubprocessSpawnError: If the executable cannot be started
            SubprocessNonZeroExitError: If the command exits with a failure status
        """
        ...

    @abstractmethod
    def stream_as_progress(self, args: Sequence[str], label: str) -> None:
        """Run a command, ticking a spinner per output line instead of printing it.

        Used for long, low-information steps such as archive extraction.

        Raises:
            SubprocessSpawnError: If the executable cannot be started
            SubprocessNonZeroExitError: If the command exits with a failure status
        """
        ...

    @abstractmethod
    def capture(self, args: Sequence[str]) -> ProcessOutput:
        """Run a command to completion and return its exit status and output.

        A non-zero exit is returned, not raised; callers decide what it means.

        Raises:
            SubprocessSpawnError: If the executable cannot be started
        """
        ...


class RealProcessRunner(ProcessRunner):
    """Production implementation using subprocess.Popen and a rich Console."""

    def __init__(self, console: Console, output_filter: OutputFilter | None = None) -> None:
        self._console = console
        self._filter = output_filter if output_filter is not None else OutputFilter()

    def _spawn(self, args: Sequence[str]) -> subprocess.Popen[str]:
        logger.debug("Spawning %s with %d argument(s)", args[0], len(args) - 1)
        try:
            return subprocess.Popen(
                list(args),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,  # Line buffered
            )
        except OSError as e:
            raise SubprocessSpawnError(f"Cannot run {args[0]}: {e}") from e

    def _check_exit(self, args: Sequence[str], returncode: int) -> None:
        logger.debug("%s exited with %d", args[0], returncode)
        if returncode != 0:
            raise SubprocessNonZeroExitError(args, returncode)

    def _render(self, event: OutputEvent) -> None:
        if event.event_type == "status":
            self._console.print(f"  ... {event.content}", style="dim", markup=False)
        elif event.event_type == "progress":
            self._console.print(
                f"  ... {event.content} {event.percent:.1f}% "
                f"({event.current} / {event.total} bytes)",
                style="dim",
                markup=False,
                highlight=False,
            )
        else:
            self._console.print(event.content, markup=False, highlight=False)

    def stream_filtered(self, args: Sequence[str]) -> None:
        process = self._spawn(args)
        last_progress: OutputEvent | None = None
        with process:
            if process.stdout is not None:
                for line in process.stdout:
                    event = self._filter.classify(line)
                    if event is None:
                        continue
                    # SteamCMD repeats identical progress lines while stalled
                    if event.event_type == "progress" and event == last_progress:
                        continue
                    last_progress = event if event.event_type == "progress" else None
                    self._render(event)
            returncode = process.wait()
        self._check_exit(args, returncode)

    def stream_as_progress(self, args: Sequence[str], label: str) -> None:
        process = self._spawn(args)
        with process, self._console.status(label, spinner="dots") as status:
            line_count = 0
            if process.stdout is not None:
                for _line in process.stdout:
                    line_count += 1
                    status.update(f"{label} ({line_count} lines)")
            returncode = process.wait()
        self._check_exit(args, returncode)
        self._console.print(f"{label} - Complete!", style="green")

    def capture(self, args: Sequence[str]) -> ProcessOutput:
        logger.debug("Capturing output of %s", args[0])
        try:
            result = subprocess.run(
                list(args),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise SubprocessSpawnError(f"Cannot run {args[0]}: {e}") from e
        return ProcessOutput(returncode=result.returncode, output=result.stdout or "")
