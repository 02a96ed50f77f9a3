"""Fake ProcessRunner implementation for testing.

No subprocess is ever started; calls are recorded and results come from the
constructor.
"""

from collections.abc import Sequence

from steamserv.core.errors import SubprocessNonZeroExitError, SubprocessSpawnError
from steamserv.core.process_runner import ProcessOutput, ProcessRunner

PLATFORM_FLAG = "+sSteamCmdForcePlatformType"
SUPPORTED_PROBE_OUTPUT = "AppID 2394010 (Palworld Dedicated Server):\n - install state: Uninstalled"


class FakeProcessRunner(ProcessRunner):
    """In-memory fake for SteamCMD and tar invocations.

    Constructor Injection:
    - exit_code: exit status for stream_filtered() and stream_as_progress();
      non-zero raises SubprocessNonZeroExitError just like the real runner
    - probe_outputs: capture() output keyed by the forced platform ("linux",
      "windows"); platforms not listed get a supported-looking status
    - spawn_error: if True, every call raises SubprocessSpawnError

    When to Use:
    - Testing install/update/uninstall workflows without SteamCMD
    - Simulating a SteamCMD failure or an app with no Linux build

    Examples:
        # SteamCMD exits with status 8
        >>> runner = FakeProcessRunner(exit_code=8)

        # App only available on Windows
        >>> runner = FakeProcessRunner(probe_outputs={"linux": "Invalid Platform"})
    """

    def __init__(
        self,
        *,
        exit_code: int = 0,
        probe_outputs: dict[str, str] | None = None,
        spawn_error: bool = False,
    ) -> None:
        self._exit_code = exit_code
        self._probe_outputs = probe_outputs or {}
        self._spawn_error = spawn_error
        self._streamed: list[list[str]] = []
        self._progress_calls: list[tuple[list[str], str]] = []
        self._captured: list[list[str]] = []

    def _start(self, args: Sequence[str]) -> None:
        if self._spawn_error:
            raise SubprocessSpawnError(f"Could not start {args[0]}: No such file or directory")

    def _finish(self, args: Sequence[str]) -> None:
        if self._exit_code != 0:
            raise SubprocessNonZeroExitError(args, self._exit_code)

    def stream_filtered(self, args: Sequence[str]) -> None:
        self._start(args)
        self._streamed.append(list(args))
        self._finish(args)

    def stream_as_progress(self, args: Sequence[str], label: str) -> None:
        self._start(args)
        self._progress_calls.append((list(args), label))
        self._finish(args)

    def capture(self, args: Sequence[str]) -> ProcessOutput:
        self._start(args)
        self._captured.append(list(args))
        platform = ""
        if PLATFORM_FLAG in args:
            platform = args[list(args).index(PLATFORM_FLAG) + 1]
        output = self._probe_outputs.get(platform, SUPPORTED_PROBE_OUTPUT)
        return ProcessOutput(returncode=0, output=output)

    @property
    def streamed(self) -> list[list[str]]:
        """Argument vectors passed to stream_filtered(). For test assertions only."""
        return [list(a) for a in self._streamed]

    @property
    def progress_calls(self) -> list[tuple[list[str], str]]:
        """(args, label) pairs passed to stream_as_progress(). For test assertions only."""
        return [(list(a), label) for a, label in self._progress_calls]

    @property
    def captured(self) -> list[list[str]]:
        """Argument vectors passed to capture(). For test assertions only."""
        return [list(a) for a in self._captured]
