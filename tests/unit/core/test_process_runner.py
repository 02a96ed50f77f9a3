"""Tests for RealProcessRunner using short Python subprocesses."""

import io
import sys

import pytest
from rich.console import Console

from steamserv.core.errors import SubprocessNonZeroExitError, SubprocessSpawnError
from steamserv.core.process_runner import RealProcessRunner


def _runner() -> tuple[RealProcessRunner, io.StringIO]:
    buffer = io.StringIO()
    return RealProcessRunner(Console(file=buffer, width=200)), buffer


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_stream_filtered_drops_noise_and_tags_status() -> None:
    runner, buffer = _runner()

    runner.stream_filtered(
        _python(
            "print('Redirecting stderr to somewhere')\n"
            "print('[  0%] Checking for available updates...')\n"
            "print('Success! App installed.')"
        )
    )

    output = buffer.getvalue()
    assert "Redirecting" not in output
    assert "  ... [  0%] Checking for available updates..." in output
    assert "Success! App installed." in output


def test_stream_filtered_renders_repeated_progress_once() -> None:
    runner, buffer = _runner()
    line = " Update state (0x61) downloading, progress: 50.00 (512 / 1024)"

    runner.stream_filtered(_python(f"print({line!r}); print({line!r})"))

    assert buffer.getvalue().count("downloading 50.0%") == 1


def test_stream_filtered_renders_progress_again_after_other_output() -> None:
    runner, buffer = _runner()
    line = " Update state (0x61) downloading, progress: 50.00 (512 / 1024)"

    runner.stream_filtered(
        _python(f"print({line!r}); print('[----] Verifying installation'); print({line!r})")
    )

    assert buffer.getvalue().count("downloading 50.0%") == 2


def test_stream_filtered_includes_stderr() -> None:
    runner, buffer = _runner()

    runner.stream_filtered(_python("import sys; sys.stderr.write('from stderr\\n')"))

    assert "from stderr" in buffer.getvalue()


def test_stream_filtered_raises_on_non_zero_exit() -> None:
    runner, _ = _runner()

    with pytest.raises(SubprocessNonZeroExitError) as exc_info:
        runner.stream_filtered(_python("import sys; sys.exit(8)"))

    assert exc_info.value.returncode == 8


def test_missing_executable_raises_spawn_error(tmp_path) -> None:
    runner, _ = _runner()

    with pytest.raises(SubprocessSpawnError):
        runner.stream_filtered([str(tmp_path / "steamcmd.sh"), "+quit"])


def test_stream_as_progress_reports_completion_only_on_success() -> None:
    runner, buffer = _runner()

    runner.stream_as_progress(_python("for i in range(3): print(i)"), "Extracting SteamCMD")
    assert "Extracting SteamCMD - Complete!" in buffer.getvalue()

    runner, buffer = _runner()
    with pytest.raises(SubprocessNonZeroExitError):
        runner.stream_as_progress(_python("import sys; sys.exit(2)"), "Extracting SteamCMD")
    assert "Complete!" not in buffer.getvalue()


def test_capture_returns_output_and_exit_code_without_raising() -> None:
    runner, _ = _runner()

    result = runner.capture(_python("print('Invalid Platform'); raise SystemExit(5)"))

    assert result.returncode == 5
    assert "Invalid Platform" in result.output
