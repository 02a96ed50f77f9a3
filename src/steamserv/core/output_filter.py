"""Classification of SteamCMD's line-oriented stdout.

SteamCMD mixes useful progress with redirect and localization chatter. The
markers used to tell them apart come from SteamCMD's own output format, which
steamserv does not control, so they live in a configurable OutputFilter
rather than in the process runner.
"""

import re
from dataclasses import dataclass

DEFAULT_NOISE_MARKERS: tuple[str, ...] = ("Redirecting stderr", "UpdateUI", "ILocalize")
DEFAULT_STATUS_PREFIX = "["

# " Update state (0x61) downloading, progress: 45.23 (1234 / 5678)"
_PROGRESS_PATTERN = re.compile(
    r"^\s*Update state \(0x[0-9a-fA-F]+\) (?P<state>[\w ]+?), "
    r"progress: [\d.]+ \((?P<current>\d+) / (?P<total>\d+)\)"
)


@dataclass(frozen=True)
class OutputEvent:
    """One classified line of external-tool output.

    Attributes:
        event_type: "status" for bracketed status lines, "progress" for update
            progress lines, "text" for everything else
        content: The line without its trailing newline
        current: Bytes processed so far (progress events only)
        total: Bytes to process in total (progress events only)
    """

    event_type: str
    content: str
    current: int | None = None
    total: int | None = None

    @property
    def percent(self) -> float | None:
        """Percentage computed from the byte counts, not from SteamCMD's rounded figure."""
        if self.current is None or self.total is None:
            return None
        if self.total == 0:
            return 100.0
        return self.current * 100.0 / self.total


def parse_progress_line(line: str) -> OutputEvent | None:
    """Parse a SteamCMD update-progress line into a progress event.

    Example:
        >>> event = parse_progress_line(
        ...     " Update state (0x61) downloading, progress: 50.00 (512 / 1024)"
        ... )
        >>> event.percent
        50.0
    """
    match = _PROGRESS_PATTERN.match(line)
    if match is None:
        return None
    state = match.group("state").strip()
    current = int(match.group("current"))
    total = int(match.group("total"))
    return OutputEvent("progress", state, current=current, total=total)


@dataclass(frozen=True)
class OutputFilter:
    """Drops noisy lines and tags status and progress lines.

    Attributes:
        noise_markers: Substrings identifying lines to drop entirely
        status_prefix: Leading text identifying status lines
    """

    noise_markers: tuple[str, ...] = DEFAULT_NOISE_MARKERS
    status_prefix: str = DEFAULT_STATUS_PREFIX

    def is_noise(self, line: str) -> bool:
        return any(marker in line for marker in self.noise_markers)

    def classify(self, line: str) -> OutputEvent | None:
        """Classify a raw output line, or return None if it should be dropped."""
        content = line.rstrip("\r\n")
        if self.is_noise(content):
            return None

        progress = parse_progress_line(content)
        if progress is not None:
            return progress

        if self.status_prefix and content.startswith(self.status_prefix):
            return OutputEvent("status", content)

        return OutputEvent("text", content)
