"""HTTP downloads with a terminal progress display.

Byte progress is shown when the server declares Content-Length; otherwise the
bar falls back to an indeterminate pulse instead of failing.
"""

import logging
from collections.abc import Callable
from pathlib import Path

import httpx
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TransferSpeedColumn,
)

from steamserv.core.errors import FetchError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def declared_length(response: httpx.Response) -> int | None:
    """Return the Content-Length of a response, or None if absent or unusable."""
    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        length = int(raw)
    except ValueError:
        return None
    return length if length >= 0 else None


def _stream(
    client: httpx.Client,
    url: str,
    *,
    label: str,
    console: Console,
    sink: Callable[[bytes], object],
) -> int:
    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        console=console,
        transient=True,
    )
    received = 0
    try:
        with client.stream("GET", url, follow_redirects=True) as response:
            response.raise_for_status()
            total = declared_length(response)
            logger.debug("GET %s -> %s, length=%s", url, response.status_code, total)
            with progress:
                task = progress.add_task(label, total=total)
                for chunk in response.iter_bytes(_CHUNK_SIZE):
                    sink(chunk)
                    received += len(chunk)
                    # Wire bytes, so a gzip Content-Length still bounds the bar
                    progress.update(task, completed=response.num_bytes_downloaded)
    except httpx.HTTPStatusError as e:
        raise FetchError(
            f"Download of {url} failed: HTTP {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        raise FetchError(f"Download of {url} failed: {e}") from e
    return received


def fetch_bytes(client: httpx.Client, url: str, *, label: str, console: Console) -> bytes:
    """Download url into memory, showing progress.

    Raises:
        FetchError: On network failure or a non-2xx status
    """
    chunks: list[bytes] = []
    _stream(client, url, label=label, console=console, sink=chunks.append)
    return b"".join(chunks)


def download_to_file(
    client: httpx.Client, url: str, destination: Path, *, label: str, console: Console
) -> Path:
    """Download url to destination, showing progress.

    A partially written file is removed when the download fails.

    Raises:
        FetchError: On network failure, a non-2xx status, or an unwritable destination
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        handle = destination.open("wb")
    except OSError as e:
        raise FetchError(f"Cannot write download to {destination}: {e}") from e

    try:
        with handle:
            _stream(client, url, label=label, console=console, sink=handle.write)
    except FetchError:
        destination.unlink(missing_ok=True)
        raise
    except OSError as e:
        destination.unlink(missing_ok=True)
        raise FetchError(f"Cannot write download to {destination}: {e}") from e
    return destination
