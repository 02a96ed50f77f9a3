"""Fake CatalogSource implementation for testing."""

from steamserv.core.catalog import CatalogSource, ServerInfo
from steamserv.core.errors import FetchError


class FakeCatalogSource(CatalogSource):
    """In-memory app listing with optional failure injection.

    Constructor Injection:
    - entries: the raw app listing returned by fetch(), before filtering
    - error: if given, fetch() raises it instead

    When to Use:
    - Testing cache refresh and first-time setup without network access
    - Testing that a failed fetch leaves the previous cache untouched

    Examples:
        >>> source = FakeCatalogSource(entries=[ServerInfo(2394010, "Palworld Dedicated Server")])
        >>> source.fetch()[0].app_id
        2394010

        >>> source = FakeCatalogSource(error=FetchError("offline"))
        >>> source.fetch()  # raises FetchError
    """

    def __init__(
        self,
        *,
        entries: list[ServerInfo] | None = None,
        error: FetchError | None = None,
    ) -> None:
        self._entries = entries or []
        self._error = error
        self._fetch_count = 0

    def fetch(self) -> list[ServerInfo]:
        self._fetch_count += 1
        if self._error is not None:
            raise self._error
        return list(self._entries)

    @property
    def fetch_count(self) -> int:
        """Number of fetch() calls. This property is for test assertions only."""
        return self._fetch_count
