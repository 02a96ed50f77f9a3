"""Application context with dependency injection."""

import io
from dataclasses import dataclass

import httpx
from rich.console import Console

from steamserv.core.catalog import (
    CatalogSource,
    CatalogStore,
    FilesystemCatalogStore,
    HttpCatalogSource,
)
from steamserv.core.filesystem import Filesystem, RealFilesystem
from steamserv.core.process_runner import ProcessRunner, RealProcessRunner
from steamserv.core.prompter import ClickPrompter, Prompter
from steamserv.core.registry import FilesystemRegistryStore, RegistryStore
from steamserv.core.time import RealTime, Time
from steamserv.core.user_feedback import InteractiveFeedback, SuppressedFeedback, UserFeedback


@dataclass(frozen=True)
class SteamservContext:
    """Immutable context holding all dependencies for steamserv operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    registry_store: RegistryStore
    catalog_store: CatalogStore
    catalog_source: CatalogSource
    process_runner: ProcessRunner
    prompter: Prompter
    filesystem: Filesystem
    time: Time
    feedback: UserFeedback
    http_client: httpx.Client
    console: Console

    @staticmethod
    def for_test(
        registry_store: RegistryStore | None = None,
        catalog_store: CatalogStore | None = None,
        catalog_source: CatalogSource | None = None,
        process_runner: ProcessRunner | None = None,
        prompter: Prompter | None = None,
        filesystem: Filesystem | None = None,
        time: Time | None = None,
        feedback: UserFeedback | None = None,
        http_client: httpx.Client | None = None,
        console: Console | None = None,
    ) -> "SteamservContext":
        """Create test context with optional pre-configured dependencies.

        Any dependency left as None is replaced by its in-memory fake, so a
        test only spells out what it asserts on.

        Example:
            >>> runner = FakeProcessRunner(exit_code=1)
            >>> ctx = SteamservContext.for_test(process_runner=runner)
        """
        from tests.fakes.catalog_source import FakeCatalogSource
        from tests.fakes.filesystem import FakeFilesystem
        from tests.fakes.process_runner import FakeProcessRunner
        from tests.fakes.prompter import FakePrompter
        from tests.fakes.time import FakeTime
        from tests.fakes.user_feedback import FakeUserFeedback

        from steamserv.core.catalog import InMemoryCatalogStore
        from steamserv.core.registry import InMemoryRegistryStore

        if http_client is None:
            http_client = httpx.Client(
                transport=httpx.MockTransport(lambda request: httpx.Response(404))
            )

        return SteamservContext(
            registry_store=registry_store or InMemoryRegistryStore(),
            catalog_store=catalog_store or InMemoryCatalogStore(),
            catalog_source=catalog_source or FakeCatalogSource(),
            process_runner=process_runner or FakeProcessRunner(),
            prompter=prompter or FakePrompter(),
            filesystem=filesystem or FakeFilesystem(),
            time=time or FakeTime(),
            feedback=feedback or FakeUserFeedback(),
            http_client=http_client,
            console=console or Console(file=io.StringIO(), width=120),
        )


def create_context(*, quiet: bool) -> SteamservContext:
    """Create production context with real implementations.

    Called once at CLI entry point. Registry and catalog files are not read
    here; each operation loads them when it starts.

    Args:
        quiet: If True, suppress informational feedback (errors still show)
    """
    console = Console(stderr=True)
    # Downloads run to completion; no client-side timeout
    http_client = httpx.Client(timeout=None)
    feedback: UserFeedback = SuppressedFeedback() if quiet else InteractiveFeedback()

    return SteamservContext(
        registry_store=FilesystemRegistryStore(),
        catalog_store=FilesystemCatalogStore(),
        catalog_source=HttpCatalogSource(http_client, console),
        process_runner=RealProcessRunner(console),
        prompter=ClickPrompter(),
        filesystem=RealFilesystem(),
        time=RealTime(),
        feedback=feedback,
        http_client=http_client,
        console=console,
    )
