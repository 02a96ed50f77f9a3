"""First-run setup and catalog cache maintenance.

Setup records where SteamCMD lives (downloading it when needed) and where
servers get installed, marks the registry initialized, and builds the first
catalog.
"""

import logging
from dataclasses import replace
from pathlib import Path

from steamserv.core.catalog import Catalog, refresh_catalog
from steamserv.core.context import SteamservContext
from steamserv.core.download import download_to_file
from steamserv.core.errors import InvalidInputError
from steamserv.core.registry import Registry
from steamserv.core.steamcmd import SteamCmd

logger = logging.getLogger(__name__)

STEAMCMD_ARCHIVE_URL = "https://steamcdn-a.akamaihd.net/client/installer/steamcmd_linux.tar.gz"
STEAMCMD_ARCHIVE_NAME = "steamcmd_linux.tar.gz"
STEAMCMD_SCRIPT_NAME = "steamcmd.sh"


def update_cache(ctx: SteamservContext) -> Catalog:
    """Refresh the catalog and stamp the registry's last_cache_update.

    Raises:
        FetchError: If the listing could not be downloaded (old cache kept)
        CatalogIOError, RegistryIOError: If persisting fails
    """
    catalog = refresh_catalog(ctx.catalog_source, ctx.catalog_store, ctx.time.now())
    registry = ctx.registry_store.load()
    ctx.registry_store.save(replace(registry, last_cache_update=catalog.last_update))
    return catalog


def install_steamcmd(ctx: SteamservContext, target_dir: Path) -> Path:
    """Download, extract and initialize SteamCMD in target_dir.

    Returns:
        Path to the steamcmd.sh launcher

    Raises:
        FetchError: If the archive download fails
        SubprocessSpawnError, SubprocessNonZeroExitError: If tar or SteamCMD fail
    """
    archive = target_dir / STEAMCMD_ARCHIVE_NAME
    download_to_file(
        ctx.http_client,
        STEAMCMD_ARCHIVE_URL,
        archive,
        label="Downloading SteamCMD",
        console=ctx.console,
    )

    ctx.process_runner.stream_as_progress(
        ["tar", "-xvzf", str(archive), "-C", str(target_dir)], "Extracting SteamCMD"
    )
    ctx.filesystem.remove_file(archive)

    tool_path = target_dir / STEAMCMD_SCRIPT_NAME
    SteamCmd(ctx.process_runner, tool_path).self_update()
    logger.debug("SteamCMD installed at %s", tool_path)
    return tool_path


def run_first_time_setup(ctx: SteamservContext) -> Registry:
    """Ask for SteamCMD and install locations, then build the initial catalog.

    Installed servers already present in the registry are kept, so setup can
    be re-run to point at a different SteamCMD.

    Returns:
        The initialized Registry

    Raises:
        InvalidInputError: If the user declines to install a required SteamCMD
        FetchError: If SteamCMD or the catalog cannot be downloaded
    """
    prompter = ctx.prompter
    feedback = ctx.feedback

    feedback.info(
        "You are using steamserv for the first time. "
        "The following steps configure your environment."
    )

    if prompter.confirm("Do you have SteamCMD installed?"):
        tool_path = Path(
            prompter.ask_text("Please enter the path to the SteamCMD executable:").strip()
        ).expanduser().absolute()
    else:
        target_dir = Path(
            prompter.ask_text("Please enter the path to the SteamCMD install directory:").strip()
        ).expanduser().absolute()
        if not prompter.confirm("Do you want to install SteamCMD now?"):
            raise InvalidInputError("SteamCMD is required to use steamserv.")
        tool_path = install_steamcmd(ctx, target_dir)

    install_root = Path(
        prompter.ask_text("Please enter the path to the server install directory:").strip()
    ).expanduser().absolute()

    registry = replace(
        ctx.registry_store.load(),
        tool_path=tool_path,
        install_root=install_root,
        initialized=True,
    )
    ctx.registry_store.save(registry)

    feedback.info("Creating initial server cache...")
    catalog = update_cache(ctx)
    feedback.success(f"Setup complete! {len(catalog.servers)} servers available.")
    return ctx.registry_store.load()
