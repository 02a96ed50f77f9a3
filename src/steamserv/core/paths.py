"""Locations of steamserv's persistent files."""

import os
from pathlib import Path

import click

APP_NAME = "steamserv"


def app_dir() -> Path:
    """Return the directory holding the registry and catalog cache.

    STEAMSERV_HOME overrides the platform default from click.get_app_dir().
    """
    override = os.environ.get("STEAMSERV_HOME")
    if override:
        return Path(override).expanduser()
    return Path(click.get_app_dir(APP_NAME))


def registry_path() -> Path:
    return app_dir() / "config.toml"


def catalog_path() -> Path:
    return app_dir() / "cache" / "server_cache.json"
