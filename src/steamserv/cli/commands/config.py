from dataclasses import replace
from pathlib import Path

import click

from steamserv.cli.ensure import Ensure, exit_on_error
from steamserv.cli.output import machine_output, user_output
from steamserv.core.context import SteamservContext
from steamserv.core.registry import Registry

SETTABLE_KEYS = ["tool_path", "install_root"]


def _format_optional(value: object) -> str:
    return "" if value is None else str(value)


def _update_registry_field(registry: Registry, key: str, value: str) -> Registry:
    path = Path(value).expanduser().absolute()
    match key:
        case "tool_path":
            return replace(registry, tool_path=path)
        case "install_root":
            return replace(registry, install_root=path)
        case _:
            raise ValueError(f"Unhandled config key: {key}")


@click.group("config")
def config_group() -> None:
    """Show or change steamserv settings."""


@config_group.command("show")
@click.pass_obj
def show_cmd(ctx: SteamservContext) -> None:
    """Print the current settings."""
    with exit_on_error():
        registry = ctx.registry_store.load()

    location = str(ctx.registry_store.path())
    if not ctx.registry_store.exists():
        location += " (not created yet)"
    user_output(click.style("Config file: ", bold=True) + location)
    machine_output(f"tool_path={registry.tool_path}")
    machine_output(f"install_root={registry.install_root}")
    machine_output(f"initialized={str(registry.initialized).lower()}")
    machine_output(f"last_cache_update={_format_optional(registry.last_cache_update)}")
    machine_output(f"installed_servers={len(registry.installed_servers)}")


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def set_cmd(ctx: SteamservContext, key: str, value: str) -> None:
    """Set KEY (tool_path or install_root) to VALUE."""
    Ensure.one_of(key, SETTABLE_KEYS, "config key")
    Ensure.invariant(bool(value.strip()), f"A value is required for {key}.")

    with exit_on_error():
        registry = ctx.registry_store.load()
        updated = _update_registry_field(registry, key, value.strip())
        ctx.registry_store.save(updated)

    ctx.feedback.success(f"Set {key}={getattr(updated, key)}")
