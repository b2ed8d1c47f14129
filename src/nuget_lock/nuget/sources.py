"""Package source registration for a restore run."""

import logging
import shlex
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List

from nuget_lock.context import UpdateContext
from nuget_lock.nuget.registries import (
    DATASOURCE_ID,
    get_configured_registries,
    get_default_registries,
    get_random_string,
    parse_registry_url,
)

logger = logging.getLogger(__name__)

NUGET_CONFIG_FILE = "nuget.config"
EMPTY_NUGET_CONFIG = '<?xml version="1.0" encoding="utf-8"?>\n<configuration>\n</configuration>\n'


async def get_add_source_commands(
    package_file: str,
    nuget_config_file: Path,
    context: UpdateContext
) -> List[str]:
    """
    Commands registering every known registry into ``nuget_config_file``.

    Registries come from the NuGet config applying to ``package_file`` or,
    failing that, the defaults. Command order follows registry order.
    """
    registries = (
        await get_configured_registries(package_file, context.fs)
        or get_default_registries()
    )

    cmds = []
    for registry in registries:
        credentials = context.host_rules.find(host_type=DATASOURCE_ID, url=registry.url)
        registry_info = parse_registry_url(registry.url)
        cmd = (
            f"dotnet nuget add source {shlex.quote(registry_info.feed_url)}"
            f" --configfile {shlex.quote(str(nuget_config_file))}"
        )
        if registry.name:
            cmd += f" --name {shlex.quote(registry.name)}"
        if credentials.is_complete:
            cmd += (
                f" --username {shlex.quote(credentials.username)}"
                f" --password {shlex.quote(credentials.password)}"
                " --store-password-in-clear-text"
            )
        cmds.append(cmd)
    return cmds


@asynccontextmanager
async def transient_nuget_config(context: UpdateContext) -> AsyncIterator[Path]:
    """Empty NuGet config in a fresh cache directory, removed on exit."""
    config_dir = await context.fs.ensure_cache_dir(f"others/nuget/{get_random_string()}")
    try:
        config_file = config_dir / NUGET_CONFIG_FILE
        await context.fs.output_file(config_file, EMPTY_NUGET_CONFIG)
        yield config_file
    finally:
        await context.fs.remove(config_dir)
