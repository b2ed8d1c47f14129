"""Runs ``dotnet restore`` for a project with a transient package source config."""

import logging
import shlex
from typing import Optional

from nuget_lock.config import UpdateArtifactsConfig
from nuget_lock.context import UpdateContext
from nuget_lock.exec import DockerOptions, ExecOptions, mask_secrets
from nuget_lock.nuget.constraints import GLOBAL_JSON, get_dotnet_constraint
from nuget_lock.nuget.sources import get_add_source_commands, transient_nuget_config

logger = logging.getLogger(__name__)

SOLUTION_SUFFIX = ".sln"


async def get_solution_file(context: UpdateContext) -> Optional[str]:
    """First solution file at the root of the working tree."""
    for name in await context.fs.read_local_directory():
        if name.endswith(SOLUTION_SUFFIX):
            return name
    return None


async def run_dotnet_restore(
    package_file: str,
    config: UpdateArtifactsConfig,
    context: UpdateContext
) -> None:
    """
    Restore a project (or the solution containing it) so lock files are rewritten.

    Args:
        package_file: Project file path relative to the working tree
        config: Update configuration holding the dotnet constraint
        context: Filesystem, credentials and executor to use

    Raises:
        ExecError: dotnet exited with an error
        TemporaryError: The execution environment is unavailable
    """
    global_json_content = await context.fs.read_local_file(GLOBAL_JSON)
    tag_constraint = get_dotnet_constraint(global_json_content, config)
    exec_options = ExecOptions(
        docker=DockerOptions(image="dotnet", tag_constraint=tag_constraint)
    )

    async with transient_nuget_config(context) as nuget_config_file:
        solution_file = await get_solution_file(context)
        cmds = await get_add_source_commands(package_file, nuget_config_file, context)
        cmds.append(
            f"dotnet restore {shlex.quote(solution_file or package_file)}"
            f" --force-evaluate --configfile {shlex.quote(str(nuget_config_file))}"
        )
        logger.debug(f"dotnet commands: {[mask_secrets(cmd) for cmd in cmds]}")
        await context.executor(cmds, exec_options)
