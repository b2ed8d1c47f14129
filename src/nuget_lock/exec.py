"""Command execution, either on the host or inside a pinned container image."""

import asyncio
import logging
import os
import re
import secrets
import shlex
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel

from nuget_lock.config import UpdaterSettings, settings as default_settings
from nuget_lock.errors import ExecError, TemporaryError

logger = logging.getLogger(__name__)

# Images published under the configured prefix, keyed by tool name
DOCKER_IMAGES = {
    "dotnet": "sdk",
}

# Docker uses this exit code for errors of the daemon itself
DOCKER_ERROR_EXIT_CODE = 125

EXACT_VERSION = re.compile(r"^\d+(\.\d+){0,2}(-[0-9A-Za-z.]+)?$")
SECRET_FLAGS = re.compile(r"(--password\s+)((?:'[^']*'|\"[^\"]*\"|\\.|[^\s'\"\\])+)")


class DockerOptions(BaseModel):
    """Container image to run commands in."""
    image: str
    tag_constraint: Optional[str] = None


class ExecOptions(BaseModel):
    """Options for a batch of commands."""
    cwd: Optional[Path] = None
    env: Dict[str, str] = {}
    docker: Optional[DockerOptions] = None
    timeout_seconds: Optional[int] = None


class ExecResult(BaseModel):
    """Combined output of a command batch."""
    stdout: str = ""
    stderr: str = ""


def mask_secrets(cmd: str) -> str:
    """Hide password arguments before a command is logged or reported."""
    return SECRET_FLAGS.sub(r"\1***", cmd)


def get_docker_tag(tag_constraint: Optional[str]) -> str:
    """Image tag for a version constraint; anything but an exact version means latest."""
    if tag_constraint and EXACT_VERSION.match(tag_constraint.strip()):
        return tag_constraint.strip()
    if tag_constraint:
        logger.debug(f"Constraint '{tag_constraint}' is not an exact version, using latest image")
    return "latest"


def get_docker_image(docker: DockerOptions, config: UpdaterSettings) -> str:
    image = DOCKER_IMAGES.get(docker.image, docker.image)
    prefix = config.docker_image_prefix.rstrip("/")
    return f"{prefix}/{image}:{get_docker_tag(docker.tag_constraint)}"


def get_container_name() -> str:
    """Unique name for a restore container, so it can be removed if aborted."""
    return f"nuget-lock_{secrets.token_hex(8)}"


def generate_docker_command(
    cmds: List[str],
    options: ExecOptions,
    config: UpdaterSettings,
    container_name: Optional[str] = None
) -> List[str]:
    """Build a ``docker run`` invocation that runs ``cmds`` in one container."""
    local_dir = str(Path(config.local_dir).resolve())
    cache_dir = str(Path(config.cache_dir).resolve())
    cwd = str(options.cwd or local_dir)

    docker_cmd = ["docker", "run", "--rm"]
    if container_name:
        docker_cmd.extend(["--name", container_name])
    if config.docker_user:
        docker_cmd.extend(["--user", config.docker_user])
    for volume in dict.fromkeys([local_dir, cache_dir]):
        docker_cmd.extend(["-v", f"{volume}:{volume}"])
    for key, value in options.env.items():
        docker_cmd.extend(["-e", f"{key}={value}"])
    docker_cmd.extend(["-w", cwd])
    docker_cmd.append(get_docker_image(options.docker, config))
    docker_cmd.extend(["bash", "-l", "-c", " && ".join(cmds)])
    return docker_cmd


async def remove_container(container_name: str) -> None:
    """Force-remove a container whose ``docker run`` client was killed."""
    logger.debug(f"Removing container {container_name}")
    try:
        process = await asyncio.create_subprocess_exec(
            "docker", "rm", "-f", container_name,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL
        )
        await process.wait()
    except OSError as e:
        logger.warning(f"Failed to remove container {container_name}: {e}")


async def _abort(process, container_name: Optional[str]) -> None:
    if process.returncode is None:
        process.kill()
        await process.wait()
    if container_name:
        await remove_container(container_name)


async def _run(
    args: List[str],
    display_cmd: str,
    cwd: str,
    env: Dict[str, str],
    timeout: Optional[int],
    shell: bool,
    container_name: Optional[str] = None
) -> ExecResult:
    process_env = {**os.environ, **env}
    try:
        if shell:
            process = await asyncio.create_subprocess_shell(
                args[0],
                cwd=cwd,
                env=process_env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        else:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                env=process_env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
    except FileNotFoundError as e:
        raise TemporaryError(f"Unable to start command: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _abort(process, container_name)
        raise ExecError(
            display_cmd,
            None,
            message=f"Command timed out after {timeout} seconds: {display_cmd}"
        )
    except asyncio.CancelledError:
        await _abort(process, container_name)
        raise

    result = ExecResult(
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace")
    )

    if not shell and process.returncode == DOCKER_ERROR_EXIT_CODE:
        raise TemporaryError(f"Docker failed to run command: {result.stderr.strip()}")
    if process.returncode != 0:
        raise ExecError(display_cmd, process.returncode, result.stdout, result.stderr)

    return result


async def exec_commands(
    cmds: List[str],
    options: Optional[ExecOptions] = None,
    config: Optional[UpdaterSettings] = None
) -> ExecResult:
    """
    Run a batch of shell commands, stopping at the first failure.

    Args:
        cmds: Commands to run in order
        options: Working directory, environment, container and timeout
        config: Settings deciding between docker and host execution

    Returns:
        Output of the batch

    Raises:
        ExecError: A command exited non-zero or timed out
        TemporaryError: The execution environment is unavailable
    """
    options = options or ExecOptions()
    config = config or default_settings
    timeout = options.timeout_seconds or config.exec_timeout_seconds
    cwd = str(options.cwd or config.local_dir)

    if options.docker and config.binary_source == "docker":
        container_name = get_container_name()
        docker_cmd = generate_docker_command(cmds, options, config, container_name)
        # Secrets are masked per command, before the batch is quoted again for display
        masked_cmd = generate_docker_command(
            [mask_secrets(cmd) for cmd in cmds], options, config, container_name
        )
        display_cmd = " ".join(shlex.quote(part) for part in masked_cmd)
        logger.debug(f"Executing in docker: {display_cmd}")
        return await _run(docker_cmd, display_cmd, cwd, {}, timeout, shell=False,
                          container_name=container_name)

    stdout, stderr = [], []
    for cmd in cmds:
        display_cmd = mask_secrets(cmd)
        logger.debug(f"Executing: {display_cmd}")
        result = await _run([cmd], display_cmd, cwd, options.env, timeout, shell=True)
        stdout.append(result.stdout)
        stderr.append(result.stderr)

    return ExecResult(stdout="".join(stdout), stderr="".join(stderr))
