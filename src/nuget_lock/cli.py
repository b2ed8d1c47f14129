# Copyright (c) 2025 DriftCop Project
# 
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
# 
#     http://www.apache.org/licenses/LICENSE-2.0
# 
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI interface for the NuGet lock file updater."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from nuget_lock import __version__
from nuget_lock.config import Constraints, UpdateArtifactsConfig, UpdaterSettings, load_settings
from nuget_lock.context import UpdateContext
from nuget_lock.errors import TemporaryError
from nuget_lock.models import Dependency, UpdateArtifact
from nuget_lock.nuget import update_artifacts
from nuget_lock.nuget.registries import (
    DATASOURCE_ID,
    get_configured_registries,
    get_default_registries,
    parse_registry_url,
)

app = typer.Typer(
    name="nuget-lock",
    help="Regenerate NuGet lock files for updated .NET projects",
    rich_markup_mode="markdown"
)
console = Console()
logger = logging.getLogger(__name__)

EXIT_ARTIFACT_ERROR = 1
EXIT_TEMPORARY_ERROR = 2


def setup_logging(verbose: bool, debug: bool) -> None:
    """Route log records through rich."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True
    )


def build_settings(
    config: Optional[Path],
    local_dir: Optional[Path],
    binary_source: Optional[str] = None
) -> UpdaterSettings:
    try:
        return load_settings(config, local_dir=local_dir, binary_source=binary_source)
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"nuget-lock version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True
    )
) -> None:
    """NuGet lock file updater - keep packages.lock.json in sync with project files."""
    pass


@app.command()
def update(
    package_file: str = typer.Argument(..., help="Project file, relative to the local directory"),
    new_content: Optional[Path] = typer.Option(None, "--new-content", "-n", help="File holding the new project file content (defaults to the current content)"),
    deps: List[str] = typer.Option([], "--dep", "-d", help="Name of an updated dependency (repeatable)"),
    lock_file_maintenance: bool = typer.Option(False, "--lock-file-maintenance", help="Regenerate lock files even without dependency updates"),
    dotnet: Optional[str] = typer.Option(None, "--dotnet", help="dotnet SDK version constraint"),
    local_dir: Optional[Path] = typer.Option(None, "--local-dir", "-l", help="Root of the working tree"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings file (TOML, YAML or JSON)"),
    binary_source: Optional[str] = typer.Option(None, "--binary-source", help="Where to run dotnet: docker or global"),
    output_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output")
) -> None:
    """Regenerate lock files after a project file change."""
    setup_logging(verbose, debug)
    settings = build_settings(config, local_dir, binary_source)
    context = UpdateContext.from_settings(settings)

    content_path = new_content or Path(settings.local_dir) / package_file
    try:
        content = content_path.read_text()
    except OSError as e:
        console.print(f"[red]Cannot read project file content: {e}[/red]")
        raise typer.Exit(1)

    update_request = UpdateArtifact(
        package_file_name=package_file,
        new_package_file_content=content,
        config=UpdateArtifactsConfig(
            constraints=Constraints(dotnet=dotnet),
            is_lock_file_maintenance=lock_file_maintenance
        ),
        updated_deps=[Dependency(dep_name=name) for name in deps]
    )

    try:
        results = asyncio.run(update_artifacts(update_request, context))
    except TemporaryError as e:
        console.print(f"[yellow]Temporary error, retry later: {e}[/yellow]")
        raise typer.Exit(EXIT_TEMPORARY_ERROR)

    if output_json:
        payload = [r.model_dump(exclude_none=True) for r in results] if results else None
        typer.echo(json.dumps(payload, indent=2))
    elif not results:
        console.print("[green]No lock file changes[/green]")
    else:
        table = Table(title="Lock File Updates")
        table.add_column("Lock File", style="cyan")
        table.add_column("Status", style="green")
        for result in results:
            if result.artifact_error:
                table.add_row(result.artifact_error.lock_file, f"[red]{result.artifact_error.stderr}[/red]")
            else:
                table.add_row(result.file.name, "updated" if result.file.contents is not None else "removed")
        console.print(table)

    if results and any(r.artifact_error for r in results):
        raise typer.Exit(EXIT_ARTIFACT_ERROR)


@app.command()
def sources(
    package_file: str = typer.Argument(..., help="Project file, relative to the local directory"),
    local_dir: Optional[Path] = typer.Option(None, "--local-dir", "-l", help="Root of the working tree"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Settings file (TOML, YAML or JSON)")
) -> None:
    """Show the package sources a restore of PACKAGE_FILE would use."""
    setup_logging(False, False)
    settings = build_settings(config, local_dir)
    context = UpdateContext.from_settings(settings)

    registries = asyncio.run(get_configured_registries(package_file, context.fs))
    origin = "nuget.config"
    if not registries:
        registries = get_default_registries()
        origin = "defaults"

    table = Table(title=f"Package Sources ({origin})")
    table.add_column("Name", style="cyan")
    table.add_column("Feed URL", style="green")
    table.add_column("Protocol", style="yellow")
    table.add_column("Credentials")

    for registry in registries:
        info = parse_registry_url(registry.url)
        credentials = context.host_rules.find(host_type=DATASOURCE_ID, url=registry.url)
        table.add_row(
            registry.name or "-",
            info.feed_url,
            f"v{info.protocol_version}",
            "[green]yes[/green]" if credentials.is_complete else "no"
        )

    console.print(table)


if __name__ == "__main__":
    app()
