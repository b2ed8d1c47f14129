"""NuGet lock file updater."""

from .artifacts import update_artifacts
from .lockfiles import LOCK_FILE_NAME, LockFileSnapshotter
from .registries import get_configured_registries, get_default_registries, parse_registry_url
from .restore import run_dotnet_restore

__all__ = [
    "update_artifacts",
    "LOCK_FILE_NAME",
    "LockFileSnapshotter",
    "get_configured_registries",
    "get_default_registries",
    "parse_registry_url",
    "run_dotnet_restore"
]
