"""Configuration for the NuGet lock file updater."""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import toml
import yaml
from pydantic import BaseModel, Field


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"NUGET_LOCK_{name}", default)


class Constraints(BaseModel):
    """Tool version constraints."""
    dotnet: Optional[str] = None


class UpdateArtifactsConfig(BaseModel):
    """Per-update configuration passed by the caller."""
    constraints: Constraints = Field(default_factory=Constraints)
    is_lock_file_maintenance: bool = False


class HostRule(BaseModel):
    """Credentials for hosts matching a rule."""
    host_type: Optional[str] = None
    match_host: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class UpdaterSettings(BaseModel):
    """Admin-level settings shared by all updates of a working tree."""

    # Working tree and cache locations
    local_dir: Path = Field(default_factory=lambda: Path(_env("LOCAL_DIR", os.getcwd())))
    cache_dir: Path = Field(default_factory=lambda: Path(
        _env("CACHE_DIR", str(Path.home() / ".cache" / "nuget-lock"))
    ))

    # How commands are executed: "docker" runs them in a version-pinned image
    binary_source: Literal["docker", "global"] = Field(
        default_factory=lambda: _env("BINARY_SOURCE", "docker")
    )
    docker_image_prefix: str = Field(
        default_factory=lambda: _env("DOCKER_IMAGE_PREFIX", "mcr.microsoft.com/dotnet")
    )
    docker_user: Optional[str] = Field(default_factory=lambda: _env("DOCKER_USER"))
    exec_timeout_seconds: int = Field(
        default_factory=lambda: int(_env("EXEC_TIMEOUT_SECONDS", "900"))
    )

    host_rules: List[HostRule] = Field(default_factory=list)


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load configuration from file

    Args:
        path: Path to configuration file (TOML, YAML or JSON)

    Returns:
        Configuration dictionary
    """
    content = path.read_text()
    suffix = path.suffix.lower()

    if suffix == ".toml":
        data = toml.loads(content)
    elif suffix in (".yaml", ".yml"):
        data = yaml.safe_load(content)
    elif suffix == ".json":
        data = json.loads(content)
    else:
        raise ValueError(f"Unsupported config format: {path.suffix}")

    return data or {}


def load_settings(path: Optional[Path] = None, **overrides: Any) -> UpdaterSettings:
    """Build settings from an optional config file plus explicit overrides."""
    data: Dict[str, Any] = {}
    if path is not None:
        data.update(load_config(path))
    data.update({k: v for k, v in overrides.items() if v is not None})
    return UpdaterSettings(**data)


settings = UpdaterSettings()
