"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
from typing import Callable, List, Optional

import pytest

# Add the src directory to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from nuget_lock.config import UpdaterSettings
from nuget_lock.context import UpdateContext
from nuget_lock.exec import ExecOptions, ExecResult
from nuget_lock.fs import LocalFileSystem
from nuget_lock.host_rules import HostRules


PROJECT_XML = """<Project Sdk="Microsoft.NET.Sdk">
  <ItemGroup>
    <PackageReference Include="Newtonsoft.Json" Version="12.0.1" />
  </ItemGroup>
</Project>
"""

LOCK_JSON = """{
  "version": 1,
  "dependencies": {
    "net6.0": {
      "Newtonsoft.Json": {"type": "Direct", "requested": "[12.0.1, )", "resolved": "12.0.1"}
    }
  }
}
"""


class FakeExecutor:
    """Records command batches and runs an optional side effect instead of dotnet."""

    def __init__(self, side_effect: Optional[Callable[[List[str], ExecOptions], None]] = None):
        self.side_effect = side_effect
        self.calls = []

    async def __call__(self, cmds: List[str], options: ExecOptions) -> ExecResult:
        self.calls.append((list(cmds), options))
        if self.side_effect:
            self.side_effect(cmds, options)
        return ExecResult()

    @property
    def called(self) -> bool:
        return bool(self.calls)


@pytest.fixture
def local_dir(tmp_path):
    """Working tree root."""
    path = tmp_path / "repo"
    path.mkdir()
    return path


@pytest.fixture
def cache_dir(tmp_path):
    """Cache root."""
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def settings(local_dir, cache_dir):
    return UpdaterSettings(local_dir=local_dir, cache_dir=cache_dir, binary_source="global")


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def context(settings, executor):
    """Update context backed by the temporary working tree and a fake executor."""
    return UpdateContext(
        settings=settings,
        fs=LocalFileSystem(settings.local_dir, settings.cache_dir),
        host_rules=HostRules(),
        executor=executor
    )


@pytest.fixture
def project(local_dir):
    """A project with a lock file next to it."""
    project_dir = local_dir / "src" / "App"
    project_dir.mkdir(parents=True)
    (project_dir / "App.csproj").write_text(PROJECT_XML)
    (project_dir / "packages.lock.json").write_text(LOCK_JSON)
    return "src/App/App.csproj"


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Keep NUGET_LOCK_* settings from leaking into tests."""
    for name in ("LOCAL_DIR", "CACHE_DIR", "BINARY_SOURCE", "DOCKER_IMAGE_PREFIX",
                 "DOCKER_USER", "EXEC_TIMEOUT_SECONDS"):
        monkeypatch.delenv(f"NUGET_LOCK_{name}", raising=False)
