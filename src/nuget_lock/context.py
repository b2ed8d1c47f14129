"""Collaborators shared by one lock file update."""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from nuget_lock.config import UpdaterSettings, settings as default_settings
from nuget_lock.exec import ExecOptions, ExecResult, exec_commands
from nuget_lock.fs import LocalFileSystem
from nuget_lock.host_rules import HostRules

Executor = Callable[[List[str], ExecOptions], Awaitable[ExecResult]]


@dataclass
class UpdateContext:
    """Filesystem, credentials and command executor for a working tree."""
    settings: UpdaterSettings
    fs: LocalFileSystem
    host_rules: HostRules = field(default_factory=HostRules)
    executor: Optional[Executor] = None

    def __post_init__(self):
        if self.executor is None:
            self.executor = self._exec

    async def _exec(self, cmds: List[str], options: ExecOptions) -> ExecResult:
        return await exec_commands(cmds, options, self.settings)

    @classmethod
    def from_settings(cls, settings: Optional[UpdaterSettings] = None) -> "UpdateContext":
        settings = settings or default_settings
        return cls(
            settings=settings,
            fs=LocalFileSystem(settings.local_dir, settings.cache_dir),
            host_rules=HostRules(settings.host_rules)
        )
