"""Snapshots of NuGet lock files before and after a restore."""

import asyncio
import logging
import posixpath
from typing import List

from nuget_lock.fs import LocalFileSystem
from nuget_lock.models import File

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = "packages.lock.json"


class LockFileSnapshotter:
    """Captures every lock file of a working tree and detects changes to them."""

    def __init__(self, fs: LocalFileSystem):
        self.fs = fs

    async def _read_all(self, names: List[str]) -> List[File]:
        contents = await asyncio.gather(*(self.fs.read_local_file(name) for name in names))
        return [File(name=name, contents=text) for name, text in zip(names, contents)]

    async def snapshot(self) -> List[File]:
        """Read all lock files in the tree, in path order."""
        names = [
            name for name in await self.fs.read_local_directory_recursive()
            if posixpath.basename(name) == LOCK_FILE_NAME
        ]
        logger.debug(f"Found {len(names)} lock files")
        return await self._read_all(names)

    async def diff(self, snapshot: List[File]) -> List[File]:
        """
        Lock files whose contents differ from ``snapshot``.

        Returned records carry the new contents; files that can no longer be
        read come back with ``contents`` set to None.
        """
        current = await self._read_all([file.name for file in snapshot])
        changed = [
            new for old, new in zip(snapshot, current)
            if old.contents != new.contents
        ]
        logger.debug(f"{len(changed)} of {len(snapshot)} lock files changed")
        return changed
