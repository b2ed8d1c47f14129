"""Filesystem access rooted at the working tree."""

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

# Directories never descended into when listing the working tree
SKIP_DIRS = {".git"}


class LocalFileSystem:
    """
    Reads and writes files relative to a working tree.

    All file names passed in are relative to ``local_dir``; cache paths are
    absolute and must live under ``cache_dir``.
    """

    def __init__(self, local_dir: Union[str, Path], cache_dir: Union[str, Path]):
        self.local_dir = Path(local_dir).resolve()
        self.cache_dir = Path(cache_dir).resolve()

    def local_path(self, file_name: str) -> Path:
        """Resolve a working tree file name, refusing paths outside the tree."""
        path = (self.local_dir / file_name.lstrip("/")).resolve()
        if path != self.local_dir and self.local_dir not in path.parents:
            raise ValueError(f"Path escapes local directory: {file_name}")
        return path

    @staticmethod
    def get_sibling_file_name(file_name: str, sibling_name: str) -> str:
        """Name of a file in the same directory as ``file_name``."""
        parent = os.path.dirname(file_name)
        return os.path.join(parent, sibling_name) if parent else sibling_name

    async def read_local_file(self, file_name: str, encoding: str = "utf-8") -> Optional[str]:
        """Read a file from the working tree; None if it is missing or unreadable."""
        path = self.local_path(file_name)
        try:
            return await asyncio.to_thread(path.read_text, encoding=encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Error reading local file {file_name}: {e}")
            return None

    async def write_local_file(self, file_name: str, content: str) -> None:
        path = self.local_path(file_name)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

        await asyncio.to_thread(_write)

    async def local_path_exists(self, file_name: str) -> bool:
        return await asyncio.to_thread(self.local_path(file_name).exists)

    async def read_local_directory(self, path: str = "") -> List[str]:
        """Names of the entries directly inside a working tree directory."""
        directory = self.local_path(path)
        entries = await asyncio.to_thread(os.listdir, directory)
        return sorted(entries)

    async def read_local_directory_recursive(self, path: str = "") -> List[str]:
        """All files below a working tree directory, relative to the tree root."""
        directory = self.local_path(path)

        def _walk() -> List[str]:
            found = []
            for root, dirs, files in os.walk(directory):
                dirs[:] = [d for d in dirs if d not in SKIP_DIRS]
                for name in files:
                    full_path = Path(root) / name
                    found.append(full_path.relative_to(self.local_dir).as_posix())
            return sorted(found)

        return await asyncio.to_thread(_walk)

    async def ensure_cache_dir(self, name: str) -> Path:
        """Create (if needed) and return a directory below the cache root."""
        directory = (self.cache_dir / name).resolve()
        if self.cache_dir not in directory.parents:
            raise ValueError(f"Path escapes cache directory: {name}")
        await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)
        return directory

    async def output_file(self, path: Union[str, Path], content: str) -> None:
        """Write a file at an absolute path, creating parent directories."""
        target = Path(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

        await asyncio.to_thread(_write)

    async def remove(self, path: Union[str, Path]) -> None:
        """Delete a file or directory tree; missing paths are ignored."""
        target = Path(path)

        def _remove() -> None:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()

        await asyncio.to_thread(_remove)
