"""Lock file updates for .NET project files."""

import logging
import re
from typing import List, Optional

from nuget_lock.context import UpdateContext
from nuget_lock.errors import NuGetLockError
from nuget_lock.models import ArtifactError, UpdateArtifact, UpdateArtifactsResult
from nuget_lock.nuget.lockfiles import LOCK_FILE_NAME, LockFileSnapshotter
from nuget_lock.nuget.restore import run_dotnet_restore

logger = logging.getLogger(__name__)

PROJECT_FILE = re.compile(r"(?:cs|vb|fs)proj$", re.IGNORECASE)


def is_project_file(package_file: str) -> bool:
    return bool(PROJECT_FILE.search(package_file))


async def update_artifacts(
    update: UpdateArtifact,
    context: UpdateContext
) -> Optional[List[UpdateArtifactsResult]]:
    """
    Regenerate the lock files affected by a project file change.

    Args:
        update: Project file, its new content, config and updated dependencies
        context: Filesystem, credentials and executor to use

    Returns:
        None when there is nothing to update, one result per changed lock file,
        or a single artifact error result

    Raises:
        TemporaryError: The update should be retried later
    """
    package_file = update.package_file_name
    logger.debug(f"nuget.update_artifacts({package_file})")

    if not is_project_file(package_file):
        # Restoring non-project files would need a way to pick the project
        # to restore and to attribute lock file changes to it.
        logger.debug(f"Not updating lock file for non project file {package_file}")
        return None

    lock_file_name = context.fs.get_sibling_file_name(package_file, LOCK_FILE_NAME)
    existing_lock_file_content = await context.fs.read_local_file(lock_file_name)
    if not existing_lock_file_content:
        logger.debug(f"No lock file found beneath package file {package_file}")
        return None

    snapshotter = LockFileSnapshotter(context.fs)
    existing_lock_files = await snapshotter.snapshot()

    try:
        if not update.updated_deps and not update.config.is_lock_file_maintenance:
            logger.debug(
                "Not updating lock file because no deps changed and no lock file maintenance"
            )
            return None

        await context.fs.write_local_file(package_file, update.new_package_file_content)

        await run_dotnet_restore(package_file, update.config, context)

        changed_lock_files = await snapshotter.diff(existing_lock_files)
        if not changed_lock_files:
            logger.debug("Lock file is unchanged")
            return None

        logger.debug("Returning updated lock files")
        return [UpdateArtifactsResult(file=file) for file in changed_lock_files]
    except Exception as e:
        if isinstance(e, NuGetLockError) and e.is_transient:
            raise
        logger.debug(f"Failed to generate lock file: {e}", exc_info=True)
        return [
            UpdateArtifactsResult(
                artifact_error=ArtifactError(lock_file=lock_file_name, stderr=str(e))
            )
        ]
