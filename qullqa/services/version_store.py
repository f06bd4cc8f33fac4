"""Durable storage of version content and the latest alias."""

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from qullqa.exceptions import ArtifactNotFoundError, StorageIOError, VersionConflictError
from qullqa.services.atomic import atomic_create, atomic_replace
from qullqa.services.paths import PathResolver

logger = logging.getLogger(__name__)


class VersionStore:
    """Immutable per-version blobs plus one mutable latest alias per artifact."""

    def __init__(self, paths: PathResolver) -> None:
        self.paths = paths

    async def version_exists(self, workspace: str, artifact_id: str, version: int) -> bool:
        """Check whether a version slot holds content."""
        return await aiofiles.os.path.isfile(
            self.paths.version_location(workspace, artifact_id, version)
        )

    async def write_version(
        self,
        workspace: str,
        artifact_id: str,
        version: int,
        content: bytes,
    ) -> None:
        """Store the content of a new version.

        Raises:
            VersionConflictError: the slot already holds content. It is never
                overwritten.
        """
        path = self.paths.version_location(workspace, artifact_id, version)
        try:
            await atomic_create(path, content)
        except FileExistsError:
            logger.error(
                f"Refusing to overwrite version {version} of {workspace}/{artifact_id}"
            )
            raise VersionConflictError(workspace, artifact_id, version) from None
        except OSError as e:
            raise StorageIOError(
                f"Failed to write version {version} of {workspace}/{artifact_id}"
            ) from e

    async def write_latest(self, workspace: str, artifact_id: str, content: bytes) -> None:
        """Replace the latest alias. This is the only overwrite the store allows."""
        path = self.paths.latest_location(workspace, artifact_id)
        try:
            await atomic_replace(path, content)
        except OSError as e:
            raise StorageIOError(
                f"Failed to write latest content of {workspace}/{artifact_id}"
            ) from e

    async def read_version(self, workspace: str, artifact_id: str, version: int) -> bytes:
        """Read the content of a specific version."""
        path = self.paths.version_location(workspace, artifact_id, version)
        return await self._read(path, workspace, artifact_id, version)

    async def read_latest(self, workspace: str, artifact_id: str) -> bytes:
        """Read the content of the latest alias."""
        path = self.paths.latest_location(workspace, artifact_id)
        return await self._read(path, workspace, artifact_id)

    async def _read(
        self,
        path: Path,
        workspace: str,
        artifact_id: str,
        version: int | None = None,
    ) -> bytes:
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            raise ArtifactNotFoundError(workspace, artifact_id, version) from None
        except OSError as e:
            raise StorageIOError(f"Failed to read content of {workspace}/{artifact_id}") from e

    async def discard_version(self, workspace: str, artifact_id: str, version: int) -> None:
        """Remove an uncommitted version slot. A missing slot is ignored."""
        path = self.paths.version_location(workspace, artifact_id, version)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageIOError(
                f"Failed to discard version {version} of {workspace}/{artifact_id}"
            ) from e

    async def discard_latest(self, workspace: str, artifact_id: str) -> None:
        """Remove the latest alias. A missing alias is ignored."""
        path = self.paths.latest_location(workspace, artifact_id)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageIOError(
                f"Failed to discard latest content of {workspace}/{artifact_id}"
            ) from e
