"""Versioned artifact repository.

The repository is the only component that sequences versions. Every write
follows the same order:

1. the new version's content is published at its slot (never overwritten),
2. the latest alias is replaced,
3. the metadata record advancing ``currentVersion`` is written.

A storage failure after step 1 is rolled back under the artifact lock: the
new slot is removed and the latest alias is restored, so the next write can
reuse the version number. A process crash between steps leaves at worst an
unreferenced content blob, never metadata pointing at missing content. Writes
to the same artifact are serialised by a per-artifact lock.
"""

import asyncio
import logging
import time
import weakref
from dataclasses import dataclass
from pathlib import Path

import aiofiles.os

from qullqa.exceptions import ArtifactError, ArtifactNotFoundError, StorageIOError
from qullqa.schemas.artifact import (
    DEFAULT_CONTENT_TYPE,
    ArtifactMetadata,
    ArtifactVersion,
    validate_identifier,
    validate_version_number,
)
from qullqa.services.metadata_store import MetadataStore
from qullqa.services.paths import PathResolver, artifact_locator
from qullqa.services.version_store import VersionStore

logger = logging.getLogger(__name__)

INITIAL_CHANGELOG = "Initial version"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_bytes(content: str | bytes) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


@dataclass(frozen=True)
class WriteOutcome:
    """Locator and resulting version number of a successful write."""

    locator: str
    version: int


class ArtifactRepository:
    """Create, update, read, list and revert versioned artifacts."""

    def __init__(self, root: Path) -> None:
        self.paths = PathResolver(root)
        self.metadata = MetadataStore(self.paths)
        self.versions = VersionStore(self.paths)
        # Entries disappear once no writer holds or waits on the lock
        self._artifact_locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def root(self) -> Path:
        return self.paths.root

    def _get_artifact_lock(self, workspace: str, artifact_id: str) -> asyncio.Lock:
        """Get or create the write lock for a specific artifact."""
        key = (workspace, artifact_id)
        lock = self._artifact_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._artifact_locks[key] = lock
        return lock

    @staticmethod
    def _validate(workspace: str, artifact_id: str) -> None:
        validate_identifier(workspace, "Workspace")
        validate_identifier(artifact_id, "Artifact id")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self,
        workspace: str,
        artifact_id: str,
        content: str | bytes,
        description: str | None = None,
        changelog: str | None = None,
        content_type: str | None = None,
    ) -> WriteOutcome:
        """Create an artifact at version 1.

        If the artifact already exists this behaves exactly like ``update``,
        so re-running a creation is safe. ``description`` and ``content_type``
        are only recorded on the first version.
        """
        self._validate(workspace, artifact_id)
        data = _to_bytes(content)

        async with self._get_artifact_lock(workspace, artifact_id):
            if await self.metadata.exists(workspace, artifact_id):
                logger.info(
                    f"Artifact {workspace}/{artifact_id} already exists, adding a new version"
                )
                return await self._append_version(workspace, artifact_id, data, changelog)

            await self.versions.write_version(workspace, artifact_id, 1, data)
            try:
                await self.versions.write_latest(workspace, artifact_id, data)

                now = _now_ms()
                metadata = ArtifactMetadata(
                    id=artifact_id,
                    workspace=workspace,
                    description=description,
                    content_type=content_type or DEFAULT_CONTENT_TYPE,
                    created_at=now,
                    updated_at=now,
                    current_version=1,
                    versions=[
                        ArtifactVersion(
                            version=1,
                            timestamp=now,
                            changelog=changelog or INITIAL_CHANGELOG,
                            size=len(data),
                        )
                    ],
                )
                await self.metadata.write(workspace, artifact_id, metadata)
            except StorageIOError:
                await self._roll_back(workspace, artifact_id, 1, previous_version=None)
                raise

        logger.info(f"Created artifact {workspace}/{artifact_id} ({len(data)} bytes)")
        return WriteOutcome(locator=artifact_locator(workspace, artifact_id), version=1)

    async def update(
        self,
        workspace: str,
        artifact_id: str,
        content: str | bytes,
        changelog: str | None = None,
    ) -> WriteOutcome:
        """Append a new version to an existing artifact.

        Raises:
            ArtifactNotFoundError: the artifact does not exist. An update
                never creates one.
        """
        self._validate(workspace, artifact_id)
        data = _to_bytes(content)

        async with self._get_artifact_lock(workspace, artifact_id):
            return await self._append_version(workspace, artifact_id, data, changelog)

    async def revert(
        self,
        workspace: str,
        artifact_id: str,
        target_version: int,
    ) -> WriteOutcome:
        """Append a new version whose content is copied from ``target_version``.

        History is never removed or renumbered.
        """
        self._validate(workspace, artifact_id)
        validate_version_number(target_version)

        async with self._get_artifact_lock(workspace, artifact_id):
            metadata = await self.metadata.read(workspace, artifact_id)
            if metadata.get_version(target_version) is None:
                raise ArtifactNotFoundError(workspace, artifact_id, target_version)

            data = await self.versions.read_version(workspace, artifact_id, target_version)
            outcome = await self._append_version(
                workspace,
                artifact_id,
                data,
                f"Reverted to version {target_version}",
            )

        logger.info(
            f"Reverted {workspace}/{artifact_id} to version {target_version} "
            f"as version {outcome.version}"
        )
        return outcome

    async def _append_version(
        self,
        workspace: str,
        artifact_id: str,
        data: bytes,
        changelog: str | None,
    ) -> WriteOutcome:
        """Write version N+1. Must be called with the artifact lock held."""
        metadata = await self.metadata.read(workspace, artifact_id)
        next_version = metadata.current_version + 1

        await self.versions.write_version(workspace, artifact_id, next_version, data)
        try:
            await self.versions.write_latest(workspace, artifact_id, data)

            now = _now_ms()
            entry = ArtifactVersion(
                version=next_version,
                timestamp=now,
                changelog=changelog or f"Version {next_version}",
                size=len(data),
            )
            updated = metadata.model_copy(
                update={
                    "current_version": next_version,
                    "updated_at": now,
                    "versions": [*metadata.versions, entry],
                }
            )
            await self.metadata.write(workspace, artifact_id, updated)
        except StorageIOError:
            await self._roll_back(
                workspace, artifact_id, next_version, previous_version=metadata.current_version
            )
            raise

        logger.info(
            f"Stored version {next_version} of {workspace}/{artifact_id} ({len(data)} bytes)"
        )
        return WriteOutcome(locator=artifact_locator(workspace, artifact_id), version=next_version)

    async def _roll_back(
        self,
        workspace: str,
        artifact_id: str,
        version: int,
        previous_version: int | None,
    ) -> None:
        """Undo an uncommitted version. Must be called with the artifact lock held.

        The slot is removed and the latest alias goes back to
        ``previous_version``, or is removed when there is none. Failures here
        are logged; the caller re-raises the original error.
        """
        try:
            await self.versions.discard_version(workspace, artifact_id, version)
            if previous_version is None:
                await self.versions.discard_latest(workspace, artifact_id)
            else:
                previous = await self.versions.read_version(
                    workspace, artifact_id, previous_version
                )
                await self.versions.write_latest(workspace, artifact_id, previous)
        except ArtifactError as e:
            logger.error(
                f"Could not roll back version {version} of {workspace}/{artifact_id}: {e}"
            )
        else:
            logger.warning(
                f"Rolled back uncommitted version {version} of {workspace}/{artifact_id}"
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read(
        self,
        workspace: str,
        artifact_id: str,
        version: int | None = None,
    ) -> bytes:
        """Read the latest content, or the content of a specific version."""
        self._validate(workspace, artifact_id)
        if version is None:
            return await self.versions.read_latest(workspace, artifact_id)
        validate_version_number(version)
        metadata = await self.metadata.read(workspace, artifact_id)
        if metadata.get_version(version) is None:
            raise ArtifactNotFoundError(workspace, artifact_id, version)
        return await self.versions.read_version(workspace, artifact_id, version)

    async def read_committed(
        self,
        workspace: str,
        artifact_id: str,
        version: int | None = None,
    ) -> tuple[ArtifactMetadata, bytes]:
        """Read metadata together with the content of a recorded version.

        Without ``version`` the current version is read from its immutable
        slot rather than the latest alias, so the content always matches
        ``metadata.current_version`` even while a write is in progress.
        """
        self._validate(workspace, artifact_id)
        metadata = await self.metadata.read(workspace, artifact_id)
        if version is None:
            version = metadata.current_version
        validate_version_number(version)
        if metadata.get_version(version) is None:
            raise ArtifactNotFoundError(workspace, artifact_id, version)
        content = await self.versions.read_version(workspace, artifact_id, version)
        return metadata, content

    async def get_metadata(self, workspace: str, artifact_id: str) -> ArtifactMetadata:
        """Load an artifact's metadata record."""
        self._validate(workspace, artifact_id)
        return await self.metadata.read(workspace, artifact_id)

    async def get_locator(
        self,
        workspace: str,
        artifact_id: str,
        version: int | None = None,
    ) -> str:
        """Get the read-path locator for an artifact or one of its versions.

        Raises:
            ArtifactNotFoundError: the artifact, or the requested version,
                is not recorded in the metadata.
        """
        metadata = await self.get_metadata(workspace, artifact_id)
        if version is not None:
            validate_version_number(version)
            if metadata.get_version(version) is None:
                raise ArtifactNotFoundError(workspace, artifact_id, version)
        return artifact_locator(workspace, artifact_id, version)

    async def list_workspaces(self) -> list[str]:
        """List workspaces that hold at least one artifact, sorted by name."""
        if not await aiofiles.os.path.isdir(self.root):
            return []

        workspaces = []
        for name in sorted(await aiofiles.os.listdir(self.root)):
            workspace_path = self.root / name
            if not await aiofiles.os.path.isdir(workspace_path):
                continue
            for artifact_id in await aiofiles.os.listdir(workspace_path):
                if await self.metadata.exists(name, artifact_id):
                    workspaces.append(name)
                    break
        return workspaces

    async def list_artifacts(self, workspace: str) -> list[ArtifactMetadata]:
        """List a workspace's artifacts, most recently updated first.

        Artifacts whose metadata is missing or unreadable are skipped.
        """
        validate_identifier(workspace, "Workspace")
        workspace_path = self.paths.workspace_root(workspace)
        if not await aiofiles.os.path.isdir(workspace_path):
            return []

        artifacts = []
        for artifact_id in await aiofiles.os.listdir(workspace_path):
            if not await aiofiles.os.path.isdir(workspace_path / artifact_id):
                continue
            try:
                artifacts.append(await self.metadata.read(workspace, artifact_id))
            except ArtifactError as e:
                logger.debug(f"Skipping {workspace}/{artifact_id} in listing: {e}")

        artifacts.sort(key=lambda m: m.updated_at, reverse=True)
        return artifacts
