"""Durable storage of the per-artifact metadata record."""

import logging

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from qullqa.exceptions import ArtifactNotFoundError, StorageIOError
from qullqa.schemas.artifact import ArtifactMetadata
from qullqa.services.atomic import atomic_replace
from qullqa.services.paths import PathResolver

logger = logging.getLogger(__name__)


class MetadataStore:
    """Reads and replaces ``metadata.json`` for an artifact.

    The store does no merging: ``write`` replaces the record with whatever
    the caller computed.
    """

    def __init__(self, paths: PathResolver) -> None:
        self.paths = paths

    async def exists(self, workspace: str, artifact_id: str) -> bool:
        """Check whether a metadata record exists."""
        return await aiofiles.os.path.isfile(self.paths.metadata_location(workspace, artifact_id))

    async def read(self, workspace: str, artifact_id: str) -> ArtifactMetadata:
        """Load the metadata record.

        Raises:
            ArtifactNotFoundError: no record exists yet.
            StorageIOError: the record cannot be read or is malformed.
        """
        path = self.paths.metadata_location(workspace, artifact_id)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            raise ArtifactNotFoundError(workspace, artifact_id) from None
        except OSError as e:
            raise StorageIOError(f"Failed to read metadata for {workspace}/{artifact_id}") from e

        try:
            return ArtifactMetadata.model_validate_json(raw)
        except ValidationError as e:
            raise StorageIOError(f"Corrupt metadata for {workspace}/{artifact_id}") from e

    async def write(self, workspace: str, artifact_id: str, metadata: ArtifactMetadata) -> None:
        """Replace the metadata record atomically."""
        path = self.paths.metadata_location(workspace, artifact_id)
        try:
            await atomic_replace(path, metadata.to_json().encode("utf-8"))
        except OSError as e:
            logger.error(f"Failed to write metadata for {workspace}/{artifact_id}: {e}")
            raise StorageIOError(
                f"Failed to write metadata for {workspace}/{artifact_id}"
            ) from e
