"""Error taxonomy for the artifact repository."""


class ArtifactError(Exception):
    """Base class for all repository errors."""


class ArtifactNotFoundError(ArtifactError):
    """Artifact, workspace or specific version does not exist."""

    def __init__(self, workspace: str, artifact_id: str, version: int | None = None):
        self.workspace = workspace
        self.artifact_id = artifact_id
        self.version = version
        if version is None:
            message = f"Artifact {workspace}/{artifact_id} not found"
        else:
            message = f"Version {version} of artifact {workspace}/{artifact_id} not found"
        super().__init__(message)


class VersionConflictError(ArtifactError):
    """A version slot already holds content and must not be overwritten."""

    def __init__(self, workspace: str, artifact_id: str, version: int):
        self.workspace = workspace
        self.artifact_id = artifact_id
        self.version = version
        super().__init__(
            f"Version {version} of artifact {workspace}/{artifact_id} already exists"
        )


class StorageIOError(ArtifactError):
    """Underlying storage failed. The OS error is chained as ``__cause__``."""


class ValidationFailureError(ArtifactError, ValueError):
    """Malformed identifier or version number."""
