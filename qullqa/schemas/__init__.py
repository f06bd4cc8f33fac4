"""Pydantic schemas package."""

from qullqa.schemas.artifact import (
    ArtifactCreate,
    ArtifactList,
    ArtifactLocator,
    ArtifactMetadata,
    ArtifactUpdate,
    ArtifactVersion,
    ArtifactVersionList,
    WorkspaceList,
    WriteResult,
)

__all__ = [
    "ArtifactCreate",
    "ArtifactList",
    "ArtifactLocator",
    "ArtifactMetadata",
    "ArtifactUpdate",
    "ArtifactVersion",
    "ArtifactVersionList",
    "WorkspaceList",
    "WriteResult",
]
