"""API routes for creating, updating and inspecting artifacts."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from qullqa.api.dependencies import get_app_settings, get_repository
from qullqa.config import Settings
from qullqa.schemas.artifact import (
    ArtifactCreate,
    ArtifactList,
    ArtifactLocator,
    ArtifactMetadata,
    ArtifactUpdate,
    ArtifactVersionList,
    WorkspaceList,
    WriteResult,
)
from qullqa.services.repository import ArtifactRepository, WriteOutcome

logger = logging.getLogger(__name__)
router = APIRouter()


def _check_content_size(content: str, settings: Settings) -> None:
    size = len(content.encode("utf-8"))
    if size > settings.max_content_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=(
                f"Content too large: {size} bytes "
                f"(max {settings.max_content_size_mb} MB)"
            ),
        )


def _write_result(
    workspace: str,
    artifact_id: str,
    outcome: WriteOutcome,
    settings: Settings,
) -> WriteResult:
    return WriteResult(
        workspace=workspace,
        id=artifact_id,
        version=outcome.version,
        locator=outcome.locator,
        url=f"{settings.public_base_url}{outcome.locator}",
    )


@router.get("/workspaces", response_model=WorkspaceList)
async def list_workspaces(repository: ArtifactRepository = Depends(get_repository)):
    """List workspaces that contain artifacts."""
    workspaces = await repository.list_workspaces()
    return WorkspaceList(workspaces=workspaces, total=len(workspaces))


@router.get("/workspaces/{workspace}/artifacts", response_model=ArtifactList)
async def list_artifacts(
    workspace: str,
    repository: ArtifactRepository = Depends(get_repository),
):
    """List a workspace's artifacts, most recently updated first."""
    items = await repository.list_artifacts(workspace)
    return ArtifactList(workspace=workspace, items=items, total=len(items))


@router.post(
    "/workspaces/{workspace}/artifacts",
    response_model=WriteResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_artifact(
    workspace: str,
    data: ArtifactCreate,
    repository: ArtifactRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    """Create an artifact, or add a version if it already exists."""
    _check_content_size(data.content, settings)

    outcome = await repository.create(
        workspace,
        data.id,
        data.content,
        description=data.description,
        changelog=data.changelog,
        content_type=data.content_type,
    )
    return _write_result(workspace, data.id, outcome, settings)


@router.get("/workspaces/{workspace}/artifacts/{artifact_id}", response_model=ArtifactMetadata)
async def get_artifact(
    workspace: str,
    artifact_id: str,
    repository: ArtifactRepository = Depends(get_repository),
):
    """Get an artifact's metadata and version history."""
    return await repository.get_metadata(workspace, artifact_id)


@router.put("/workspaces/{workspace}/artifacts/{artifact_id}", response_model=WriteResult)
async def update_artifact(
    workspace: str,
    artifact_id: str,
    data: ArtifactUpdate,
    repository: ArtifactRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    """Add a new version to an existing artifact."""
    _check_content_size(data.content, settings)

    outcome = await repository.update(workspace, artifact_id, data.content, data.changelog)
    return _write_result(workspace, artifact_id, outcome, settings)


@router.get(
    "/workspaces/{workspace}/artifacts/{artifact_id}/versions",
    response_model=ArtifactVersionList,
)
async def list_artifact_versions(
    workspace: str,
    artifact_id: str,
    repository: ArtifactRepository = Depends(get_repository),
):
    """List all versions of an artifact, newest first."""
    metadata = await repository.get_metadata(workspace, artifact_id)
    items = list(reversed(metadata.versions))
    return ArtifactVersionList(
        workspace=workspace,
        id=artifact_id,
        current_version=metadata.current_version,
        items=items,
        total=len(items),
    )


@router.get(
    "/workspaces/{workspace}/artifacts/{artifact_id}/url",
    response_model=ArtifactLocator,
)
async def get_artifact_url(
    workspace: str,
    artifact_id: str,
    version: int | None = None,
    repository: ArtifactRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    """Get the URL of the latest content or of a specific version."""
    locator = await repository.get_locator(workspace, artifact_id, version)
    return ArtifactLocator(
        workspace=workspace,
        id=artifact_id,
        version=version,
        locator=locator,
        url=f"{settings.public_base_url}{locator}",
    )


@router.post(
    "/workspaces/{workspace}/artifacts/{artifact_id}/revert/{version}",
    response_model=WriteResult,
)
async def revert_artifact(
    workspace: str,
    artifact_id: str,
    version: int,
    repository: ArtifactRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    """Add a new version whose content is copied from an earlier one."""
    outcome = await repository.revert(workspace, artifact_id, version)
    return _write_result(workspace, artifact_id, outcome, settings)
