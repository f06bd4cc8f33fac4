"""Read path: serve stored artifact content over HTTP."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from qullqa.api.dependencies import get_repository
from qullqa.schemas.artifact import ArtifactList, WorkspaceList
from qullqa.services.repository import ArtifactRepository

router = APIRouter()

# Artifacts are meant to be embedded in iframes by any host
FRAMING_HEADERS = {
    "Content-Security-Policy": "frame-ancestors *",
}


@router.get("/", response_model=WorkspaceList)
async def list_workspaces(repository: ArtifactRepository = Depends(get_repository)):
    """List workspaces."""
    workspaces = await repository.list_workspaces()
    return WorkspaceList(workspaces=workspaces, total=len(workspaces))


@router.get("/{workspace}/", response_model=ArtifactList)
async def list_workspace_artifacts(
    workspace: str,
    repository: ArtifactRepository = Depends(get_repository),
):
    """List artifact summaries for a workspace."""
    items = await repository.list_artifacts(workspace)
    return ArtifactList(workspace=workspace, items=items, total=len(items))


@router.get("/{workspace}/{artifact_id}/")
async def serve_latest(
    workspace: str,
    artifact_id: str,
    repository: ArtifactRepository = Depends(get_repository),
):
    """Serve the content of the artifact's current version."""
    metadata, content = await repository.read_committed(workspace, artifact_id)
    return Response(
        content=content,
        media_type=metadata.content_type,
        headers={
            **FRAMING_HEADERS,
            "Cache-Control": "no-cache",
            "X-Artifact-Version": str(metadata.current_version),
        },
    )


@router.get("/{workspace}/{artifact_id}/v{version}/")
async def serve_version(
    workspace: str,
    artifact_id: str,
    version: int,
    repository: ArtifactRepository = Depends(get_repository),
):
    """Serve the content of a recorded version. Versions never change."""
    metadata, content = await repository.read_committed(workspace, artifact_id, version)
    return Response(
        content=content,
        media_type=metadata.content_type,
        headers={
            **FRAMING_HEADERS,
            "Cache-Control": "public, max-age=31536000, immutable",
            "X-Artifact-Version": str(version),
        },
    )
