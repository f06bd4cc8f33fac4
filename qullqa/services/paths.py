"""Mapping from artifact identity to storage locations."""

from pathlib import Path

METADATA_FILENAME = "metadata.json"
CONTENT_FILENAME = "index.html"
LATEST_DIRNAME = "latest"
VERSIONS_DIRNAME = "versions"

# Public prefix under which the read path serves artifacts
LOCATOR_PREFIX = "/a"


class PathResolver:
    """Pure translation of (workspace, artifact id, version) to paths.

    Layout::

        <root>/<workspace>/<id>/metadata.json
        <root>/<workspace>/<id>/latest/index.html
        <root>/<workspace>/<id>/versions/v<N>/index.html

    No I/O happens here; identifier validation is the caller's job.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def workspace_root(self, workspace: str) -> Path:
        """Get the directory holding all artifacts of a workspace."""
        return self.root / workspace

    def artifact_root(self, workspace: str, artifact_id: str) -> Path:
        """Get the directory holding one artifact."""
        return self.root / workspace / artifact_id

    def versions_root(self, workspace: str, artifact_id: str) -> Path:
        return self.artifact_root(workspace, artifact_id) / VERSIONS_DIRNAME

    def version_location(self, workspace: str, artifact_id: str, version: int) -> Path:
        """Get the content file of a specific version."""
        return self.versions_root(workspace, artifact_id) / f"v{version}" / CONTENT_FILENAME

    def latest_location(self, workspace: str, artifact_id: str) -> Path:
        """Get the content file of the latest alias."""
        return self.artifact_root(workspace, artifact_id) / LATEST_DIRNAME / CONTENT_FILENAME

    def metadata_location(self, workspace: str, artifact_id: str) -> Path:
        """Get the metadata record of an artifact."""
        return self.artifact_root(workspace, artifact_id) / METADATA_FILENAME


def artifact_locator(workspace: str, artifact_id: str, version: int | None = None) -> str:
    """Build the public read-path locator for an artifact or one of its versions."""
    if version is None:
        return f"{LOCATOR_PREFIX}/{workspace}/{artifact_id}/"
    return f"{LOCATOR_PREFIX}/{workspace}/{artifact_id}/v{version}/"
