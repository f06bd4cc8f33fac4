"""Services package."""

from qullqa.services.metadata_store import MetadataStore
from qullqa.services.paths import PathResolver
from qullqa.services.repository import ArtifactRepository
from qullqa.services.version_store import VersionStore

__all__ = [
    "ArtifactRepository",
    "MetadataStore",
    "PathResolver",
    "VersionStore",
]
