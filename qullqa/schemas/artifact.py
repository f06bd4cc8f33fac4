"""Pydantic schemas for artifacts.

``ArtifactMetadata`` and ``ArtifactVersion`` are the persisted format of
``metadata.json`` and use camelCase field names on the wire. The request
schemas used by the write API keep the usual snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from qullqa.exceptions import ValidationFailureError

DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"

MAX_IDENTIFIER_LENGTH = 100

_IDENTIFIER_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"
)

# Device names that cannot be used as directory names on Windows
_RESERVED_WINDOWS_NAMES = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(1, 10)}
    | {f"LPT{i}" for i in range(1, 10)}
)


def validate_identifier(value: str, kind: str = "identifier") -> str:
    """Check that a workspace or artifact id is safe to use as a directory name."""
    if not isinstance(value, str) or not value:
        raise ValidationFailureError(f"{kind} cannot be empty")
    if len(value) > MAX_IDENTIFIER_LENGTH:
        raise ValidationFailureError(
            f"{kind} must be {MAX_IDENTIFIER_LENGTH} characters or less"
        )
    if not all(c in _IDENTIFIER_CHARS for c in value):
        raise ValidationFailureError(
            f"{kind} can only contain letters, numbers, underscores, and hyphens"
        )
    if value.upper() in _RESERVED_WINDOWS_NAMES:
        raise ValidationFailureError(f"'{value}' is a reserved name on Windows systems")
    return value


def validate_version_number(value: int) -> int:
    """Check that a version number is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationFailureError(f"Version must be a positive integer, got {value!r}")
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArtifactVersion(_CamelModel):
    """One entry of an artifact's version history."""

    version: int = Field(..., ge=1)
    timestamp: int  # ms since epoch
    changelog: str | None = None
    size: int = Field(..., ge=0)


class ArtifactMetadata(_CamelModel):
    """The single metadata record kept for each artifact."""

    id: str
    workspace: str
    description: str | None = None
    content_type: str = DEFAULT_CONTENT_TYPE
    created_at: int
    updated_at: int
    current_version: int = Field(..., ge=1)
    versions: list[ArtifactVersion]

    @model_validator(mode="after")
    def check_history(self) -> "ArtifactMetadata":
        """History must be 1..N in order and end at the current version."""
        if not self.versions:
            raise ValueError("Artifact history cannot be empty")
        for position, entry in enumerate(self.versions, start=1):
            if entry.version != position:
                raise ValueError(
                    f"Version history out of sequence at position {position}: "
                    f"found version {entry.version}"
                )
        if self.current_version != self.versions[-1].version:
            raise ValueError(
                f"currentVersion {self.current_version} does not match "
                f"last recorded version {self.versions[-1].version}"
            )
        return self

    def get_version(self, version: int) -> ArtifactVersion | None:
        """Get the history entry for a version, if recorded."""
        if 1 <= version <= len(self.versions):
            return self.versions[version - 1]
        return None

    def to_json(self) -> str:
        """Serialize in the on-disk format."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


class ArtifactCreate(_CamelModel):
    """Schema for creating an artifact."""

    id: str = Field(..., min_length=1, max_length=MAX_IDENTIFIER_LENGTH)
    content: str
    description: str | None = None
    changelog: str | None = None
    content_type: str | None = Field(default=None, max_length=255)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Validate artifact id."""
        return validate_identifier(v.strip(), "Artifact id")


class ArtifactUpdate(_CamelModel):
    """Schema for adding a new version to an artifact."""

    content: str
    changelog: str | None = None


class WriteResult(BaseModel):
    """Outcome of a create, update or revert."""

    workspace: str
    id: str
    version: int
    locator: str
    url: str


class ArtifactLocator(BaseModel):
    """Locator of an artifact or one of its versions."""

    workspace: str
    id: str
    version: int | None = None
    locator: str
    url: str


class WorkspaceList(BaseModel):
    """Schema for listing workspaces."""

    workspaces: list[str]
    total: int


class ArtifactList(BaseModel):
    """Schema for listing the artifacts of a workspace."""

    workspace: str
    items: list[ArtifactMetadata]
    total: int


class ArtifactVersionList(_CamelModel):
    """Schema for listing an artifact's version history (newest first)."""

    workspace: str
    id: str
    current_version: int
    items: list[ArtifactVersion]
    total: int
