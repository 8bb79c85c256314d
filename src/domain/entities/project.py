"""Project domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from uuid import UUID, uuid4


class ProjectRole(IntEnum):
    """Project-level roles.

    Permission checks compare against an explicit set of allowed roles,
    not against the ordering.
    """

    VIEWER = 10
    EDITOR = 20
    ADMIN = 30
    OWNER = 40


ALL_PROJECT_ROLES = frozenset(ProjectRole)
PROJECT_ADMIN_ROLES = frozenset({ProjectRole.OWNER, ProjectRole.ADMIN})
PROJECT_OWNER_ROLES = frozenset({ProjectRole.OWNER})

# Owner is never assigned directly; it only moves through transfer_ownership.
ASSIGNABLE_PROJECT_ROLES = frozenset({ProjectRole.ADMIN, ProjectRole.EDITOR, ProjectRole.VIEWER})


@dataclass
class Project:
    """Domain entity for a Project (a node in a workspace's project forest)."""

    workspace_id: UUID
    name: str
    created_by: UUID
    id: UUID = field(default_factory=uuid4)
    parent_id: UUID | None = None
    color: str | None = None
    is_archived: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self, at: datetime) -> None:
        """Stamp the soft-delete marker."""
        self.deleted_at = at
        self.updated_at = at

    def restore(self) -> None:
        """Clear the soft-delete marker."""
        self.deleted_at = None
        self.updated_at = datetime.utcnow()


@dataclass
class ProjectMember:
    """Domain entity for a project membership.

    Profile fields are only populated by the member-listing query.
    """

    project_id: UUID
    user_id: UUID
    role: ProjectRole = ProjectRole.VIEWER
    joined_at: datetime = field(default_factory=datetime.utcnow)
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
