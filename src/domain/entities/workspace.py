"""Workspace domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from uuid import UUID, uuid4


class WorkspaceRole(IntEnum):
    """Workspace role hierarchy. Higher value = more permissions.

    Use >= comparison for permission checks:
        user_role >= WorkspaceRole.ADMIN  # True if Admin or Owner
    """

    MEMBER = 20
    ADMIN = 30
    OWNER = 40


# Workspace roles that administer every project in the workspace.
WORKSPACE_ADMIN_ROLES = frozenset({WorkspaceRole.OWNER, WorkspaceRole.ADMIN})

# Roles that can be granted by invitation or role update (Owner only moves
# through transfer_ownership).
ASSIGNABLE_WORKSPACE_ROLES = frozenset({WorkspaceRole.ADMIN, WorkspaceRole.MEMBER})


def has_permission(user_role: WorkspaceRole, required_role: WorkspaceRole) -> bool:
    """Check if a user role meets the required permission level."""
    return user_role >= required_role


@dataclass
class Workspace:
    """Domain entity for a Workspace."""

    name: str
    owner_id: UUID
    id: UUID = field(default_factory=uuid4)
    slug: str = ""
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


@dataclass
class WorkspaceMember:
    """Domain entity for a workspace membership.

    ``email``/``display_name``/``avatar_url`` are only populated by the
    member-listing query, which joins profiles.
    """

    workspace_id: UUID
    user_id: UUID
    role: WorkspaceRole = WorkspaceRole.MEMBER
    joined_at: datetime = field(default_factory=datetime.utcnow)
    invited_by: UUID | None = None
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
