"""Workspace repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.workspace import Workspace, WorkspaceMember, WorkspaceRole


class IWorkspaceRepository(Protocol):
    """Repository interface for Workspace entities.

    ``get``/``get_by_slug`` return soft-deleted workspaces as well; callers
    decide whether ``deleted_at`` hides them.
    """

    async def get(self, id: UUID) -> Workspace | None:
        """Get a workspace by ID."""
        ...

    async def get_by_slug(self, slug: str) -> Workspace | None:
        """Get a workspace by slug."""
        ...

    async def slug_exists(self, slug: str) -> bool:
        """Check whether any workspace (deleted or not) uses the slug."""
        ...

    async def get_all_for_user(self, user_id: UUID) -> list[tuple[Workspace, WorkspaceRole]]:
        """Get all active workspaces a user is a member of, with the user's role."""
        ...

    async def create(self, workspace: Workspace) -> Workspace:
        """Create a new workspace."""
        ...

    async def update(self, workspace: Workspace) -> Workspace:
        """Update an existing workspace (including the soft-delete marker)."""
        ...

    async def get_member(self, workspace_id: UUID, user_id: UUID) -> WorkspaceMember | None:
        """Get a workspace member by workspace and user IDs."""
        ...

    async def get_member_by_email(self, workspace_id: UUID, email: str) -> WorkspaceMember | None:
        """Get a workspace member by the email on their profile."""
        ...

    async def get_members(self, workspace_id: UUID) -> list[WorkspaceMember]:
        """Get all members of a workspace with profile details."""
        ...

    async def add_member(self, member: WorkspaceMember) -> WorkspaceMember:
        """Add a member to a workspace."""
        ...

    async def update_member_role(
        self, workspace_id: UUID, user_id: UUID, role: WorkspaceRole
    ) -> WorkspaceMember:
        """Update a member's role in a workspace."""
        ...

    async def remove_member(self, workspace_id: UUID, user_id: UUID) -> bool:
        """Remove a member from a workspace."""
        ...
