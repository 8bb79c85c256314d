"""Project repository protocols.

Hierarchy is kept in a closure table of (ancestor_id, descendant_id, depth)
rows. Every project has a depth-0 self row; a child gets a copy of each of
its parent's ancestor rows with depth + 1. Rows are never pruned; soft
deletion is tracked on the project itself.
"""

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from domain.entities.project import Project, ProjectMember, ProjectRole


class IProjectRepository(Protocol):
    """Repository interface for Project entities and their closure table."""

    async def get(self, id: UUID) -> Project | None:
        """Get a project by ID, soft-deleted or not."""
        ...

    async def exists_in_workspace(self, id: UUID, workspace_id: UUID) -> bool:
        """Check that an active project with this ID lives in the workspace."""
        ...

    async def get_many(self, ids: Sequence[UUID]) -> list[Project]:
        """Bulk fetch projects by ID."""
        ...

    async def get_all_for_user(
        self, workspace_id: UUID, user_id: UUID
    ) -> list[tuple[Project, ProjectRole | None]]:
        """Active projects in a workspace on which the user holds membership."""
        ...

    async def create(self, project: Project) -> Project:
        """Create a new project row (hierarchy rows are inserted separately)."""
        ...

    async def update(self, project: Project) -> Project:
        """Update an existing project."""
        ...

    async def save_all(self, projects: Sequence[Project]) -> None:
        """Bulk save mutable fields of the given projects."""
        ...

    # --- Closure table ---

    async def insert_self_reference(self, project_id: UUID) -> None:
        """Insert the (project, project, 0) row."""
        ...

    async def insert_hierarchy(self, parent_id: UUID, child_id: UUID) -> None:
        """Link child under every ancestor of parent (parent included)."""
        ...

    async def find_descendant_ids_including_self(self, project_id: UUID) -> list[UUID]:
        """All descendants at depth >= 0."""
        ...

    async def find_descendant_ids(self, project_id: UUID) -> list[UUID]:
        """All descendants at depth > 0."""
        ...

    async def find_ancestor_ids(self, project_id: UUID) -> list[UUID]:
        """All ancestors at depth > 0, nearest first."""
        ...


class IProjectMemberRepository(Protocol):
    """Repository interface for ProjectMember entities."""

    async def get(self, project_id: UUID, user_id: UUID) -> ProjectMember | None:
        """Get a membership by composite key."""
        ...

    async def get_all(self, project_id: UUID) -> list[ProjectMember]:
        """Get all memberships of a project."""
        ...

    async def get_all_with_details(self, project_id: UUID) -> list[ProjectMember]:
        """Get all memberships of a project with profile details."""
        ...

    async def add(self, member: ProjectMember) -> ProjectMember:
        """Add a single membership."""
        ...

    async def add_many(self, members: Sequence[ProjectMember]) -> None:
        """Add several memberships at once."""
        ...

    async def update_role(self, project_id: UUID, user_id: UUID, role: ProjectRole) -> ProjectMember:
        """Change the role of an existing membership."""
        ...

    async def remove(self, project_id: UUID, user_id: UUID) -> bool:
        """Remove a single membership."""
        ...

    async def remove_user_from_projects(self, user_id: UUID, project_ids: Sequence[UUID]) -> int:
        """Bulk delete a user's memberships across projects. Returns rows removed."""
        ...
