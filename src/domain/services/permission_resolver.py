"""Two-tier permission resolution for projects.

A workspace OWNER or ADMIN administers every project in the workspace and
is never checked against project roles. Everyone else must hold a
ProjectMember row whose role is in the allowed set.
"""

from collections.abc import Collection
from uuid import UUID

from core.exceptions import (
    InsufficientPermissionsError,
    NotAMemberError,
    NotAProjectMemberError,
    ProjectNotFoundError,
    WorkspaceNotFoundError,
)
from domain.entities.project import PROJECT_ADMIN_ROLES, Project, ProjectRole
from domain.entities.workspace import WORKSPACE_ADMIN_ROLES
from domain.repositories.unit_of_work import IUnitOfWork


class PermissionResolver:
    """Resolves whether a user may act on a project."""

    async def check_strict_permission(
        self,
        uow: IUnitOfWork,
        user_id: UUID,
        project_id: UUID,
        allowed_roles: Collection[ProjectRole],
        include_deleted: bool = False,
    ) -> Project:
        """Verify access and return the loaded project.

        Raises:
            ProjectNotFoundError: Project missing (or soft-deleted, unless
                ``include_deleted``).
            WorkspaceNotFoundError: The project's workspace is soft-deleted.
            NotAMemberError: Caller is not in the project's workspace.
            NotAProjectMemberError: Caller has no row on the project.
            InsufficientPermissionsError: Caller's project role is not allowed.
        """
        project = await self.load_active_project(uow, project_id, include_deleted)

        ws_member = await uow.workspaces.get_member(project.workspace_id, user_id)
        if not ws_member:
            raise NotAMemberError(str(project.workspace_id))

        if ws_member.role in WORKSPACE_ADMIN_ROLES:
            return project

        member = await uow.project_members.get(project_id, user_id)
        if not member:
            raise NotAProjectMemberError(str(project_id))

        if member.role not in allowed_roles:
            required = min(allowed_roles, default=ProjectRole.OWNER)
            raise InsufficientPermissionsError(required.name.lower())

        return project

    async def load_active_project(
        self, uow: IUnitOfWork, project_id: UUID, include_deleted: bool = False
    ) -> Project:
        """Load a project whose workspace is still live."""
        project = await uow.projects.get(project_id)
        if not project or (project.is_deleted and not include_deleted):
            raise ProjectNotFoundError(str(project_id))

        workspace = await uow.workspaces.get(project.workspace_id)
        if not workspace or workspace.is_deleted:
            raise WorkspaceNotFoundError(str(project.workspace_id))

        return project

    async def validate_project_admin_access(
        self, uow: IUnitOfWork, user_id: UUID, project_id: UUID
    ) -> Project:
        """Shorthand for {OWNER, ADMIN}."""
        return await self.check_strict_permission(uow, user_id, project_id, PROJECT_ADMIN_ROLES)
