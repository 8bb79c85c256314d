"""Project service layer: hierarchy, cascades and project membership."""

from collections.abc import Callable
from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog

from core.exceptions import (
    AlreadyAProjectMemberError,
    InvalidParentProjectError,
    InvalidRoleError,
    NewOwnerNotAMemberError,
    NotAMemberError,
    NotAProjectMemberError,
    OwnerProtectedError,
    OwnershipInvariantError,
    ProjectMemberNotFoundError,
    TargetNotInWorkspaceError,
    WorkspaceNotFoundError,
)
from domain.entities.project import (
    ALL_PROJECT_ROLES,
    ASSIGNABLE_PROJECT_ROLES,
    PROJECT_OWNER_ROLES,
    Project,
    ProjectMember,
    ProjectRole,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.permission_resolver import PermissionResolver

logger = structlog.get_logger()


class ProjectService:
    """Service layer for Project business logic.

    Every public method runs inside one unit of work and commits once at
    the end, so cascades either apply to the whole subtree or not at all.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        permissions: Optional[PermissionResolver] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._permissions = permissions or PermissionResolver()

    async def create_project(
        self,
        user_id: UUID,
        workspace_id: UUID,
        name: str,
        color: str | None = None,
        parent_id: UUID | None = None,
    ) -> Project:
        """Create a project, optionally nested under a parent.

        The creator becomes OWNER. A child starts with a copy of the parent's
        memberships (the creator excluded); later parent changes are not
        propagated.
        """
        async with self._uow_factory() as uow:
            if not await uow.workspaces.get_member(workspace_id, user_id):
                raise NotAMemberError(str(workspace_id))

            workspace = await uow.workspaces.get(workspace_id)
            if not workspace or workspace.is_deleted:
                raise WorkspaceNotFoundError(str(workspace_id))

            if parent_id is not None:
                if not await uow.projects.exists_in_workspace(parent_id, workspace_id):
                    raise InvalidParentProjectError(str(parent_id))
                # Checked on the row itself: workspace admins get no bypass here.
                if not await uow.project_members.get(parent_id, user_id):
                    raise NotAProjectMemberError(
                        str(parent_id), "You must be a member of the parent project"
                    )

            project = await uow.projects.create(
                Project(
                    workspace_id=workspace_id,
                    parent_id=parent_id,
                    name=name,
                    color=color,
                    created_by=user_id,
                )
            )

            await uow.projects.insert_self_reference(project.id)
            if parent_id is not None:
                await uow.projects.insert_hierarchy(parent_id, project.id)

            await uow.project_members.add(
                ProjectMember(project_id=project.id, user_id=user_id, role=ProjectRole.OWNER)
            )

            inherited: list[ProjectMember] = []
            if parent_id is not None:
                parent_members = await uow.project_members.get_all(parent_id)
                inherited = [
                    ProjectMember(project_id=project.id, user_id=m.user_id, role=m.role)
                    for m in parent_members
                    if m.user_id != user_id
                ]
                await uow.project_members.add_many(inherited)

            await uow.commit()

            logger.info(
                "project_created",
                project_id=str(project.id),
                workspace_id=str(workspace_id),
                parent_id=str(parent_id) if parent_id else None,
                inherited_members=len(inherited),
            )
            return project

    async def get_projects(
        self, user_id: UUID, workspace_id: UUID
    ) -> list[tuple[Project, ProjectRole | None]]:
        """Active projects the user belongs to, with the user's role on each."""
        async with self._uow_factory() as uow:
            if not await uow.workspaces.get_member(workspace_id, user_id):
                raise NotAMemberError(str(workspace_id))

            workspace = await uow.workspaces.get(workspace_id)
            if not workspace or workspace.is_deleted:
                raise WorkspaceNotFoundError(str(workspace_id))

            return await uow.projects.get_all_for_user(workspace_id, user_id)  # type: ignore[no-any-return]

    async def get_project(self, user_id: UUID, project_id: UUID) -> Project:
        """Get a single project. Any project role (or workspace admin)."""
        async with self._uow_factory() as uow:
            return await self._permissions.check_strict_permission(
                uow, user_id, project_id, ALL_PROJECT_ROLES
            )

    async def update_project(
        self,
        user_id: UUID,
        project_id: UUID,
        name: str | None = None,
        color: str | None = None,
    ) -> Project:
        """Partial update. Blank names and missing colors are ignored."""
        async with self._uow_factory() as uow:
            project = await self._permissions.validate_project_admin_access(uow, user_id, project_id)

            if name is not None and name.strip():
                project.name = name
            if color is not None:
                project.color = color

            project.updated_at = datetime.utcnow()
            updated = await uow.projects.update(project)
            await uow.commit()
            return updated

    async def delete_project(self, user_id: UUID, project_id: UUID) -> None:
        """Soft-delete the project and every descendant with one timestamp."""
        async with self._uow_factory() as uow:
            await self._permissions.check_strict_permission(
                uow, user_id, project_id, PROJECT_OWNER_ROLES
            )

            subtree_ids = await uow.projects.find_descendant_ids_including_self(project_id)
            subtree = await uow.projects.get_many(subtree_ids)

            now = datetime.utcnow()
            for project in subtree:
                project.soft_delete(now)
            await uow.projects.save_all(subtree)

            await uow.commit()

            logger.info(
                "project_subtree_deleted",
                project_id=str(project_id),
                deleted_count=len(subtree),
            )

    async def restore_project(self, user_id: UUID, project_id: UUID) -> None:
        """Clear the soft-delete marker on the project and every descendant."""
        async with self._uow_factory() as uow:
            await self._permissions.check_strict_permission(
                uow, user_id, project_id, PROJECT_OWNER_ROLES, include_deleted=True
            )

            subtree_ids = await uow.projects.find_descendant_ids_including_self(project_id)
            subtree = await uow.projects.get_many(subtree_ids)

            for project in subtree:
                project.restore()
            await uow.projects.save_all(subtree)

            await uow.commit()

            logger.info(
                "project_subtree_restored",
                project_id=str(project_id),
                restored_count=len(subtree),
            )

    async def get_project_members(self, user_id: UUID, project_id: UUID) -> list[ProjectMember]:
        """List members with profile details.

        Requires a row on the project itself; workspace admins get no bypass.
        """
        async with self._uow_factory() as uow:
            await self._permissions.load_active_project(uow, project_id)
            if not await uow.project_members.get(project_id, user_id):
                raise NotAProjectMemberError(str(project_id))
            return await uow.project_members.get_all_with_details(project_id)  # type: ignore[no-any-return]

    async def add_member(
        self,
        requester_id: UUID,
        project_id: UUID,
        new_user_id: UUID,
        role: ProjectRole,
    ) -> ProjectMember:
        """Add a workspace member to the project. Requires project admin access."""
        async with self._uow_factory() as uow:
            project = await self._permissions.validate_project_admin_access(
                uow, requester_id, project_id
            )

            self._require_assignable(role)

            if not await uow.workspaces.get_member(project.workspace_id, new_user_id):
                raise TargetNotInWorkspaceError(str(new_user_id))

            if await uow.project_members.get(project_id, new_user_id):
                raise AlreadyAProjectMemberError(str(new_user_id))

            added = await uow.project_members.add(
                ProjectMember(project_id=project_id, user_id=new_user_id, role=role)
            )
            await uow.commit()

            logger.info(
                "project_member_added",
                project_id=str(project_id),
                user_id=str(new_user_id),
                role=role.name.lower(),
            )
            return added

    async def remove_member(
        self,
        requester_id: UUID,
        project_id: UUID,
        target_user_id: UUID,
    ) -> int:
        """Remove a member from the project and from every descendant project.

        Members may remove themselves; removing anyone else requires project
        admin access. The OWNER can never be removed, not even by themselves.

        Returns:
            Number of descendant memberships removed alongside the direct one.
        """
        async with self._uow_factory() as uow:
            await self._permissions.load_active_project(uow, project_id)

            target = await uow.project_members.get(project_id, target_user_id)
            if not target:
                raise ProjectMemberNotFoundError(str(target_user_id))

            if requester_id != target_user_id:
                await self._permissions.validate_project_admin_access(
                    uow, requester_id, project_id
                )

            if target.role == ProjectRole.OWNER:
                raise OwnerProtectedError("Cannot remove the project owner. Transfer ownership first.")

            await uow.project_members.remove(project_id, target_user_id)

            descendant_ids = await uow.projects.find_descendant_ids(project_id)
            cascaded = await uow.project_members.remove_user_from_projects(
                target_user_id, descendant_ids
            )

            await uow.commit()

            logger.info(
                "project_member_removed",
                project_id=str(project_id),
                user_id=str(target_user_id),
                cascaded_count=cascaded,
            )
            return cascaded  # type: ignore[no-any-return]

    async def update_member_role(
        self,
        requester_id: UUID,
        project_id: UUID,
        target_user_id: UUID,
        new_role: ProjectRole,
    ) -> ProjectMember:
        """Change a member's role. OWNER is neither assignable nor changeable here."""
        async with self._uow_factory() as uow:
            await self._permissions.validate_project_admin_access(uow, requester_id, project_id)

            self._require_assignable(new_role)

            target = await uow.project_members.get(project_id, target_user_id)
            if not target:
                raise ProjectMemberNotFoundError(str(target_user_id))

            if target.role == ProjectRole.OWNER:
                raise OwnerProtectedError("Cannot change the owner's role. Transfer ownership first.")

            updated = await uow.project_members.update_role(project_id, target_user_id, new_role)
            await uow.commit()

            logger.info(
                "project_member_role_changed",
                project_id=str(project_id),
                user_id=str(target_user_id),
                old_role=target.role.name.lower(),
                new_role=new_role.name.lower(),
            )
            return updated  # type: ignore[no-any-return]

    async def transfer_ownership(
        self,
        requester_id: UUID,
        project_id: UUID,
        new_owner_id: UUID,
    ) -> None:
        """Move OWNER to another project member; the old owner becomes ADMIN.

        The requester need not be the owner: workspace admins pass the
        permission check too, so the actual owner row is looked up.
        """
        async with self._uow_factory() as uow:
            await self._permissions.check_strict_permission(
                uow, requester_id, project_id, PROJECT_OWNER_ROLES
            )

            new_owner = await uow.project_members.get(project_id, new_owner_id)
            if not new_owner:
                raise NewOwnerNotAMemberError(str(new_owner_id))

            members = await uow.project_members.get_all(project_id)
            current_owner = next((m for m in members if m.role == ProjectRole.OWNER), None)
            if current_owner is None:
                raise OwnershipInvariantError(str(project_id))

            if current_owner.user_id == new_owner_id:
                return

            await uow.project_members.update_role(
                project_id, current_owner.user_id, ProjectRole.ADMIN
            )
            await uow.project_members.update_role(project_id, new_owner_id, ProjectRole.OWNER)
            await uow.commit()

            logger.info(
                "project_ownership_transferred",
                project_id=str(project_id),
                previous_owner_id=str(current_owner.user_id),
                new_owner_id=str(new_owner_id),
            )

    # --- Internal helpers ---

    @staticmethod
    def _require_assignable(role: ProjectRole) -> None:
        if role not in ASSIGNABLE_PROJECT_ROLES:
            raise InvalidRoleError(
                role.name.lower(),
                sorted(r.name.lower() for r in ASSIGNABLE_PROJECT_ROLES),
            )
