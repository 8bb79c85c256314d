"""Workspace service layer with business logic."""

import re
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from core.exceptions import (
    InsufficientPermissionsError,
    LastOwnerError,
    NotAMemberError,
    TargetNotInWorkspaceError,
    WorkspaceMemberNotFoundError,
    WorkspaceNotFoundError,
    WorkspaceSlugTakenError,
)
from domain.entities.workspace import (
    Workspace,
    WorkspaceMember,
    WorkspaceRole,
    has_permission,
)
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class WorkspaceService:
    """Service layer for Workspace business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_all_for_user(self, user_id: UUID) -> list[tuple[Workspace, WorkspaceRole]]:
        """Get all active workspaces a user is a member of, with their role."""
        async with self._uow_factory() as uow:
            return await uow.workspaces.get_all_for_user(user_id)  # type: ignore[no-any-return]

    async def get_by_id(self, workspace_id: UUID, user_id: UUID) -> Workspace:
        """Get a workspace by ID, verifying user membership."""
        async with self._uow_factory() as uow:
            workspace = await self._get_active(uow, workspace_id)

            member = await uow.workspaces.get_member(workspace_id, user_id)
            if not member:
                raise NotAMemberError(str(workspace_id))

            return workspace

    async def create(self, user_id: UUID, name: str) -> Workspace:
        """Create a new workspace and add the creator as Owner."""
        async with self._uow_factory() as uow:
            slug = await self._unique_slug(uow, self._generate_slug(name))

            created = await uow.workspaces.create(
                Workspace(name=name, slug=slug, owner_id=user_id)
            )
            await uow.workspaces.add_member(
                WorkspaceMember(
                    workspace_id=created.id,
                    user_id=user_id,
                    role=WorkspaceRole.OWNER,
                )
            )

            await uow.commit()
            logger.info("workspace_created", workspace_id=str(created.id), slug=slug)
            return created

    async def update(
        self,
        workspace_id: UUID,
        user_id: UUID,
        name: str | None = None,
        slug: str | None = None,
    ) -> Workspace:
        """Update a workspace. Requires Admin+ role."""
        async with self._uow_factory() as uow:
            workspace = await self._get_active(uow, workspace_id)

            await self._require_role(uow, workspace_id, user_id, WorkspaceRole.ADMIN)

            if name is not None and name.strip():
                workspace.name = name
            if slug is not None and slug.strip():
                new_slug = self._generate_slug(slug)
                if new_slug != workspace.slug:
                    if await uow.workspaces.slug_exists(new_slug):
                        raise WorkspaceSlugTakenError(new_slug)
                    workspace.slug = new_slug

            workspace.updated_at = datetime.utcnow()
            updated = await uow.workspaces.update(workspace)

            await uow.commit()
            return updated  # type: ignore[no-any-return]

    async def delete(self, workspace_id: UUID, user_id: UUID) -> None:
        """Soft-delete a workspace. Requires Owner role."""
        async with self._uow_factory() as uow:
            workspace = await self._get_active(uow, workspace_id)

            await self._require_role(uow, workspace_id, user_id, WorkspaceRole.OWNER)

            now = datetime.utcnow()
            workspace.deleted_at = now
            workspace.updated_at = now
            await uow.workspaces.update(workspace)

            await uow.commit()
            logger.info("workspace_deleted", workspace_id=str(workspace_id))

    async def get_members(self, workspace_id: UUID, user_id: UUID) -> list[WorkspaceMember]:
        """Get all members of a workspace. Requires membership."""
        async with self._uow_factory() as uow:
            await self._get_active(uow, workspace_id)

            await self._require_role(uow, workspace_id, user_id, WorkspaceRole.MEMBER)

            return await uow.workspaces.get_members(workspace_id)  # type: ignore[no-any-return]

    async def update_member_role(
        self,
        workspace_id: UUID,
        user_id: UUID,
        target_user_id: UUID,
        role: WorkspaceRole,
    ) -> WorkspaceMember:
        """Update a member's role. Owner only.

        The Owner role cannot be granted or taken away here (use
        transfer_ownership).
        """
        async with self._uow_factory() as uow:
            await self._get_active(uow, workspace_id)

            await self._require_role(uow, workspace_id, user_id, WorkspaceRole.OWNER)

            if role == WorkspaceRole.OWNER:
                raise InsufficientPermissionsError("owner (use transfer_ownership)")

            target_member = await uow.workspaces.get_member(workspace_id, target_user_id)
            if not target_member:
                raise WorkspaceMemberNotFoundError(str(target_user_id))

            if target_member.role == WorkspaceRole.OWNER:
                raise InsufficientPermissionsError("owner (use transfer_ownership)")

            updated = await uow.workspaces.update_member_role(workspace_id, target_user_id, role)

            await uow.commit()
            logger.info(
                "workspace_member_role_changed",
                workspace_id=str(workspace_id),
                user_id=str(target_user_id),
                old_role=target_member.role.name.lower(),
                new_role=role.name.lower(),
            )
            return updated  # type: ignore[no-any-return]

    async def remove_member(
        self,
        workspace_id: UUID,
        user_id: UUID,
        target_user_id: UUID,
    ) -> None:
        """Remove a member from a workspace.

        - Any member can leave, except the Owner
        - Only the Owner can remove someone else
        """
        async with self._uow_factory() as uow:
            await self._get_active(uow, workspace_id)

            actor_member = await uow.workspaces.get_member(workspace_id, user_id)
            if not actor_member:
                raise NotAMemberError(str(workspace_id))

            target_member = await uow.workspaces.get_member(workspace_id, target_user_id)
            if not target_member:
                raise WorkspaceMemberNotFoundError(str(target_user_id))

            if user_id == target_user_id:
                if target_member.role == WorkspaceRole.OWNER:
                    raise LastOwnerError()
            elif actor_member.role != WorkspaceRole.OWNER:
                raise InsufficientPermissionsError("owner")

            await uow.workspaces.remove_member(workspace_id, target_user_id)

            await uow.commit()
            logger.info(
                "workspace_member_removed",
                workspace_id=str(workspace_id),
                user_id=str(target_user_id),
                self_leave=user_id == target_user_id,
            )

    async def transfer_ownership(
        self,
        workspace_id: UUID,
        current_owner_id: UUID,
        new_owner_id: UUID,
    ) -> None:
        """Transfer workspace ownership. Current user must be the Owner."""
        async with self._uow_factory() as uow:
            workspace = await self._get_active(uow, workspace_id)

            if workspace.owner_id != current_owner_id:
                raise InsufficientPermissionsError("owner")

            if new_owner_id == current_owner_id:
                return

            new_owner_member = await uow.workspaces.get_member(workspace_id, new_owner_id)
            if not new_owner_member:
                raise TargetNotInWorkspaceError(str(new_owner_id))

            # Demote current owner to Admin, promote new owner to Owner
            await uow.workspaces.update_member_role(
                workspace_id, current_owner_id, WorkspaceRole.ADMIN
            )
            await uow.workspaces.update_member_role(workspace_id, new_owner_id, WorkspaceRole.OWNER)

            workspace.owner_id = new_owner_id
            workspace.updated_at = datetime.utcnow()
            await uow.workspaces.update(workspace)

            await uow.commit()
            logger.info(
                "workspace_ownership_transferred",
                workspace_id=str(workspace_id),
                previous_owner_id=str(current_owner_id),
                new_owner_id=str(new_owner_id),
            )

    # --- Internal helpers ---

    @staticmethod
    async def _get_active(uow: IUnitOfWork, workspace_id: UUID) -> Workspace:
        workspace = await uow.workspaces.get(workspace_id)
        if not workspace or workspace.is_deleted:
            raise WorkspaceNotFoundError(str(workspace_id))
        return workspace

    async def _require_role(
        self,
        uow: IUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        required_role: WorkspaceRole,
    ) -> WorkspaceMember:
        """Verify the user has at least the required role. Raises on failure."""
        member = await uow.workspaces.get_member(workspace_id, user_id)
        if not member:
            raise NotAMemberError(str(workspace_id))
        if not has_permission(member.role, required_role):
            raise InsufficientPermissionsError(required_role.name.lower())
        return member

    @staticmethod
    async def _unique_slug(uow: IUnitOfWork, base: str) -> str:
        """Append -1, -2, ... until the slug is free."""
        slug = base
        suffix = 0
        while await uow.workspaces.slug_exists(slug):
            suffix += 1
            slug = f"{base}-{suffix}"
        return slug

    @staticmethod
    def _generate_slug(name: str) -> str:
        """Generate a URL-friendly slug from a workspace name."""
        slug = name.lower().strip()
        slug = re.sub(r"[^a-z0-9\s-]", "", slug)
        slug = re.sub(r"[\s_]+", "-", slug)
        slug = re.sub(r"-+", "-", slug)
        slug = slug.strip("-")
        return slug[:90] if slug else "workspace"
