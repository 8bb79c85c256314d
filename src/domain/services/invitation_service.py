"""Invitation service layer with business logic."""

import hashlib
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

import structlog

from core.config import settings
from core.exceptions import (
    AlreadyAMemberError,
    InsufficientPermissionsError,
    InvalidRoleError,
    InvitationExpiredError,
    InvitationNotFoundError,
    NotAMemberError,
    WorkspaceNotFoundError,
)
from domain.entities.invitation import Invitation
from domain.entities.workspace import (
    ASSIGNABLE_WORKSPACE_ROLES,
    WorkspaceMember,
    WorkspaceRole,
    has_permission,
)
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class InvitationService:
    """Service layer for workspace invitation business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def invite_member(
        self,
        workspace_id: UUID,
        user_id: UUID,
        email: str,
        role: WorkspaceRole = WorkspaceRole.MEMBER,
    ) -> tuple[Invitation, str]:
        """Create a workspace invitation, replacing any earlier one for the email.

        Args:
            workspace_id: The workspace to invite to.
            user_id: The user creating the invitation (must be Admin+).
            email: The email address to invite.
            role: The role granted on acceptance (Admin or Member).

        Returns:
            Tuple of (Invitation, raw_token). Only the token's hash is stored,
            so the raw token is available at creation time only.

        Raises:
            WorkspaceNotFoundError: If workspace does not exist.
            InsufficientPermissionsError: If user is not Admin+, or a non-Owner
                tries to invite an Admin.
            InvalidRoleError: If role is Owner.
            AlreadyAMemberError: If the email belongs to an existing member.
        """
        async with self._uow_factory() as uow:
            workspace = await uow.workspaces.get(workspace_id)
            if not workspace or workspace.is_deleted:
                raise WorkspaceNotFoundError(str(workspace_id))

            inviter = await self._require_role(uow, workspace_id, user_id, WorkspaceRole.ADMIN)

            if role not in ASSIGNABLE_WORKSPACE_ROLES:
                raise InvalidRoleError(
                    role.name.lower(),
                    sorted(r.name.lower() for r in ASSIGNABLE_WORKSPACE_ROLES),
                )
            if role == WorkspaceRole.ADMIN and inviter.role != WorkspaceRole.OWNER:
                raise InsufficientPermissionsError("owner")

            email = email.lower().strip()

            existing_member = await uow.workspaces.get_member_by_email(workspace_id, email)
            if existing_member:
                raise AlreadyAMemberError(str(existing_member.user_id))

            await uow.invitations.delete_for_workspace_email(workspace_id, email)

            raw_token = secrets.token_urlsafe(32)
            invitation = Invitation(
                workspace_id=workspace_id,
                email=email,
                role=role,
                token_hash=self._hash_token(raw_token),
                invited_by=user_id,
                expires_at=datetime.utcnow() + timedelta(days=settings.invitation_expiry_days),
            )

            created = await uow.invitations.create(invitation)
            await uow.commit()

            logger.info(
                "invitation_created",
                workspace_id=str(workspace_id),
                invitation_id=str(created.id),
                role=role.name.lower(),
            )
            return created, raw_token

    async def accept_invitation(self, token: str, user_id: UUID) -> WorkspaceMember:
        """Accept a workspace invitation using the raw token.

        Raises:
            InvitationNotFoundError: If token does not match any invitation.
            InvitationExpiredError: If the invitation has expired.
            WorkspaceNotFoundError: If the workspace was deleted meanwhile.
            AlreadyAMemberError: If user is already a workspace member. The
                invitation is consumed anyway.
        """
        async with self._uow_factory() as uow:
            invitation = await uow.invitations.get_by_token_hash(self._hash_token(token))
            if not invitation:
                raise InvitationNotFoundError()

            if invitation.is_expired:
                raise InvitationExpiredError()

            workspace = await uow.workspaces.get(invitation.workspace_id)
            if not workspace or workspace.is_deleted:
                raise WorkspaceNotFoundError(str(invitation.workspace_id))

            existing_member = await uow.workspaces.get_member(invitation.workspace_id, user_id)
            if existing_member:
                await uow.invitations.delete(invitation.id)
                await uow.commit()
                raise AlreadyAMemberError(str(user_id))

            added = await uow.workspaces.add_member(
                WorkspaceMember(
                    workspace_id=invitation.workspace_id,
                    user_id=user_id,
                    role=invitation.role,
                    invited_by=invitation.invited_by,
                )
            )
            await uow.invitations.delete(invitation.id)

            await uow.commit()
            logger.info(
                "invitation_accepted",
                workspace_id=str(invitation.workspace_id),
                user_id=str(user_id),
            )
            return added  # type: ignore[no-any-return]

    async def get_workspace_invitations(
        self,
        workspace_id: UUID,
        user_id: UUID,
    ) -> list[Invitation]:
        """Get outstanding invitations for a workspace. Requires Admin+."""
        async with self._uow_factory() as uow:
            workspace = await uow.workspaces.get(workspace_id)
            if not workspace or workspace.is_deleted:
                raise WorkspaceNotFoundError(str(workspace_id))

            await self._require_role(uow, workspace_id, user_id, WorkspaceRole.ADMIN)

            return await uow.invitations.get_for_workspace(workspace_id)  # type: ignore[no-any-return]

    # --- Internal helpers ---

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
        return member  # type: ignore[no-any-return]

    @staticmethod
    def _hash_token(token: str) -> str:
        """Hash a raw invitation token using SHA-256."""
        return hashlib.sha256(token.encode()).hexdigest()
