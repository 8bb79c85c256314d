"""SQLAlchemy implementation of Invitation repository."""

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.invitation import Invitation
from domain.entities.workspace import WorkspaceRole
from infrastructure.database.models import WorkspaceInvitationModel

_ROLE_TO_ENUM = {
    "admin": WorkspaceRole.ADMIN,
    "member": WorkspaceRole.MEMBER,
}

_ENUM_TO_ROLE = {v: k for k, v in _ROLE_TO_ENUM.items()}


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        model = self._to_model(invitation)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        """Get an invitation by its hashed token."""
        stmt = select(WorkspaceInvitationModel).where(
            WorkspaceInvitationModel.token_hash == token_hash
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_workspace(self, workspace_id: UUID) -> list[Invitation]:
        """Get all outstanding invitations for a workspace, newest first."""
        stmt = (
            select(WorkspaceInvitationModel)
            .where(WorkspaceInvitationModel.workspace_id == workspace_id)
            .order_by(WorkspaceInvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def delete(self, id: UUID) -> bool:
        """Delete an invitation."""
        stmt = select(WorkspaceInvitationModel).where(WorkspaceInvitationModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def delete_for_workspace_email(self, workspace_id: UUID, email: str) -> int:
        """Delete every invitation for an email in a workspace. Returns rows removed."""
        stmt = (
            delete(WorkspaceInvitationModel)
            .where(
                WorkspaceInvitationModel.workspace_id == workspace_id,
                func.lower(WorkspaceInvitationModel.email) == email.lower(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: WorkspaceInvitationModel) -> Invitation:
        """Convert ORM model to domain entity."""
        return Invitation(
            id=model.id,
            workspace_id=model.workspace_id,
            email=model.email,
            role=_ROLE_TO_ENUM[model.role],
            token_hash=model.token_hash,
            invited_by=model.invited_by,
            created_at=model.created_at,
            expires_at=model.expires_at,
        )

    def _to_model(self, entity: Invitation) -> WorkspaceInvitationModel:
        """Convert domain entity to ORM model."""
        return WorkspaceInvitationModel(
            id=entity.id,
            workspace_id=entity.workspace_id,
            email=entity.email,
            role=_ENUM_TO_ROLE[entity.role],
            token_hash=entity.token_hash,
            invited_by=entity.invited_by,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
        )
