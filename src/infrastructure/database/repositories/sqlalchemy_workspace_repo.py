"""SQLAlchemy implementation of Workspace repository."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.workspace import Workspace, WorkspaceMember, WorkspaceRole
from infrastructure.database.models import ProfileModel, WorkspaceMemberModel, WorkspaceModel

# Map string role values in DB to WorkspaceRole enum
_ROLE_TO_ENUM = {
    "owner": WorkspaceRole.OWNER,
    "admin": WorkspaceRole.ADMIN,
    "member": WorkspaceRole.MEMBER,
}

_ENUM_TO_ROLE = {v: k for k, v in _ROLE_TO_ENUM.items()}


class SQLAlchemyWorkspaceRepository:
    """SQLAlchemy implementation of IWorkspaceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Workspace | None:
        """Get a workspace by ID."""
        stmt = select(WorkspaceModel).where(WorkspaceModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_slug(self, slug: str) -> Workspace | None:
        """Get a workspace by slug."""
        stmt = select(WorkspaceModel).where(WorkspaceModel.slug == slug)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def slug_exists(self, slug: str) -> bool:
        """Check whether any workspace uses the slug."""
        stmt = select(func.count()).select_from(WorkspaceModel).where(WorkspaceModel.slug == slug)
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    async def get_all_for_user(self, user_id: UUID) -> list[tuple[Workspace, WorkspaceRole]]:
        """Get all active workspaces a user is a member of, with the user's role."""
        stmt = (
            select(WorkspaceModel, WorkspaceMemberModel.role)
            .join(
                WorkspaceMemberModel,
                WorkspaceMemberModel.workspace_id == WorkspaceModel.id,
            )
            .where(
                WorkspaceMemberModel.user_id == user_id,
                WorkspaceModel.deleted_at.is_(None),
            )
            .order_by(WorkspaceModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [(self._to_entity(model), _ROLE_TO_ENUM[role]) for model, role in result.all()]

    async def create(self, workspace: Workspace) -> Workspace:
        """Create a new workspace."""
        model = self._to_model(workspace)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, workspace: Workspace) -> Workspace:
        """Update an existing workspace."""
        stmt = select(WorkspaceModel).where(WorkspaceModel.id == workspace.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Workspace {workspace.id} not found")

        model.name = workspace.name
        model.slug = workspace.slug
        model.owner_id = workspace.owner_id
        model.updated_at = workspace.updated_at
        model.deleted_at = workspace.deleted_at

        await self._session.flush()
        return self._to_entity(model)

    async def get_member(self, workspace_id: UUID, user_id: UUID) -> WorkspaceMember | None:
        """Get a workspace member by workspace and user IDs."""
        stmt = select(WorkspaceMemberModel).where(
            WorkspaceMemberModel.workspace_id == workspace_id,
            WorkspaceMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._member_to_entity(model) if model else None

    async def get_member_by_email(self, workspace_id: UUID, email: str) -> WorkspaceMember | None:
        """Get a workspace member by the email on their profile."""
        stmt = (
            select(WorkspaceMemberModel)
            .join(ProfileModel, ProfileModel.id == WorkspaceMemberModel.user_id)
            .where(
                WorkspaceMemberModel.workspace_id == workspace_id,
                func.lower(ProfileModel.email) == email.lower(),
            )
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._member_to_entity(model) if model else None

    async def get_members(self, workspace_id: UUID) -> list[WorkspaceMember]:
        """Get all members of a workspace with profile details."""
        stmt = (
            select(
                WorkspaceMemberModel,
                ProfileModel.email,
                ProfileModel.display_name,
                ProfileModel.avatar_url,
            )
            .outerjoin(ProfileModel, ProfileModel.id == WorkspaceMemberModel.user_id)
            .where(WorkspaceMemberModel.workspace_id == workspace_id)
            .order_by(WorkspaceMemberModel.joined_at)
        )
        result = await self._session.execute(stmt)
        members = []
        for model, email, display_name, avatar_url in result.all():
            member = self._member_to_entity(model)
            member.email = email
            member.display_name = display_name
            member.avatar_url = avatar_url
            members.append(member)
        return members

    async def add_member(self, member: WorkspaceMember) -> WorkspaceMember:
        """Add a member to a workspace."""
        model = self._member_to_model(member)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._member_to_entity(model)

    async def update_member_role(
        self, workspace_id: UUID, user_id: UUID, role: WorkspaceRole
    ) -> WorkspaceMember:
        """Update a member's role in a workspace."""
        stmt = select(WorkspaceMemberModel).where(
            WorkspaceMemberModel.workspace_id == workspace_id,
            WorkspaceMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError("Member not found in workspace")

        model.role = _ENUM_TO_ROLE[role]
        await self._session.flush()
        return self._member_to_entity(model)

    async def remove_member(self, workspace_id: UUID, user_id: UUID) -> bool:
        """Remove a member from a workspace."""
        stmt = select(WorkspaceMemberModel).where(
            WorkspaceMemberModel.workspace_id == workspace_id,
            WorkspaceMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    def _to_entity(self, model: WorkspaceModel) -> Workspace:
        """Convert ORM model to domain entity."""
        return Workspace(
            id=model.id,
            name=model.name,
            slug=model.slug,
            owner_id=model.owner_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
            deleted_at=model.deleted_at,
        )

    def _to_model(self, entity: Workspace) -> WorkspaceModel:
        """Convert domain entity to ORM model."""
        return WorkspaceModel(
            id=entity.id,
            name=entity.name,
            slug=entity.slug,
            owner_id=entity.owner_id,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            deleted_at=entity.deleted_at,
        )

    def _member_to_entity(self, model: WorkspaceMemberModel) -> WorkspaceMember:
        """Convert member ORM model to domain entity."""
        return WorkspaceMember(
            workspace_id=model.workspace_id,
            user_id=model.user_id,
            role=_ROLE_TO_ENUM[model.role],
            joined_at=model.joined_at,
            invited_by=model.invited_by,
        )

    def _member_to_model(self, entity: WorkspaceMember) -> WorkspaceMemberModel:
        """Convert member domain entity to ORM model."""
        return WorkspaceMemberModel(
            workspace_id=entity.workspace_id,
            user_id=entity.user_id,
            role=_ENUM_TO_ROLE[entity.role],
            joined_at=entity.joined_at,
            invited_by=entity.invited_by,
        )
