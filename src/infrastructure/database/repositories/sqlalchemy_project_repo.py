"""SQLAlchemy implementation of Project and ProjectMember repositories."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, insert, literal, select
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.project import Project, ProjectMember, ProjectRole
from infrastructure.database.models import (
    ProfileModel,
    ProjectHierarchyModel,
    ProjectMemberModel,
    ProjectModel,
)

# Map string role values in DB to ProjectRole enum
_ROLE_TO_ENUM = {
    "owner": ProjectRole.OWNER,
    "admin": ProjectRole.ADMIN,
    "editor": ProjectRole.EDITOR,
    "viewer": ProjectRole.VIEWER,
}

_ENUM_TO_ROLE = {v: k for k, v in _ROLE_TO_ENUM.items()}


class SQLAlchemyProjectRepository:
    """SQLAlchemy implementation of IProjectRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Project | None:
        """Get a project by ID, soft-deleted or not."""
        stmt = select(ProjectModel).where(ProjectModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def exists_in_workspace(self, id: UUID, workspace_id: UUID) -> bool:
        """Check that an active project with this ID lives in the workspace."""
        stmt = select(ProjectModel.id).where(
            ProjectModel.id == id,
            ProjectModel.workspace_id == workspace_id,
            ProjectModel.deleted_at.is_(None),
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_many(self, ids: Sequence[UUID]) -> list[Project]:
        """Bulk fetch projects by ID."""
        if not ids:
            return []
        stmt = select(ProjectModel).where(ProjectModel.id.in_(ids))
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_all_for_user(
        self, workspace_id: UUID, user_id: UUID
    ) -> list[tuple[Project, ProjectRole | None]]:
        """Active projects in a workspace on which the user holds membership."""
        stmt = (
            select(ProjectModel, ProjectMemberModel.role)
            .join(ProjectMemberModel, ProjectMemberModel.project_id == ProjectModel.id)
            .where(
                ProjectModel.workspace_id == workspace_id,
                ProjectMemberModel.user_id == user_id,
                ProjectModel.deleted_at.is_(None),
            )
            .order_by(ProjectModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [(self._to_entity(model), _ROLE_TO_ENUM.get(role)) for model, role in result.all()]

    async def create(self, project: Project) -> Project:
        """Create a new project."""
        model = self._to_model(project)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, project: Project) -> Project:
        """Update an existing project."""
        stmt = select(ProjectModel).where(ProjectModel.id == project.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Project {project.id} not found")

        self._apply(model, project)
        await self._session.flush()
        return self._to_entity(model)

    async def save_all(self, projects: Sequence[Project]) -> None:
        """Bulk save mutable fields of the given projects."""
        if not projects:
            return
        by_id = {p.id: p for p in projects}
        stmt = select(ProjectModel).where(ProjectModel.id.in_(list(by_id)))
        result = await self._session.execute(stmt)
        for model in result.scalars():
            self._apply(model, by_id[model.id])
        await self._session.flush()

    # --- Closure table ---

    async def insert_self_reference(self, project_id: UUID) -> None:
        """Insert the (project, project, 0) row."""
        stmt = insert(ProjectHierarchyModel).values(
            ancestor_id=project_id,
            descendant_id=project_id,
            depth=0,
        )
        await self._session.execute(stmt)

    async def insert_hierarchy(self, parent_id: UUID, child_id: UUID) -> None:
        """Copy every path ending at the parent onto the child, one level deeper."""
        paths_to_parent = select(
            ProjectHierarchyModel.ancestor_id,
            literal(child_id, PG_UUID(as_uuid=True)),
            ProjectHierarchyModel.depth + 1,
        ).where(ProjectHierarchyModel.descendant_id == parent_id)
        stmt = insert(ProjectHierarchyModel).from_select(
            ["ancestor_id", "descendant_id", "depth"],
            paths_to_parent,
        )
        await self._session.execute(stmt)

    async def find_descendant_ids_including_self(self, project_id: UUID) -> list[UUID]:
        """All descendants at depth >= 0."""
        stmt = select(ProjectHierarchyModel.descendant_id).where(
            ProjectHierarchyModel.ancestor_id == project_id
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def find_descendant_ids(self, project_id: UUID) -> list[UUID]:
        """All descendants at depth > 0."""
        stmt = select(ProjectHierarchyModel.descendant_id).where(
            ProjectHierarchyModel.ancestor_id == project_id,
            ProjectHierarchyModel.depth > 0,
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def find_ancestor_ids(self, project_id: UUID) -> list[UUID]:
        """All ancestors at depth > 0, nearest first."""
        stmt = (
            select(ProjectHierarchyModel.ancestor_id)
            .where(
                ProjectHierarchyModel.descendant_id == project_id,
                ProjectHierarchyModel.depth > 0,
            )
            .order_by(ProjectHierarchyModel.depth)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    def _apply(self, model: ProjectModel, entity: Project) -> None:
        model.name = entity.name
        model.color = entity.color
        model.is_archived = entity.is_archived
        model.updated_at = entity.updated_at
        model.deleted_at = entity.deleted_at

    def _to_entity(self, model: ProjectModel) -> Project:
        """Convert ORM model to domain entity."""
        return Project(
            id=model.id,
            workspace_id=model.workspace_id,
            parent_id=model.parent_id,
            name=model.name,
            color=model.color,
            is_archived=model.is_archived,
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
            deleted_at=model.deleted_at,
        )

    def _to_model(self, entity: Project) -> ProjectModel:
        """Convert domain entity to ORM model."""
        return ProjectModel(
            id=entity.id,
            workspace_id=entity.workspace_id,
            parent_id=entity.parent_id,
            name=entity.name,
            color=entity.color,
            is_archived=entity.is_archived,
            created_by=entity.created_by,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            deleted_at=entity.deleted_at,
        )


class SQLAlchemyProjectMemberRepository:
    """SQLAlchemy implementation of IProjectMemberRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, project_id: UUID, user_id: UUID) -> ProjectMember | None:
        """Get a membership by composite key."""
        stmt = select(ProjectMemberModel).where(
            ProjectMemberModel.project_id == project_id,
            ProjectMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_all(self, project_id: UUID) -> list[ProjectMember]:
        """Get all memberships of a project."""
        stmt = (
            select(ProjectMemberModel)
            .where(ProjectMemberModel.project_id == project_id)
            .order_by(ProjectMemberModel.joined_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_all_with_details(self, project_id: UUID) -> list[ProjectMember]:
        """Get all memberships of a project with profile details."""
        stmt = (
            select(
                ProjectMemberModel,
                ProfileModel.email,
                ProfileModel.display_name,
                ProfileModel.avatar_url,
            )
            .outerjoin(ProfileModel, ProfileModel.id == ProjectMemberModel.user_id)
            .where(ProjectMemberModel.project_id == project_id)
            .order_by(ProjectMemberModel.joined_at)
        )
        result = await self._session.execute(stmt)
        members = []
        for model, email, display_name, avatar_url in result.all():
            member = self._to_entity(model)
            member.email = email
            member.display_name = display_name
            member.avatar_url = avatar_url
            members.append(member)
        return members

    async def add(self, member: ProjectMember) -> ProjectMember:
        """Add a single membership."""
        model = self._to_model(member)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def add_many(self, members: Sequence[ProjectMember]) -> None:
        """Add several memberships at once."""
        if not members:
            return
        self._session.add_all([self._to_model(m) for m in members])
        await self._session.flush()

    async def update_role(self, project_id: UUID, user_id: UUID, role: ProjectRole) -> ProjectMember:
        """Change the role of an existing membership."""
        stmt = select(ProjectMemberModel).where(
            ProjectMemberModel.project_id == project_id,
            ProjectMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError("Member not found in project")

        model.role = _ENUM_TO_ROLE[role]
        await self._session.flush()
        return self._to_entity(model)

    async def remove(self, project_id: UUID, user_id: UUID) -> bool:
        """Remove a single membership."""
        stmt = select(ProjectMemberModel).where(
            ProjectMemberModel.project_id == project_id,
            ProjectMemberModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def remove_user_from_projects(self, user_id: UUID, project_ids: Sequence[UUID]) -> int:
        """Bulk delete a user's memberships across projects."""
        if not project_ids:
            return 0
        stmt = (
            delete(ProjectMemberModel)
            .where(
                ProjectMemberModel.user_id == user_id,
                ProjectMemberModel.project_id.in_(project_ids),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: ProjectMemberModel) -> ProjectMember:
        """Convert ORM model to domain entity."""
        return ProjectMember(
            project_id=model.project_id,
            user_id=model.user_id,
            role=_ROLE_TO_ENUM[model.role],
            joined_at=model.joined_at,
        )

    def _to_model(self, entity: ProjectMember) -> ProjectMemberModel:
        """Convert domain entity to ORM model."""
        return ProjectMemberModel(
            project_id=entity.project_id,
            user_id=entity.user_id,
            role=_ENUM_TO_ROLE[entity.role],
            joined_at=entity.joined_at,
        )
