"""Unit tests for ProjectService."""

from datetime import datetime
from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    AlreadyAProjectMemberError,
    InsufficientPermissionsError,
    InvalidParentProjectError,
    InvalidRoleError,
    NewOwnerNotAMemberError,
    NotAMemberError,
    NotAProjectMemberError,
    OwnerProtectedError,
    OwnershipInvariantError,
    ProjectMemberNotFoundError,
    ProjectNotFoundError,
    TargetNotInWorkspaceError,
    WorkspaceNotFoundError,
)
from domain.entities.project import Project, ProjectMember, ProjectRole
from domain.entities.workspace import Workspace, WorkspaceMember, WorkspaceRole
from domain.services.project_service import ProjectService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> ProjectService:
    return ProjectService(lambda: uow)


@pytest.fixture
def workspace(workspace_id: UUID, user_id: UUID) -> Workspace:
    return Workspace(id=workspace_id, name="Acme", slug="acme", owner_id=user_id)


@pytest.fixture
def project(workspace_id: UUID, project_id: UUID, user_id: UUID) -> Project:
    return Project(id=project_id, workspace_id=workspace_id, name="Roadmap", created_by=user_id)


def _arrange(
    uow: FakeUnitOfWork,
    workspace_id: UUID,
    ws_roles: dict[UUID, WorkspaceRole],
    project_roles: dict[UUID, ProjectRole] | None = None,
    project: Project | None = None,
) -> None:
    """Back the membership lookups with in-memory role maps."""
    project_roles = project_roles or {}

    async def get_ws_member(ws_id: UUID, member_id: UUID) -> WorkspaceMember | None:
        role = ws_roles.get(member_id)
        return WorkspaceMember(workspace_id=ws_id, user_id=member_id, role=role) if role else None

    async def get_project_member(pid: UUID, member_id: UUID) -> ProjectMember | None:
        role = project_roles.get(member_id)
        return ProjectMember(project_id=pid, user_id=member_id, role=role) if role else None

    uow.workspaces.get_member.side_effect = get_ws_member
    uow.workspaces.get.return_value = Workspace(
        id=workspace_id, name="Acme", slug="acme", owner_id=uuid4()
    )
    uow.project_members.get.side_effect = get_project_member
    if project is not None:
        uow.projects.get.return_value = project
        uow.project_members.get_all.return_value = [
            ProjectMember(project_id=project.id, user_id=uid, role=role)
            for uid, role in project_roles.items()
        ]


# --- create_project ---


class TestCreateProject:
    @pytest.mark.asyncio
    async def test_root_project_makes_creator_owner(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace: Workspace,
        workspace_id: UUID,
        user_id: UUID,
    ):
        _arrange(uow, workspace_id, {user_id: WorkspaceRole.MEMBER})
        uow.workspaces.get.return_value = workspace
        uow.projects.create.side_effect = lambda p: p

        project = await service.create_project(user_id, workspace_id, "Roadmap", color="#ff0000")

        assert project.parent_id is None
        assert project.color == "#ff0000"
        uow.projects.insert_self_reference.assert_called_once_with(project.id)
        uow.projects.insert_hierarchy.assert_not_called()
        owner = uow.project_members.add.call_args[0][0]
        assert (owner.user_id, owner.role) == (user_id, ProjectRole.OWNER)
        uow.project_members.add_many.assert_not_called()
        assert uow.committed

    @pytest.mark.asyncio
    async def test_child_inherits_parent_members_except_creator(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace: Workspace,
        workspace_id: UUID,
        user_id: UUID,
    ):
        parent_id = uuid4()
        editor, viewer = uuid4(), uuid4()
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.ADMIN},
        )
        uow.workspaces.get.return_value = workspace
        uow.projects.exists_in_workspace.return_value = True
        uow.projects.create.side_effect = lambda p: p
        uow.project_members.get_all.return_value = [
            ProjectMember(project_id=parent_id, user_id=user_id, role=ProjectRole.ADMIN),
            ProjectMember(project_id=parent_id, user_id=editor, role=ProjectRole.EDITOR),
            ProjectMember(project_id=parent_id, user_id=viewer, role=ProjectRole.VIEWER),
        ]

        child = await service.create_project(user_id, workspace_id, "Q3", parent_id=parent_id)

        assert child.parent_id == parent_id
        uow.projects.insert_hierarchy.assert_called_once_with(parent_id, child.id)
        owner = uow.project_members.add.call_args[0][0]
        assert (owner.user_id, owner.role) == (user_id, ProjectRole.OWNER)
        inherited = uow.project_members.add_many.call_args[0][0]
        assert {(m.user_id, m.role) for m in inherited} == {
            (editor, ProjectRole.EDITOR),
            (viewer, ProjectRole.VIEWER),
        }
        assert all(m.project_id == child.id for m in inherited)

    @pytest.mark.asyncio
    async def test_failure_midway_rolls_back(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace: Workspace,
        workspace_id: UUID,
        user_id: UUID,
    ):
        parent_id = uuid4()
        _arrange(uow, workspace_id, {user_id: WorkspaceRole.MEMBER}, {user_id: ProjectRole.ADMIN})
        uow.workspaces.get.return_value = workspace
        uow.projects.exists_in_workspace.return_value = True
        uow.projects.create.side_effect = lambda p: p
        uow.project_members.get_all.return_value = []
        uow.project_members.add_many.side_effect = RuntimeError("insert failed")

        with pytest.raises(RuntimeError):
            await service.create_project(user_id, workspace_id, "Q3", parent_id=parent_id)

        assert uow.rolled_back
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_non_workspace_member_rejected(
        self, service: ProjectService, uow: FakeUnitOfWork, workspace_id: UUID, actor_id: UUID
    ):
        _arrange(uow, workspace_id, {})

        with pytest.raises(NotAMemberError):
            await service.create_project(actor_id, workspace_id, "X")

        uow.projects.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_parent_in_other_workspace_rejected(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace: Workspace,
        workspace_id: UUID,
        user_id: UUID,
    ):
        _arrange(uow, workspace_id, {user_id: WorkspaceRole.OWNER})
        uow.workspaces.get.return_value = workspace
        uow.projects.exists_in_workspace.return_value = False

        with pytest.raises(InvalidParentProjectError):
            await service.create_project(user_id, workspace_id, "X", parent_id=uuid4())

    @pytest.mark.asyncio
    async def test_workspace_admin_must_still_be_parent_member(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace: Workspace,
        workspace_id: UUID,
        actor_id: UUID,
    ):
        _arrange(uow, workspace_id, {actor_id: WorkspaceRole.ADMIN})
        uow.workspaces.get.return_value = workspace
        uow.projects.exists_in_workspace.return_value = True

        with pytest.raises(NotAProjectMemberError):
            await service.create_project(actor_id, workspace_id, "X", parent_id=uuid4())

        uow.projects.create.assert_not_called()


# --- reads ---


class TestGetProjects:
    @pytest.mark.asyncio
    async def test_returns_projects_with_roles(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        _arrange(uow, workspace_id, {user_id: WorkspaceRole.MEMBER})
        uow.projects.get_all_for_user.return_value = [(project, ProjectRole.EDITOR)]

        result = await service.get_projects(user_id, workspace_id)

        assert result == [(project, ProjectRole.EDITOR)]
        uow.projects.get_all_for_user.assert_called_once_with(workspace_id, user_id)

    @pytest.mark.asyncio
    async def test_outsider_rejected(
        self, service: ProjectService, uow: FakeUnitOfWork, workspace_id: UUID, actor_id: UUID
    ):
        _arrange(uow, workspace_id, {})

        with pytest.raises(NotAMemberError):
            await service.get_projects(actor_id, workspace_id)

    @pytest.mark.asyncio
    async def test_deleted_workspace_lists_nothing(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace: Workspace,
        workspace_id: UUID,
        user_id: UUID,
    ):
        _arrange(uow, workspace_id, {user_id: WorkspaceRole.OWNER})
        workspace.deleted_at = datetime.utcnow()
        uow.workspaces.get.return_value = workspace

        with pytest.raises(WorkspaceNotFoundError):
            await service.get_projects(user_id, workspace_id)

        uow.projects.get_all_for_user.assert_not_called()


class TestGetProjectMembers:
    @pytest.mark.asyncio
    async def test_viewer_can_list(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {actor_id: WorkspaceRole.MEMBER}, {actor_id: ProjectRole.VIEWER},
            project,
        )
        uow.project_members.get_all_with_details.return_value = [
            ProjectMember(project_id=project.id, user_id=actor_id, email="v@example.com")
        ]

        members = await service.get_project_members(actor_id, project.id)

        assert members[0].email == "v@example.com"

    @pytest.mark.asyncio
    async def test_workspace_admin_needs_a_project_row(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(uow, workspace_id, {actor_id: WorkspaceRole.ADMIN}, {}, project)

        with pytest.raises(NotAProjectMemberError):
            await service.get_project_members(actor_id, project.id)

        uow.project_members.get_all_with_details.assert_not_called()

    @pytest.mark.asyncio
    async def test_deleted_project_is_not_found(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        project.soft_delete(datetime.utcnow())
        _arrange(
            uow, workspace_id, {actor_id: WorkspaceRole.MEMBER}, {actor_id: ProjectRole.OWNER},
            project,
        )

        with pytest.raises(ProjectNotFoundError):
            await service.get_project_members(actor_id, project.id)

    @pytest.mark.asyncio
    async def test_deleted_workspace_is_not_found(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace: Workspace,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {actor_id: WorkspaceRole.MEMBER}, {actor_id: ProjectRole.OWNER},
            project,
        )
        workspace.deleted_at = datetime.utcnow()
        uow.workspaces.get.return_value = workspace

        with pytest.raises(WorkspaceNotFoundError):
            await service.get_project_members(actor_id, project.id)


# --- update / delete / restore ---


class TestUpdateProject:
    @pytest.mark.asyncio
    async def test_admin_renames(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {actor_id: WorkspaceRole.MEMBER}, {actor_id: ProjectRole.ADMIN},
            project,
        )
        uow.projects.update.side_effect = lambda p: p

        result = await service.update_project(actor_id, project.id, name="Renamed")

        assert result.name == "Renamed"
        assert uow.committed

    @pytest.mark.asyncio
    async def test_editor_cannot_update(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {actor_id: WorkspaceRole.MEMBER}, {actor_id: ProjectRole.EDITOR},
            project,
        )

        with pytest.raises(InsufficientPermissionsError):
            await service.update_project(actor_id, project.id, name="Renamed")


class TestDeleteProject:
    @pytest.mark.asyncio
    async def test_soft_deletes_whole_subtree_with_one_timestamp(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        child = Project(workspace_id=workspace_id, name="Child", created_by=user_id,
                        parent_id=project.id)
        grandchild = Project(workspace_id=workspace_id, name="Grandchild", created_by=user_id,
                             parent_id=child.id)
        _arrange(
            uow, workspace_id, {user_id: WorkspaceRole.MEMBER}, {user_id: ProjectRole.OWNER},
            project,
        )
        uow.projects.find_descendant_ids_including_self.return_value = [
            project.id, child.id, grandchild.id
        ]
        uow.projects.get_many.return_value = [project, child, grandchild]

        await service.delete_project(user_id, project.id)

        saved = uow.projects.save_all.call_args[0][0]
        assert len(saved) == 3
        assert all(p.is_deleted for p in saved)
        assert len({p.deleted_at for p in saved}) == 1
        assert uow.committed

    @pytest.mark.asyncio
    async def test_project_admin_cannot_delete(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {actor_id: WorkspaceRole.MEMBER}, {actor_id: ProjectRole.ADMIN},
            project,
        )

        with pytest.raises(InsufficientPermissionsError):
            await service.delete_project(actor_id, project.id)

        uow.projects.save_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_workspace_admin_can_delete_without_project_row(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(uow, workspace_id, {actor_id: WorkspaceRole.ADMIN}, {}, project)
        uow.projects.find_descendant_ids_including_self.return_value = [project.id]
        uow.projects.get_many.return_value = [project]

        await service.delete_project(actor_id, project.id)

        assert project.is_deleted


class TestRestoreProject:
    @pytest.mark.asyncio
    async def test_restores_subtree(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        project.soft_delete(datetime.utcnow())
        child = Project(workspace_id=workspace_id, name="Child", created_by=user_id,
                        parent_id=project.id)
        child.soft_delete(project.deleted_at)
        _arrange(
            uow, workspace_id, {user_id: WorkspaceRole.MEMBER}, {user_id: ProjectRole.OWNER},
            project,
        )
        uow.projects.find_descendant_ids_including_self.return_value = [project.id, child.id]
        uow.projects.get_many.return_value = [project, child]

        await service.restore_project(user_id, project.id)

        assert not project.is_deleted
        assert not child.is_deleted
        assert uow.committed


# --- add_member ---


class TestAddMember:
    @pytest.mark.asyncio
    async def test_adds_workspace_member(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER, actor_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.OWNER},
            project,
        )
        uow.project_members.add.side_effect = lambda m: m

        added = await service.add_member(user_id, project.id, actor_id, ProjectRole.EDITOR)

        assert (added.user_id, added.role) == (actor_id, ProjectRole.EDITOR)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_owner_role_not_assignable(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER, actor_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.OWNER},
            project,
        )

        with pytest.raises(InvalidRoleError):
            await service.add_member(user_id, project.id, actor_id, ProjectRole.OWNER)

    @pytest.mark.asyncio
    async def test_target_outside_workspace(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {user_id: WorkspaceRole.MEMBER}, {user_id: ProjectRole.OWNER},
            project,
        )

        with pytest.raises(TargetNotInWorkspaceError):
            await service.add_member(user_id, project.id, uuid4(), ProjectRole.VIEWER)

    @pytest.mark.asyncio
    async def test_existing_member_conflicts(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER, actor_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.OWNER, actor_id: ProjectRole.VIEWER},
            project,
        )

        with pytest.raises(AlreadyAProjectMemberError):
            await service.add_member(user_id, project.id, actor_id, ProjectRole.EDITOR)


# --- remove_member ---


class TestRemoveMember:
    @pytest.mark.asyncio
    async def test_removal_cascades_to_descendants(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        descendants = [uuid4(), uuid4()]
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER, actor_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.OWNER, actor_id: ProjectRole.EDITOR},
            project,
        )
        uow.projects.find_descendant_ids.return_value = descendants
        uow.project_members.remove_user_from_projects.return_value = 2

        cascaded = await service.remove_member(user_id, project.id, actor_id)

        assert cascaded == 2
        uow.project_members.remove.assert_called_once_with(project.id, actor_id)
        uow.project_members.remove_user_from_projects.assert_called_once_with(
            actor_id, descendants
        )
        assert uow.committed

    @pytest.mark.asyncio
    async def test_failed_cascade_rolls_back(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER, actor_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.OWNER, actor_id: ProjectRole.EDITOR},
            project,
        )
        uow.projects.find_descendant_ids.return_value = [uuid4()]
        uow.project_members.remove_user_from_projects.side_effect = RuntimeError("delete failed")

        with pytest.raises(RuntimeError):
            await service.remove_member(user_id, project.id, actor_id)

        assert uow.rolled_back
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_member_can_remove_self(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {actor_id: WorkspaceRole.MEMBER}, {actor_id: ProjectRole.VIEWER},
            project,
        )
        uow.projects.find_descendant_ids.return_value = []
        uow.project_members.remove_user_from_projects.return_value = 0

        assert await service.remove_member(actor_id, project.id, actor_id) == 0
        uow.project_members.remove.assert_called_once_with(project.id, actor_id)

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER, actor_id: WorkspaceRole.ADMIN},
            {user_id: ProjectRole.OWNER},
            project,
        )

        with pytest.raises(OwnerProtectedError):
            await service.remove_member(actor_id, project.id, user_id)

        uow.project_members.remove.assert_not_called()

    @pytest.mark.asyncio
    async def test_owner_cannot_remove_self(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {user_id: WorkspaceRole.MEMBER}, {user_id: ProjectRole.OWNER},
            project,
        )

        with pytest.raises(OwnerProtectedError):
            await service.remove_member(user_id, project.id, user_id)

    @pytest.mark.asyncio
    async def test_editor_cannot_remove_others(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        target = uuid4()
        _arrange(
            uow,
            workspace_id,
            {actor_id: WorkspaceRole.MEMBER, target: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.OWNER, actor_id: ProjectRole.EDITOR,
             target: ProjectRole.VIEWER},
            project,
        )

        with pytest.raises(InsufficientPermissionsError):
            await service.remove_member(actor_id, project.id, target)

    @pytest.mark.asyncio
    async def test_unknown_target(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {user_id: WorkspaceRole.MEMBER}, {user_id: ProjectRole.OWNER},
            project,
        )

        with pytest.raises(ProjectMemberNotFoundError):
            await service.remove_member(user_id, project.id, uuid4())

    @pytest.mark.asyncio
    async def test_deleted_project(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        project.soft_delete(datetime.utcnow())
        uow.projects.get.return_value = project

        with pytest.raises(ProjectNotFoundError):
            await service.remove_member(user_id, project.id, user_id)


# --- update_member_role ---


class TestUpdateMemberRole:
    @pytest.mark.asyncio
    async def test_admin_changes_role(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.ADMIN, actor_id: ProjectRole.VIEWER},
            project,
        )
        uow.project_members.update_role.return_value = ProjectMember(
            project_id=project.id, user_id=actor_id, role=ProjectRole.EDITOR
        )

        result = await service.update_member_role(
            user_id, project.id, actor_id, ProjectRole.EDITOR
        )

        assert result.role == ProjectRole.EDITOR
        uow.project_members.update_role.assert_called_once_with(
            project.id, actor_id, ProjectRole.EDITOR
        )

    @pytest.mark.asyncio
    async def test_owner_role_cannot_be_assigned(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.OWNER, actor_id: ProjectRole.VIEWER},
            project,
        )

        with pytest.raises(InvalidRoleError):
            await service.update_member_role(user_id, project.id, actor_id, ProjectRole.OWNER)

    @pytest.mark.asyncio
    async def test_owner_row_is_protected(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {actor_id: WorkspaceRole.OWNER},
            {user_id: ProjectRole.OWNER},
            project,
        )

        with pytest.raises(OwnerProtectedError):
            await service.update_member_role(actor_id, project.id, user_id, ProjectRole.ADMIN)


# --- transfer_ownership ---


class TestTransferOwnership:
    @pytest.mark.asyncio
    async def test_owner_transfers_and_becomes_admin(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        bystander_id = uuid4()
        _arrange(
            uow,
            workspace_id,
            {user_id: WorkspaceRole.MEMBER},
            {
                user_id: ProjectRole.OWNER,
                actor_id: ProjectRole.EDITOR,
                bystander_id: ProjectRole.VIEWER,
            },
            project,
        )

        await service.transfer_ownership(user_id, project.id, actor_id)

        calls = [c.args for c in uow.project_members.update_role.call_args_list]
        assert calls == [
            (project.id, user_id, ProjectRole.ADMIN),
            (project.id, actor_id, ProjectRole.OWNER),
        ]
        assert bystander_id not in {args[1] for args in calls}
        assert uow.committed

    @pytest.mark.asyncio
    async def test_workspace_admin_transfers_actual_owner(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        target = uuid4()
        _arrange(
            uow,
            workspace_id,
            {actor_id: WorkspaceRole.ADMIN},
            {user_id: ProjectRole.OWNER, target: ProjectRole.VIEWER},
            project,
        )

        await service.transfer_ownership(actor_id, project.id, target)

        demoted = uow.project_members.update_role.call_args_list[0].args
        assert demoted == (project.id, user_id, ProjectRole.ADMIN)

    @pytest.mark.asyncio
    async def test_new_owner_must_be_member(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {user_id: WorkspaceRole.MEMBER}, {user_id: ProjectRole.OWNER},
            project,
        )

        with pytest.raises(NewOwnerNotAMemberError):
            await service.transfer_ownership(user_id, project.id, uuid4())

    @pytest.mark.asyncio
    async def test_missing_owner_row(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        target = uuid4()
        _arrange(
            uow, workspace_id, {actor_id: WorkspaceRole.OWNER}, {target: ProjectRole.VIEWER},
            project,
        )

        with pytest.raises(OwnershipInvariantError):
            await service.transfer_ownership(actor_id, project.id, target)

    @pytest.mark.asyncio
    async def test_project_admin_cannot_transfer(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        actor_id: UUID,
        project: Project,
    ):
        _arrange(
            uow,
            workspace_id,
            {actor_id: WorkspaceRole.MEMBER},
            {user_id: ProjectRole.OWNER, actor_id: ProjectRole.ADMIN},
            project,
        )

        with pytest.raises(InsufficientPermissionsError):
            await service.transfer_ownership(actor_id, project.id, actor_id)

    @pytest.mark.asyncio
    async def test_transfer_to_current_owner_is_noop(
        self,
        service: ProjectService,
        uow: FakeUnitOfWork,
        workspace_id: UUID,
        user_id: UUID,
        project: Project,
    ):
        _arrange(
            uow, workspace_id, {user_id: WorkspaceRole.MEMBER}, {user_id: ProjectRole.OWNER},
            project,
        )

        await service.transfer_ownership(user_id, project.id, user_id)

        uow.project_members.update_role.assert_not_called()
        assert not uow.committed
