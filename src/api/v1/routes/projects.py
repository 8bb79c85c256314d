"""Project API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_project_service
from api.v1.schemas.common import parse_role, role_to_str
from api.v1.schemas.project import (
    AddProjectMemberRequest,
    ProjectCreate,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectMemberDetailResponse,
    ProjectMemberListResponse,
    ProjectMemberResponse,
    ProjectResponse,
    ProjectUpdate,
    TransferProjectOwnershipRequest,
    UpdateProjectMemberRoleRequest,
)
from core.rate_limit import limiter
from domain.entities.project import (
    Project,
    ProjectMember,
    ProjectRole,
)
from domain.services.project_service import ProjectService

# Workspace-scoped project routes (list, create)
workspace_projects_router = APIRouter(
    prefix="/workspaces/{workspace_id}/projects",
    tags=["projects"],
)

# Project-scoped routes
router = APIRouter(prefix="/projects", tags=["projects"])


@workspace_projects_router.get(
    "",
    response_model=ProjectListResponse,
    summary="List projects",
    responses={
        200: {"description": "Active projects the user belongs to, with the user's role"},
        403: {"description": "Not a workspace member"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_projects(
    request: Request,
    workspace_id: UUID,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> ProjectListResponse:
    """List the caller's projects in a workspace."""
    projects = await service.get_projects(user.id, workspace_id)
    data = [_build_project_response(p, role_to_str(role)) for p, role in projects]
    return ProjectListResponse(data=data, meta={"total": len(data)})


@workspace_projects_router.post(
    "",
    response_model=ProjectDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
    responses={
        201: {"description": "Project created; a child inherits the parent's members"},
        400: {"description": "Parent not found in this workspace"},
        403: {"description": "Not a workspace member, or not a member of the parent"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_project(
    request: Request,
    workspace_id: UUID,
    body: ProjectCreate,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    """Create a project, optionally under a parent. The creator becomes Owner."""
    project = await service.create_project(
        user_id=user.id,
        workspace_id=workspace_id,
        name=body.name,
        color=body.color,
        parent_id=body.parent_id,
    )
    return ProjectDetailResponse(
        data=_build_project_response(project, role_to_str(ProjectRole.OWNER))
    )


@router.get(
    "/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Get project",
    responses={
        200: {"description": "Project details"},
        403: {"description": "No access"},
        404: {"description": "Project not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_project(
    request: Request,
    project_id: UUID,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    """Get a single project."""
    project = await service.get_project(user.id, project_id)
    return ProjectDetailResponse(data=_build_project_response(project))


@router.patch(
    "/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Update project",
    responses={
        200: {"description": "Project updated"},
        403: {"description": "Project admin access required"},
        404: {"description": "Project not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_project(
    request: Request,
    project_id: UUID,
    body: ProjectUpdate,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> ProjectDetailResponse:
    """Update name and/or color. Requires project Owner/Admin or workspace Admin+."""
    project = await service.update_project(
        user_id=user.id,
        project_id=project_id,
        name=body.name,
        color=body.color,
    )
    return ProjectDetailResponse(data=_build_project_response(project))


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete project",
    responses={
        204: {"description": "Project and all descendants soft-deleted"},
        403: {"description": "Project owner required"},
        404: {"description": "Project not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_project(
    request: Request,
    project_id: UUID,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> None:
    """Soft-delete a project and its whole subtree."""
    await service.delete_project(user.id, project_id)
    return None


# --- Member Management ---


@router.get(
    "/{project_id}/members",
    response_model=ProjectMemberListResponse,
    summary="List project members",
    responses={
        200: {"description": "Project members"},
        403: {"description": "Not a member of this project"},
        404: {"description": "Project not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_members(
    request: Request,
    project_id: UUID,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> ProjectMemberListResponse:
    """List project members with profile details."""
    members = await service.get_project_members(user.id, project_id)
    data = [_build_member_response(m) for m in members]
    return ProjectMemberListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/{project_id}/members",
    response_model=ProjectMemberDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add project member",
    responses={
        201: {"description": "Member added"},
        400: {"description": "Invalid role or user not in workspace"},
        403: {"description": "Project admin access required"},
        409: {"description": "Already a project member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def add_member(
    request: Request,
    project_id: UUID,
    body: AddProjectMemberRequest,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> ProjectMemberDetailResponse:
    """Add a workspace member to the project."""
    role = parse_role(body.role, ProjectRole, frozenset(ProjectRole))
    member = await service.add_member(
        requester_id=user.id,
        project_id=project_id,
        new_user_id=body.user_id,
        role=role,
    )
    return ProjectMemberDetailResponse(data=_build_member_response(member))


@router.patch(
    "/{project_id}/members/{member_user_id}",
    response_model=ProjectMemberDetailResponse,
    summary="Update project member role",
    responses={
        200: {"description": "Role updated"},
        400: {"description": "Invalid role"},
        403: {"description": "Project admin access required, or target is the owner"},
        404: {"description": "Member not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_member_role(
    request: Request,
    project_id: UUID,
    member_user_id: UUID,
    body: UpdateProjectMemberRoleRequest,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> ProjectMemberDetailResponse:
    """Change a project member's role."""
    role = parse_role(body.role, ProjectRole, frozenset(ProjectRole))
    member = await service.update_member_role(
        requester_id=user.id,
        project_id=project_id,
        target_user_id=member_user_id,
        new_role=role,
    )
    return ProjectMemberDetailResponse(data=_build_member_response(member))


@router.delete(
    "/{project_id}/members/{member_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove project member",
    responses={
        204: {"description": "Member removed from the project and all descendants"},
        403: {"description": "Project admin access required, or target is the owner"},
        404: {"description": "Project or member not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def remove_member(
    request: Request,
    project_id: UUID,
    member_user_id: UUID,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> None:
    """Remove a member (or leave), cascading to descendant projects."""
    await service.remove_member(
        requester_id=user.id,
        project_id=project_id,
        target_user_id=member_user_id,
    )
    return None


@router.post(
    "/{project_id}/transfer-ownership",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Transfer project ownership",
    responses={
        204: {"description": "Ownership transferred; previous owner is now admin"},
        400: {"description": "New owner is not a project member"},
        403: {"description": "Project owner or workspace admin required"},
        404: {"description": "Project not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def transfer_ownership(
    request: Request,
    project_id: UUID,
    body: TransferProjectOwnershipRequest,
    user: CurrentUser,
    service: ProjectService = Depends(get_project_service),
) -> None:
    """Transfer project ownership to another project member."""
    await service.transfer_ownership(
        requester_id=user.id,
        project_id=project_id,
        new_owner_id=body.new_owner_id,
    )
    return None


def _build_project_response(project: Project, role: str | None = None) -> ProjectResponse:
    """Convert domain entity to response schema."""
    return ProjectResponse(
        id=project.id,
        workspace_id=project.workspace_id,
        parent_id=project.parent_id,
        name=project.name,
        color=project.color,
        is_archived=project.is_archived,
        created_by=project.created_by,
        role=role,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def _build_member_response(member: ProjectMember) -> ProjectMemberResponse:
    """Convert domain entity to response schema."""
    return ProjectMemberResponse(
        user_id=member.user_id,
        email=member.email or "",
        display_name=member.display_name,
        avatar_url=member.avatar_url,
        role=role_to_str(member.role),
        joined_at=member.joined_at,
    )
