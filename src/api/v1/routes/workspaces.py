"""Workspace API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser, InitializedUser
from api.v1.dependencies import get_workspace_service
from api.v1.schemas.common import parse_role, role_to_str
from api.v1.schemas.workspace import (
    TransferOwnershipRequest,
    UpdateMemberRoleRequest,
    WorkspaceCreate,
    WorkspaceDetailResponse,
    WorkspaceListResponse,
    WorkspaceMemberDetailResponse,
    WorkspaceMemberListResponse,
    WorkspaceMemberResponse,
    WorkspaceResponse,
    WorkspaceUpdate,
)
from core.rate_limit import limiter
from domain.entities.workspace import Workspace, WorkspaceMember, WorkspaceRole
from domain.services.workspace_service import WorkspaceService

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.get(
    "",
    response_model=WorkspaceListResponse,
    summary="List user's workspaces",
    responses={200: {"description": "Active workspaces the user belongs to, with the user's role"}},
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_workspaces(
    request: Request,
    user: CurrentUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceListResponse:
    """Get all workspaces the authenticated user is a member of."""
    workspaces = await service.get_all_for_user(user.id)
    data = [_build_workspace_response(ws, role) for ws, role in workspaces]
    return WorkspaceListResponse(data=data, meta={"total": len(data)})


@router.post(
    "",
    response_model=WorkspaceDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a workspace",
    responses={201: {"description": "Workspace created successfully"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_workspace(
    request: Request,
    body: WorkspaceCreate,
    user: InitializedUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceDetailResponse:
    """Create a new workspace. The creator is automatically added as Owner."""
    workspace = await service.create(user_id=user.id, name=body.name)
    return WorkspaceDetailResponse(data=_build_workspace_response(workspace, WorkspaceRole.OWNER))


@router.get(
    "/{workspace_id}",
    response_model=WorkspaceDetailResponse,
    summary="Get workspace details",
    responses={
        200: {"description": "Workspace details"},
        403: {"description": "Not a member"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_workspace(
    request: Request,
    workspace_id: UUID,
    user: CurrentUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceDetailResponse:
    """Get a specific workspace by ID. Requires membership."""
    workspace = await service.get_by_id(workspace_id, user.id)
    return WorkspaceDetailResponse(data=_build_workspace_response(workspace))


@router.patch(
    "/{workspace_id}",
    response_model=WorkspaceDetailResponse,
    summary="Update workspace",
    responses={
        200: {"description": "Workspace updated"},
        403: {"description": "Insufficient permissions"},
        404: {"description": "Workspace not found"},
        409: {"description": "Workspace slug already taken"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_workspace(
    request: Request,
    workspace_id: UUID,
    body: WorkspaceUpdate,
    user: CurrentUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceDetailResponse:
    """Update name and/or slug. Requires Admin+ role."""
    workspace = await service.update(
        workspace_id=workspace_id,
        user_id=user.id,
        name=body.name,
        slug=body.slug,
    )
    return WorkspaceDetailResponse(data=_build_workspace_response(workspace))


@router.delete(
    "/{workspace_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete workspace",
    responses={
        204: {"description": "Workspace soft-deleted"},
        403: {"description": "Insufficient permissions (Owner only)"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def delete_workspace(
    request: Request,
    workspace_id: UUID,
    user: CurrentUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> None:
    """Soft-delete a workspace. Requires Owner role."""
    await service.delete(workspace_id, user.id)
    return None


# --- Member Management ---


@router.get(
    "/{workspace_id}/members",
    response_model=WorkspaceMemberListResponse,
    summary="List workspace members",
    responses={
        200: {"description": "List of workspace members"},
        403: {"description": "Not a member"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_members(
    request: Request,
    workspace_id: UUID,
    user: CurrentUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceMemberListResponse:
    """Get all members of a workspace. Requires membership."""
    members = await service.get_members(workspace_id, user.id)
    data = [_build_member_response(m) for m in members]
    return WorkspaceMemberListResponse(data=data, meta={"total": len(data)})


@router.patch(
    "/{workspace_id}/members/{member_user_id}",
    response_model=WorkspaceMemberDetailResponse,
    summary="Update member role",
    responses={
        200: {"description": "Role updated"},
        400: {"description": "Unknown role"},
        403: {"description": "Owner only; the owner role cannot be changed here"},
        404: {"description": "Workspace or member not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_member_role(
    request: Request,
    workspace_id: UUID,
    member_user_id: UUID,
    body: UpdateMemberRoleRequest,
    user: CurrentUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> WorkspaceMemberDetailResponse:
    """Update a member's role. Requires Owner role."""
    role = parse_role(body.role, WorkspaceRole, frozenset(WorkspaceRole))
    member = await service.update_member_role(
        workspace_id=workspace_id,
        user_id=user.id,
        target_user_id=member_user_id,
        role=role,
    )
    return WorkspaceMemberDetailResponse(data=_build_member_response(member))


@router.delete(
    "/{workspace_id}/members/{member_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove workspace member",
    responses={
        204: {"description": "Member removed"},
        403: {"description": "Insufficient permissions, or the owner tried to leave"},
        404: {"description": "Member not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def remove_member(
    request: Request,
    workspace_id: UUID,
    member_user_id: UUID,
    user: CurrentUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> None:
    """Remove a member from a workspace or leave the workspace."""
    await service.remove_member(
        workspace_id=workspace_id,
        user_id=user.id,
        target_user_id=member_user_id,
    )
    return None


@router.post(
    "/{workspace_id}/transfer-ownership",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Transfer workspace ownership",
    responses={
        204: {"description": "Ownership transferred"},
        400: {"description": "New owner is not a workspace member"},
        403: {"description": "Must be workspace owner"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def transfer_ownership(
    request: Request,
    workspace_id: UUID,
    body: TransferOwnershipRequest,
    user: CurrentUser,
    service: WorkspaceService = Depends(get_workspace_service),
) -> None:
    """Transfer workspace ownership to another member. Requires Owner role."""
    await service.transfer_ownership(
        workspace_id=workspace_id,
        current_owner_id=user.id,
        new_owner_id=body.new_owner_id,
    )
    return None


def _build_workspace_response(
    workspace: Workspace, role: WorkspaceRole | None = None
) -> WorkspaceResponse:
    """Convert domain entity to response schema."""
    return WorkspaceResponse(
        id=workspace.id,
        name=workspace.name,
        slug=workspace.slug,
        owner_id=workspace.owner_id,
        role=role_to_str(role) if role is not None else None,
        created_at=workspace.created_at,
        updated_at=workspace.updated_at,
    )


def _build_member_response(member: WorkspaceMember) -> WorkspaceMemberResponse:
    """Convert domain entity to response schema."""
    return WorkspaceMemberResponse(
        user_id=member.user_id,
        email=member.email or "",
        display_name=member.display_name,
        avatar_url=member.avatar_url,
        role=role_to_str(member.role),
        joined_at=member.joined_at,
    )
