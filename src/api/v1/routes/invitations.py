"""Invitation API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser, InitializedUser
from api.v1.dependencies import get_invitation_service
from api.v1.schemas.common import parse_role, role_to_str
from api.v1.schemas.invitation import (
    AcceptInvitationRequest,
    AcceptInvitationResponse,
    CreateInvitationRequest,
    InvitationCreatedResponse,
    InvitationListResponse,
    InvitationResponse,
)
from core.rate_limit import limiter
from domain.entities.invitation import Invitation
from domain.entities.workspace import WorkspaceRole
from domain.services.invitation_service import InvitationService

# Workspace-scoped invitation routes
workspace_invitations_router = APIRouter(
    prefix="/workspaces/{workspace_id}/invitations",
    tags=["invitations"],
)

# User-scoped invitation routes
invitations_router = APIRouter(
    prefix="/invitations",
    tags=["invitations"],
)


@workspace_invitations_router.post(
    "",
    response_model=InvitationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create workspace invitation",
    responses={
        201: {"description": "Invitation created; any earlier one for the email is replaced"},
        400: {"description": "Invalid role"},
        403: {"description": "Insufficient permissions (Admin+, Owner to invite an Admin)"},
        404: {"description": "Workspace not found"},
        409: {"description": "Already a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_invitation(
    request: Request,
    workspace_id: UUID,
    body: CreateInvitationRequest,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationCreatedResponse:
    """Invite an email address to join a workspace. Requires Admin+ role."""
    role = parse_role(body.role, WorkspaceRole, frozenset(WorkspaceRole))
    invitation, raw_token = await service.invite_member(
        workspace_id=workspace_id,
        user_id=user.id,
        email=body.email,
        role=role,
    )
    return InvitationCreatedResponse(data=_build_invitation_response(invitation), token=raw_token)


@workspace_invitations_router.get(
    "",
    response_model=InvitationListResponse,
    summary="List workspace invitations",
    responses={
        200: {"description": "Outstanding invitations"},
        403: {"description": "Insufficient permissions (Admin+ only)"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_workspace_invitations(
    request: Request,
    workspace_id: UUID,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationListResponse:
    """List outstanding invitations for a workspace. Requires Admin+ role."""
    invitations = await service.get_workspace_invitations(workspace_id, user.id)
    data = [_build_invitation_response(inv) for inv in invitations]
    return InvitationListResponse(data=data, meta={"total": len(data)})


# --- User-scoped routes ---


@invitations_router.post(
    "/accept",
    response_model=AcceptInvitationResponse,
    summary="Accept invitation",
    responses={
        200: {"description": "Invitation accepted, user added to workspace"},
        400: {"description": "Invitation expired"},
        404: {"description": "Invitation not found"},
        409: {"description": "Already a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def accept_invitation(
    request: Request,
    body: AcceptInvitationRequest,
    user: InitializedUser,
    service: InvitationService = Depends(get_invitation_service),
) -> AcceptInvitationResponse:
    """Accept a workspace invitation using the invitation token."""
    member = await service.accept_invitation(token=body.token, user_id=user.id)
    return AcceptInvitationResponse(
        workspace_id=member.workspace_id,
        role=role_to_str(member.role),
    )


def _build_invitation_response(invitation: Invitation) -> InvitationResponse:
    """Convert domain entity to response schema."""
    return InvitationResponse(
        id=invitation.id,
        workspace_id=invitation.workspace_id,
        email=invitation.email,
        role=role_to_str(invitation.role),
        invited_by=invitation.invited_by,
        created_at=invitation.created_at,
        expires_at=invitation.expires_at,
        expired=invitation.is_expired,
    )
