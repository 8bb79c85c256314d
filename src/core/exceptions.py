"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    NOT_A_MEMBER = "NOT_A_MEMBER"
    NOT_A_PROJECT_MEMBER = "NOT_A_PROJECT_MEMBER"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    OWNER_PROTECTED = "OWNER_PROTECTED"
    LAST_OWNER = "LAST_OWNER"

    # Not found errors (404)
    WORKSPACE_NOT_FOUND = "WORKSPACE_NOT_FOUND"
    WORKSPACE_MEMBER_NOT_FOUND = "WORKSPACE_MEMBER_NOT_FOUND"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    PROJECT_MEMBER_NOT_FOUND = "PROJECT_MEMBER_NOT_FOUND"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ROLE = "INVALID_ROLE"
    INVALID_PARENT_PROJECT = "INVALID_PARENT_PROJECT"
    TARGET_NOT_IN_WORKSPACE = "TARGET_NOT_IN_WORKSPACE"
    NEW_OWNER_NOT_A_MEMBER = "NEW_OWNER_NOT_A_MEMBER"
    INVITATION_EXPIRED = "INVITATION_EXPIRED"

    # Conflict errors (409)
    WORKSPACE_SLUG_TAKEN = "WORKSPACE_SLUG_TAKEN"
    ALREADY_A_MEMBER = "ALREADY_A_MEMBER"
    ALREADY_A_PROJECT_MEMBER = "ALREADY_A_PROJECT_MEMBER"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    OWNERSHIP_INVARIANT_VIOLATED = "OWNERSHIP_INVARIANT_VIOLATED"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


# --- Workspaces ---


class WorkspaceNotFoundError(AppException):
    """Workspace not found (or soft-deleted)."""

    def __init__(self, workspace_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.WORKSPACE_NOT_FOUND,
            message=f"Workspace not found: {workspace_id}",
            status_code=404,
            details={"workspace_id": workspace_id},
        )


class WorkspaceMemberNotFoundError(AppException):
    """Target user is not a member of the workspace."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.WORKSPACE_MEMBER_NOT_FOUND,
            message="Member not found",
            status_code=404,
            details={"user_id": user_id},
        )


class NotAMemberError(AppException):
    """User is not a member of the workspace."""

    def __init__(self, workspace_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_A_MEMBER,
            message="You are not a member of this workspace",
            status_code=403,
            details={"workspace_id": workspace_id},
        )


class InsufficientPermissionsError(AppException):
    """User does not have sufficient permissions."""

    def __init__(self, required_role: str = "admin") -> None:
        super().__init__(
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            message=f"Insufficient permissions. Required role: {required_role}",
            status_code=403,
            details={"required_role": required_role},
        )


class LastOwnerError(AppException):
    """The workspace owner cannot leave without transferring ownership."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.LAST_OWNER,
            message="Owner cannot leave the workspace. Delete it or transfer ownership first.",
            status_code=403,
        )


class WorkspaceSlugTakenError(AppException):
    """Workspace slug is already taken."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            error_code=ErrorCode.WORKSPACE_SLUG_TAKEN,
            message=f"Workspace slug already taken: {slug}",
            status_code=409,
            details={"slug": slug},
        )


class AlreadyAMemberError(AppException):
    """User is already a member of the workspace."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_MEMBER,
            message="User is already a member of this workspace",
            status_code=409,
            details={"user_id": user_id},
        )


class InvalidRoleError(AppException):
    """Role is not in the set accepted by the operation."""

    def __init__(self, role: str, allowed: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ROLE,
            message=f"Invalid role: {role}",
            status_code=400,
            details={"role": role, "allowed": allowed},
        )


# --- Invitations ---


class InvitationNotFoundError(AppException):
    """Invitation not found."""

    def __init__(self, invitation_id: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_NOT_FOUND,
            message="Invalid or expired invitation",
            status_code=404,
            details={"invitation_id": invitation_id} if invitation_id else None,
        )


class InvitationExpiredError(AppException):
    """Invitation has expired."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_EXPIRED,
            message="This invitation has expired",
            status_code=400,
        )


# --- Projects ---


class ProjectNotFoundError(AppException):
    """Project not found (or soft-deleted)."""

    def __init__(self, project_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROJECT_NOT_FOUND,
            message=f"Project not found: {project_id}",
            status_code=404,
            details={"project_id": project_id},
        )


class ProjectMemberNotFoundError(AppException):
    """Target user has no membership on the project."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROJECT_MEMBER_NOT_FOUND,
            message="Member not found",
            status_code=404,
            details={"user_id": user_id},
        )


class NotAProjectMemberError(AppException):
    """Caller has no membership on the project."""

    def __init__(self, project_id: str, message: str = "Not a project member") -> None:
        super().__init__(
            error_code=ErrorCode.NOT_A_PROJECT_MEMBER,
            message=message,
            status_code=403,
            details={"project_id": project_id},
        )


class InvalidParentProjectError(AppException):
    """Parent project missing or in another workspace."""

    def __init__(self, parent_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_PARENT_PROJECT,
            message="Parent project not found in this workspace",
            status_code=400,
            details={"parent_id": parent_id},
        )


class TargetNotInWorkspaceError(AppException):
    """User must join the workspace before joining one of its projects."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.TARGET_NOT_IN_WORKSPACE,
            message="User must be a member of the workspace first",
            status_code=400,
            details={"user_id": user_id},
        )


class AlreadyAProjectMemberError(AppException):
    """User is already a member of the project."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_PROJECT_MEMBER,
            message="User is already a member",
            status_code=409,
            details={"user_id": user_id},
        )


class OwnerProtectedError(AppException):
    """The project owner cannot be removed or re-roled directly."""

    def __init__(self, message: str = "Cannot modify the project owner. Transfer ownership first.") -> None:
        super().__init__(
            error_code=ErrorCode.OWNER_PROTECTED,
            message=message,
            status_code=403,
        )


class NewOwnerNotAMemberError(AppException):
    """Ownership can only move to an existing project member."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NEW_OWNER_NOT_A_MEMBER,
            message="New owner must be a member of the project",
            status_code=400,
            details={"user_id": user_id},
        )


class OwnershipInvariantError(AppException):
    """No owner record exists on a project."""

    def __init__(self, project_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.OWNERSHIP_INVARIANT_VIOLATED,
            message="No project owner found",
            status_code=500,
            details={"project_id": project_id},
        )
