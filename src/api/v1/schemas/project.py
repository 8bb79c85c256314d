"""Pydantic schemas for Project API."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreate(BaseModel):
    """Schema for creating a Project."""

    name: str = Field(..., min_length=1, max_length=255)
    color: Optional[str] = Field(None, max_length=20)
    parent_id: Optional[UUID] = None


class ProjectUpdate(BaseModel):
    """Schema for updating a Project. Blank name and null color are ignored."""

    name: Optional[str] = Field(None, max_length=255)
    color: Optional[str] = Field(None, max_length=20)


class ProjectResponse(BaseModel):
    """Schema for Project response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "workspace_id": "456e4567-e89b-12d3-a456-426614174000",
                "parent_id": None,
                "name": "Backend",
                "color": "#3b82f6",
                "is_archived": False,
                "created_by": "789e4567-e89b-12d3-a456-426614174000",
                "role": "owner",
                "created_at": "2026-02-01T10:00:00",
                "updated_at": "2026-02-01T10:00:00",
            }
        },
    )

    id: UUID
    workspace_id: UUID
    parent_id: Optional[UUID] = None
    name: str
    color: Optional[str] = None
    is_archived: bool = False
    created_by: UUID
    role: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProjectListResponse(BaseModel):
    """Schema for list of Projects response."""

    data: List[ProjectResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class ProjectDetailResponse(BaseModel):
    """Schema for single Project response."""

    data: ProjectResponse


class ProjectMemberResponse(BaseModel):
    """Schema for Project Member response."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    email: str = ""
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str
    joined_at: datetime


class ProjectMemberListResponse(BaseModel):
    """Schema for list of Project Members response."""

    data: List[ProjectMemberResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class ProjectMemberDetailResponse(BaseModel):
    """Schema for single Project Member response."""

    data: ProjectMemberResponse


class AddProjectMemberRequest(BaseModel):
    """Schema for adding a workspace member to a project."""

    user_id: UUID
    role: str = Field("viewer", min_length=1, max_length=20)


class UpdateProjectMemberRoleRequest(BaseModel):
    """Schema for changing a project member's role."""

    role: str = Field(..., min_length=1, max_length=20)


class TransferProjectOwnershipRequest(BaseModel):
    """Schema for transferring project ownership."""

    new_owner_id: UUID
