"""Invitation domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from domain.entities.workspace import WorkspaceRole

# Default invitation expiry: 7 days
INVITATION_EXPIRY_DAYS = 7


@dataclass
class Invitation:
    """Domain entity for a workspace invitation.

    Only the SHA-256 hash of the token is stored. Invitations are deleted
    once accepted or replaced by a newer invitation for the same email.
    """

    workspace_id: UUID
    email: str
    token_hash: str
    invited_by: UUID
    role: WorkspaceRole = WorkspaceRole.MEMBER
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(
        default_factory=lambda: datetime.utcnow() + timedelta(days=INVITATION_EXPIRY_DAYS)
    )

    @property
    def is_expired(self) -> bool:
        """Check if the invitation has expired."""
        return datetime.utcnow() > self.expires_at
