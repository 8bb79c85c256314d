"""Invitation repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.invitation import Invitation


class IInvitationRepository(Protocol):
    """Repository interface for Invitation entities."""

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        ...

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        """Get an invitation by its hashed token."""
        ...

    async def get_for_workspace(self, workspace_id: UUID) -> list[Invitation]:
        """Get all invitations for a workspace."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete an invitation."""
        ...

    async def delete_for_workspace_email(self, workspace_id: UUID, email: str) -> int:
        """Delete every invitation for an email in a workspace. Returns rows removed."""
        ...
