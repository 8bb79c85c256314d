"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from domain.services.invitation_service import InvitationService
from domain.services.permission_resolver import PermissionResolver
from domain.services.project_service import ProjectService
from domain.services.workspace_service import WorkspaceService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_workspace_service() -> WorkspaceService:
    """Get Workspace service instance."""
    return WorkspaceService(get_uow_factory())


@lru_cache
def get_invitation_service() -> InvitationService:
    """Get Invitation service instance."""
    return InvitationService(get_uow_factory())


@lru_cache
def get_project_service() -> ProjectService:
    """Get Project service instance."""
    return ProjectService(get_uow_factory(), permissions=PermissionResolver())
