"""Profile service: keeps a profile row for every authenticated principal."""

from collections.abc import Callable
from uuid import UUID

from domain.entities.profile import Profile
from domain.repositories.unit_of_work import IUnitOfWork


class ProfileService:
    """Service layer for user profiles."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def ensure_profile(
        self,
        user_id: UUID,
        email: str,
        display_name: str | None = None,
    ) -> Profile:
        """Upsert the caller's profile so membership rows can reference it."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.upsert(
                Profile(id=user_id, email=email.lower().strip(), display_name=display_name)
            )
            await uow.commit()
            return profile  # type: ignore[no-any-return]
