"""User directory backed by JSON documents."""

from uuid import UUID

from pizzeria.models.user import User, UserRole
from pizzeria.state.manager import StateManager
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)

ADMINS_KEY = "users:admins"


class UserDirectory:
    """Lookup of user role and contact details."""

    def __init__(self, state_manager: StateManager):
        self.state = state_manager

    @staticmethod
    def key(user_id: UUID | str) -> str:
        return f"user:{user_id}"

    async def save(self, user: User) -> User:
        await self.state.set(self.key(user.id), user.model_dump(mode="json"))
        if user.role is UserRole.ADMIN:
            await self.state.sadd(ADMINS_KEY, str(user.id))
        logger.debug("user_saved", user_id=str(user.id), role=user.role)
        return user

    async def get(self, user_id: UUID) -> User | None:
        data = await self.state.get(self.key(user_id))
        if not data:
            return None
        return User(**data)

    async def list_admins(self) -> list[User]:
        admins = []
        for user_id in await self.state.smembers(ADMINS_KEY):
            user = await self.get(UUID(user_id))
            if user is not None and user.is_active:
                admins.append(user)
        return admins
