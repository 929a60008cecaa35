"""FastAPI dependencies: storage, services and the authenticated user."""

from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pizzeria.errors import AuthenticationError, Forbidden
from pizzeria.models.user import User
from pizzeria.services import NotificationSender, OrderWorkflowService, StatusTransitionHandler
from pizzeria.state import CatalogStore, OrderRepository, StateManager, UserDirectory
from pizzeria.state.manager import get_state_manager
from pizzeria.utils.security import decode_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_state() -> StateManager:
    return await get_state_manager()


def get_catalog(state: StateManager = Depends(get_state)) -> CatalogStore:
    return CatalogStore(state)


def get_order_repository(state: StateManager = Depends(get_state)) -> OrderRepository:
    return OrderRepository(state)


def get_user_directory(state: StateManager = Depends(get_state)) -> UserDirectory:
    return UserDirectory(state)


def get_notifier(state: StateManager = Depends(get_state)) -> NotificationSender:
    return NotificationSender(state)


def get_workflow(
    catalog: CatalogStore = Depends(get_catalog),
    orders: OrderRepository = Depends(get_order_repository),
    users: UserDirectory = Depends(get_user_directory),
    notifier: NotificationSender = Depends(get_notifier),
) -> OrderWorkflowService:
    return OrderWorkflowService(catalog, orders, users, notifier)


def get_transitions(
    state: StateManager = Depends(get_state),
    catalog: CatalogStore = Depends(get_catalog),
    orders: OrderRepository = Depends(get_order_repository),
    notifier: NotificationSender = Depends(get_notifier),
) -> StatusTransitionHandler:
    return StatusTransitionHandler(state, catalog, orders, notifier)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    users: UserDirectory = Depends(get_user_directory),
) -> User:
    """Resolve the bearer token to an active user from the directory."""
    if credentials is None:
        raise AuthenticationError("Missing or invalid Authorization header. Expected: Bearer <token>")

    claims = decode_token(credentials.credentials)
    try:
        user_id = UUID(claims["sub"])
    except ValueError as exc:
        raise AuthenticationError("Token subject is not a user id") from exc

    user = await users.get(user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise Forbidden("Admin role required")
    return user
