"""Client for the ``/utilisateurs`` endpoints."""

from typing import List

import structlog

from eventconnect.http_client import EventConnectHTTPClient
from eventconnect.models.dashboard import UserTotals
from eventconnect.models.user import User
from eventconnect.models.wire import ensure_list

logger = structlog.get_logger(__name__)


class UserService:
    """Typed access to users."""

    path = "/utilisateurs"

    def __init__(self, client: EventConnectHTTPClient):
        self.client = client
        self.logger = logger.bind(component="user_service")

    async def list_users(self) -> List[User]:
        data = await self.client.get(self.path)
        return [User.from_api(item) for item in ensure_list(data, "users")]

    async def get_user(self, user_id: int) -> User:
        return User.from_api(await self.client.get(f"{self.path}/{user_id}"))

    async def search_users(self, query: str) -> List[User]:
        data = await self.client.get(f"{self.path}/search", params={"q": query})
        return [User.from_api(item) for item in ensure_list(data, "users")]

    async def stats(self) -> UserTotals:
        return UserTotals.from_api(await self.client.get(f"{self.path}/stats"))

    async def toggle_status(self, user_id: int) -> User:
        """Flip a user's active flag; returns the backend's updated record."""
        user = User.from_api(await self.client.patch(f"{self.path}/{user_id}/toggle-status", json={}))
        self.logger.info("User status toggled", user_id=user_id, active=user.active)
        return user
