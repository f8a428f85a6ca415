"""
User Service

Facade over the identity-provider directory and the address repository.
Provider calls are blocking and run in a worker thread.
"""
import asyncio
import logging
from functools import lru_cache
from typing import Optional, List, Dict, Any, Iterable
from atrium.modules.config import settings
from atrium.modules.audit_manager import audit_manager
from atrium.modules.users.domain.user import IdentityUser, UserPage
from atrium.modules.users.domain.address import Address
from atrium.modules.users.domain.errors import ValidationError
from atrium.modules.users.identity.cognito_client import CognitoUserDirectory
from atrium.modules.users.repositories.address_repository import AddressRepository

logger = logging.getLogger("atrium.users.service")


def _validate_identifier(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} must not be blank")
    # Values are interpolated into provider filter expressions
    if '"' in value or "\\" in value:
        raise ValidationError(f"{label} contains invalid characters")
    return value.strip()


class UserService:
    """Service for user and address business logic."""

    def __init__(
        self,
        directory: Optional[CognitoUserDirectory] = None,
        repository: Optional[AddressRepository] = None,
        employee_groups: Optional[Iterable[str]] = None,
    ):
        self.directory = directory or CognitoUserDirectory(settings.user_pool_id, settings.aws_region)
        self.repository = repository or AddressRepository()
        self.employee_groups = list(employee_groups or settings.employee_groups)

    async def _audit(self, actor_id: Optional[str], action: str, resource_type: str, resource_id: Any, details: Optional[Dict[str, Any]] = None):
        await audit_manager.log_event(
            user_id=actor_id or "system",
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id),
            details=details,
        )

    async def _resolve_username(self, user_id: str) -> str:
        user_id = _validate_identifier(user_id, "User ID")
        return await asyncio.to_thread(self.directory.get_username_by_user_id, user_id)

    # Identity-provider users

    async def get_user_profile(self, user_id: str) -> IdentityUser:
        """Get a user profile by provider subject id."""
        logger.debug(f"[UserService.get_user_profile] user_id={user_id}")
        username = await self._resolve_username(user_id)
        return await asyncio.to_thread(self.directory.get_user_profile, username)

    async def list_users(self, limit: int = 20, next_token: Optional[str] = None) -> UserPage:
        logger.debug(f"[UserService.list_users] limit={limit}, next_token={'set' if next_token else None}")
        return await asyncio.to_thread(self.directory.list_users, limit, next_token)

    async def search_users_by_email(self, email: str) -> List[IdentityUser]:
        logger.debug(f"[UserService.search_users_by_email] email={email}")
        email = _validate_identifier(email, "Email")
        return await asyncio.to_thread(self.directory.search_users_by_email, email)

    async def search_users(
        self,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        username: Optional[str] = None,
        status: Optional[str] = None,
        role: Optional[str] = None,
    ) -> List[IdentityUser]:
        logger.debug(
            f"[UserService.search_users] email={email}, first_name={first_name}, last_name={last_name}, "
            f"username={username}, status={status}, role={role}"
        )
        return await asyncio.to_thread(
            self.directory.search_users,
            email=email,
            first_name=first_name,
            last_name=last_name,
            username=username,
            status=status,
            role=role,
        )

    async def get_employee_users(self) -> List[IdentityUser]:
        """Users that belong to any employee group."""
        return await asyncio.to_thread(self.directory.find_users_by_groups, self.employee_groups)

    async def create_admin_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        role: str,
        actor_id: Optional[str] = None
    ) -> IdentityUser:
        logger.debug(f"[UserService.create_admin_user] email={email}, role={role}")
        user = await asyncio.to_thread(self.directory.create_admin_user, first_name, last_name, email, role)
        await self._audit(actor_id, "CREATE", "USER", user.id or user.username, {"email": email, "role": role})
        return user

    async def sync_user_roles(self, user_id: str, roles: List[str], actor_id: Optional[str] = None) -> None:
        logger.debug(f"[UserService.sync_user_roles] user_id={user_id}, roles={roles}")
        username = await self._resolve_username(user_id)
        await asyncio.to_thread(self.directory.sync_user_roles, username, roles)
        await self._audit(actor_id, "UPDATE_ROLES", "USER", user_id, {"roles": roles})

    async def update_user_status(self, user_id: str, enabled: bool, actor_id: Optional[str] = None) -> None:
        logger.debug(f"[UserService.update_user_status] user_id={user_id}, enabled={enabled}")
        username = await self._resolve_username(user_id)
        await asyncio.to_thread(self.directory.update_user_status, username, enabled)
        await self._audit(actor_id, "ENABLE" if enabled else "DISABLE", "USER", user_id)

    # Local addresses

    async def add_address(self, user_id: str, fields: Dict[str, Any]) -> Address:
        user_id = _validate_identifier(user_id, "User ID")
        address = await self.repository.create(user_id, fields)
        await self._audit(user_id, "CREATE", "ADDRESS", address.id)
        return address

    async def get_addresses(self, user_id: str) -> List[Address]:
        user_id = _validate_identifier(user_id, "User ID")
        return await self.repository.list_by_user(user_id)

    async def update_address(self, user_id: str, address_id: int, fields: Dict[str, Any]) -> Optional[Address]:
        """Returns None when the address is missing or owned by someone else."""
        user_id = _validate_identifier(user_id, "User ID")
        address = await self.repository.update(address_id, user_id, fields)
        if address:
            await self._audit(user_id, "UPDATE", "ADDRESS", address_id)
        return address

    async def delete_address(self, user_id: str, address_id: int) -> bool:
        user_id = _validate_identifier(user_id, "User ID")
        deleted = await self.repository.soft_delete(address_id, user_id)
        if deleted:
            await self._audit(user_id, "DELETE", "ADDRESS", address_id)
        return deleted


@lru_cache(maxsize=1)
def get_user_service() -> UserService:
    """Shared service instance for the API layer."""
    return UserService()
