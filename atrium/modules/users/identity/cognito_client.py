"""
Cognito User Directory

Thin wrapper over the Cognito IDP administrative API. Every user, group and
status change lives in the user pool; this class only translates requests
and responses and maps provider errors onto service errors.

The boto3 client is synchronous. Callers on the event loop run these methods
in a worker thread.
"""
import logging
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from boto3.session import Session
from botocore.exceptions import BotoCoreError, ClientError

from atrium.modules.users.domain.user import IdentityUser, UserPage, SUPER_ADMIN_GROUP
from atrium.modules.users.domain.errors import (
    IdentityProviderError,
    ProtectedUserError,
    UserAlreadyExistsError,
    UserNotFoundError,
)

logger = logging.getLogger("atrium.users.identity")

MAX_PAGE_SIZE = 60


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


def _error_message(e: Exception) -> str:
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Message") or str(e)
    return str(e)


def _format_date(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _attributes_to_dict(attributes: Iterable[Dict[str, str]]) -> Dict[str, str]:
    return {attr["Name"]: attr.get("Value") for attr in attributes or []}


def build_identity_user(
    username: str,
    attributes: Iterable[Dict[str, str]],
    enabled: Optional[bool],
    created: Any,
    modified: Any,
    groups: Optional[List[str]],
) -> IdentityUser:
    """Map provider attributes onto the profile shape."""
    attrs = _attributes_to_dict(attributes)
    return IdentityUser(
        id=attrs.get("sub"),
        username=username,
        email=attrs.get("email"),
        first_name=attrs.get("given_name"),
        last_name=attrs.get("family_name"),
        phone=attrs.get("phone_number"),
        email_verified=str(attrs.get("email_verified", "false")).lower() == "true",
        status="ENABLED" if enabled else "DISABLED",
        created_date=_format_date(created),
        last_modified_date=_format_date(modified),
        user_groups=list(groups) if groups else [],
    )


def _contains(value: Optional[str], needle: Optional[str]) -> bool:
    if not needle:
        return True
    return value is not None and needle.lower() in value.lower()


class CognitoUserDirectory:
    """Identity-provider client for one Cognito user pool."""

    def __init__(self, user_pool_id: Optional[str], region: str, client=None):
        self.user_pool_id = user_pool_id
        self.region = region
        self._client = client
        self._client_lock = threading.Lock()

        if not self.user_pool_id:
            logger.warning("Cognito user pool not configured (COGNITO_USER_POOL_ID)")

    @property
    def client(self):
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    # Own session: the boto3 default session is not thread-safe
                    self._client = Session().client("cognito-idp", region_name=self.region)
        return self._client

    def _pool(self) -> str:
        if not self.user_pool_id:
            raise IdentityProviderError("Identity provider is not configured: COGNITO_USER_POOL_ID is missing")
        return self.user_pool_id

    # Single-user operations

    def get_user_profile(self, username: str) -> IdentityUser:
        """Fetch one user and its groups."""
        try:
            response = self.client.admin_get_user(UserPoolId=self._pool(), Username=username)
            groups = self.get_groups_for_user(username)
        except ClientError as e:
            if _error_code(e) == "UserNotFoundException":
                raise UserNotFoundError(f"User not found: {username}") from e
            raise IdentityProviderError(f"Failed to fetch user from identity provider: {_error_message(e)}") from e
        except BotoCoreError as e:
            raise IdentityProviderError(f"Failed to fetch user from identity provider: {e}") from e

        return build_identity_user(
            username=response["Username"],
            attributes=response.get("UserAttributes", []),
            enabled=response.get("Enabled", False),
            created=response.get("UserCreateDate"),
            modified=response.get("UserLastModifiedDate"),
            groups=groups,
        )

    def get_username_by_user_id(self, user_id: str) -> str:
        """Resolve a subject id to the provider username."""
        try:
            response = self.client.list_users(
                UserPoolId=self._pool(),
                Filter=f'sub = "{user_id}"',
                Limit=1,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to find user by ID '{user_id}': {_error_message(e)}")
            raise IdentityProviderError(f"Failed to find user by ID from identity provider: {_error_message(e)}") from e

        users = response.get("Users") or []
        if not users:
            logger.warning(f"Could not find a user with ID (sub): {user_id}")
            raise UserNotFoundError(f"User not found with ID: {user_id}")
        return users[0]["Username"]

    def create_admin_user(self, first_name: str, last_name: str, email: str, role: str) -> IdentityUser:
        """Create a user (username = email), invite by email, add to the role group."""
        attributes = [
            {"Name": "email", "Value": email},
            {"Name": "given_name", "Value": first_name},
            {"Name": "family_name", "Value": last_name},
            {"Name": "name", "Value": f"{first_name} {last_name}"},
            {"Name": "email_verified", "Value": "true"},
        ]
        try:
            response = self.client.admin_create_user(
                UserPoolId=self._pool(),
                Username=email,
                UserAttributes=attributes,
                DesiredDeliveryMediums=["EMAIL"],
            )
            username = response["User"]["Username"]
            self.add_user_to_group(username, role)
        except ClientError as e:
            if _error_code(e) == "UsernameExistsException":
                raise UserAlreadyExistsError("A user with this email already exists.") from e
            raise IdentityProviderError(f"Failed to create user in identity provider: {_error_message(e)}") from e
        except BotoCoreError as e:
            raise IdentityProviderError(f"Failed to create user in identity provider: {e}") from e

        logger.info(f"Created user {username} in group {role}")
        return self.get_user_profile(username)

    def sync_user_roles(self, username: str, roles: List[str]) -> None:
        """Make the user's groups equal to ``roles``."""
        try:
            current = self.get_groups_for_user(username)
            if SUPER_ADMIN_GROUP in current:
                raise ProtectedUserError("Security Violation: Cannot modify roles for a SuperAdmin user.")

            to_add = [role for role in roles if role not in current]
            to_remove = [role for role in current if role not in roles]
            for role in to_add:
                self.add_user_to_group(username, role)
            for role in to_remove:
                self.remove_user_from_group(username, role)
        except ClientError as e:
            if _error_code(e) == "UserNotFoundException":
                raise UserNotFoundError(f"User not found: {username}") from e
            raise IdentityProviderError(f"Failed to update user roles: {_error_message(e)}") from e
        except BotoCoreError as e:
            raise IdentityProviderError(f"Failed to update user roles: {e}") from e

        logger.info(f"Synced roles for {username}: +{to_add} -{to_remove}")

    def update_user_status(self, username: str, enabled: bool) -> None:
        """Enable or disable sign-in. SuperAdmins cannot be disabled."""
        try:
            if enabled:
                self.client.admin_enable_user(UserPoolId=self._pool(), Username=username)
            else:
                if SUPER_ADMIN_GROUP in self.get_groups_for_user(username):
                    raise ProtectedUserError("Security Violation: Cannot disable a SuperAdmin user.")
                self.client.admin_disable_user(UserPoolId=self._pool(), Username=username)
        except ClientError as e:
            if _error_code(e) == "UserNotFoundException":
                raise UserNotFoundError(f"User not found: {username}") from e
            raise IdentityProviderError(f"Failed to update user status: {_error_message(e)}") from e
        except BotoCoreError as e:
            raise IdentityProviderError(f"Failed to update user status: {e}") from e

        logger.info(f"User {username} {'enabled' if enabled else 'disabled'}")

    # Listing and search

    def search_users_by_email(self, email: str) -> List[IdentityUser]:
        """Prefix search on the email attribute."""
        try:
            response = self.client.list_users(UserPoolId=self._pool(), Filter=f'email ^= "{email}"')
            # Result sets are small; one group lookup per hit is fine here.
            return [
                self._from_user_type(user, self.get_groups_for_user(user["Username"]))
                for user in response.get("Users", [])
            ]
        except (ClientError, BotoCoreError) as e:
            raise IdentityProviderError(f"Failed to search users from identity provider: {_error_message(e)}") from e

    def list_users(self, limit: int = 20, pagination_token: Optional[str] = None) -> UserPage:
        """One page of users joined with their groups."""
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        try:
            memberships = self.fetch_group_memberships()
            kwargs = {"UserPoolId": self._pool(), "Limit": limit}
            if pagination_token:
                kwargs["PaginationToken"] = pagination_token
            response = self.client.list_users(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise IdentityProviderError(f"Failed to list users from identity provider: {_error_message(e)}") from e

        users = [
            self._from_user_type(user, memberships.get(user["Username"], []))
            for user in response.get("Users", [])
        ]
        return UserPage(users=users, next_token=response.get("PaginationToken"))

    def list_all_users(self) -> List[IdentityUser]:
        """Every user in the pool, joined with their groups."""
        try:
            memberships = self.fetch_group_memberships()
            raw_users: List[Dict[str, Any]] = []
            token = None
            while True:
                kwargs = {"UserPoolId": self._pool(), "Limit": MAX_PAGE_SIZE}
                if token:
                    kwargs["PaginationToken"] = token
                response = self.client.list_users(**kwargs)
                raw_users.extend(response.get("Users", []))
                token = response.get("PaginationToken")
                if not token:
                    break
        except (ClientError, BotoCoreError) as e:
            raise IdentityProviderError(f"Failed to list users from identity provider: {_error_message(e)}") from e

        return [self._from_user_type(user, memberships.get(user["Username"], [])) for user in raw_users]

    def fetch_group_memberships(self) -> Dict[str, List[str]]:
        """Build ``username -> [group, ...]`` for the whole pool."""
        memberships: Dict[str, List[str]] = {}
        for group_name in self.list_group_names():
            token = None
            while True:
                kwargs = {"UserPoolId": self._pool(), "GroupName": group_name}
                if token:
                    kwargs["NextToken"] = token
                response = self.client.list_users_in_group(**kwargs)
                for user in response.get("Users", []):
                    memberships.setdefault(user["Username"], []).append(group_name)
                token = response.get("NextToken")
                if not token:
                    break
        return memberships

    def list_group_names(self) -> List[str]:
        names: List[str] = []
        token = None
        while True:
            kwargs = {"UserPoolId": self._pool()}
            if token:
                kwargs["NextToken"] = token
            response = self.client.list_groups(**kwargs)
            names.extend(group["GroupName"] for group in response.get("Groups", []))
            token = response.get("NextToken")
            if not token:
                break
        return names

    def search_users(
        self,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        username: Optional[str] = None,
        status: Optional[str] = None,
        role: Optional[str] = None,
    ) -> List[IdentityUser]:
        """
        Multi-criteria search, filtered in memory over the whole pool.

        Text criteria match case-insensitive substrings, status matches
        case-insensitively, role matches any group containing the value.
        Empty criteria are ignored.
        """
        def matches(user: IdentityUser) -> bool:
            if not _contains(user.email, email):
                return False
            if not _contains(user.first_name, first_name):
                return False
            if not _contains(user.last_name, last_name):
                return False
            if not _contains(user.username, username):
                return False
            if status and (user.status is None or user.status.lower() != status.lower()):
                return False
            if role and not any(role.lower() in group.lower() for group in user.user_groups):
                return False
            return True

        return [user for user in self.list_all_users() if matches(user)]

    def find_users_by_groups(self, group_names: Iterable[str]) -> List[IdentityUser]:
        """Users that belong to at least one of ``group_names``."""
        wanted = set(group_names)
        return [user for user in self.list_all_users() if wanted.intersection(user.user_groups)]

    # Group helpers

    def get_groups_for_user(self, username: str) -> List[str]:
        groups: List[str] = []
        token = None
        while True:
            kwargs = {"UserPoolId": self._pool(), "Username": username}
            if token:
                kwargs["NextToken"] = token
            response = self.client.admin_list_groups_for_user(**kwargs)
            groups.extend(group["GroupName"] for group in response.get("Groups", []))
            token = response.get("NextToken")
            if not token:
                break
        return groups

    def add_user_to_group(self, username: str, group_name: str) -> None:
        self.client.admin_add_user_to_group(UserPoolId=self._pool(), Username=username, GroupName=group_name)

    def remove_user_from_group(self, username: str, group_name: str) -> None:
        self.client.admin_remove_user_from_group(UserPoolId=self._pool(), Username=username, GroupName=group_name)

    @staticmethod
    def _from_user_type(user: Dict[str, Any], groups: List[str]) -> IdentityUser:
        return build_identity_user(
            username=user["Username"],
            attributes=user.get("Attributes", []),
            enabled=user.get("Enabled", False),
            created=user.get("UserCreateDate"),
            modified=user.get("UserLastModifiedDate"),
            groups=groups,
        )
