"""
User Domain Model

Identity-provider owned user profile, as seen by this service.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


SUPER_ADMIN_GROUP = "SuperAdmins"


class UserRole(str, Enum):
    """Roles are identity-provider group names."""
    SUPER_ADMINS = "SuperAdmins"
    DATA_STEWARDS = "DataStewards"
    SUPPLIERS = "Suppliers"
    CUSTOMERS = "Customers"


@dataclass
class IdentityUser:
    """User profile assembled from provider attributes and group memberships."""
    id: Optional[str]
    username: Optional[str]
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email_verified: bool = False
    status: Optional[str] = None
    created_date: Optional[str] = None
    last_modified_date: Optional[str] = None
    user_groups: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to the camelCase wire representation."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "emailVerified": self.email_verified,
            "status": self.status,
            "createdDate": self.created_date,
            "lastModifiedDate": self.last_modified_date,
            "userGroups": list(self.user_groups),
        }


@dataclass
class UserPage:
    """One page of a provider listing plus the token for the next one."""
    users: List[IdentityUser]
    next_token: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "users": [user.to_dict() for user in self.users],
            "nextToken": self.next_token,
        }
