"""
Address Domain Model

The only entity this service owns. Rows are scoped to the owning user's
identity-provider subject and are soft-deleted.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


ADDRESS_FIELDS = ("street", "city", "state", "postal_code", "country")


@dataclass
class Address:
    id: int
    user_id: str
    street: str
    city: str
    state: str
    postal_code: str
    country: str
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Address":
        """Create Address from dictionary (e.g., from database row)."""
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            street=data["street"],
            city=data["city"],
            state=data["state"],
            postal_code=data["postal_code"],
            country=data["country"],
            is_deleted=bool(data.get("is_deleted", False)),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
            "country": self.country,
        }
