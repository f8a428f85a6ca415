"""
Address Repository

Handles all database operations for the addresses table.
Every query is scoped by owner; soft-deleted rows are never returned.
"""
import logging
from typing import Optional, List, Dict, Any
from atrium.modules.database import database
from atrium.modules.users.domain.address import Address, ADDRESS_FIELDS

logger = logging.getLogger("atrium.users.address_repository")

_COLUMNS = "id, user_id, street, city, state, postal_code, country, is_deleted, created_at, updated_at"


class AddressRepository:
    """Repository for address data access."""

    async def create(self, user_id: str, fields: Dict[str, Any]) -> Address:
        """Insert a new address for ``user_id`` and return it."""
        query = f"""
            INSERT INTO addresses (user_id, street, city, state, postal_code, country)
            VALUES (:user_id, :street, :city, :state, :postal_code, :country)
            RETURNING {_COLUMNS}
        """
        values = {"user_id": user_id}
        values.update({name: fields.get(name) for name in ADDRESS_FIELDS})
        row = await database.fetch_one(query, values)
        return Address.from_dict(dict(row))

    async def list_by_user(self, user_id: str) -> List[Address]:
        query = f"""
            SELECT {_COLUMNS}
            FROM addresses
            WHERE user_id = :user_id AND is_deleted = false
            ORDER BY id
        """
        rows = await database.fetch_all(query, {"user_id": user_id})
        return [Address.from_dict(dict(row)) for row in rows]

    async def get_by_id_and_user(self, address_id: int, user_id: str) -> Optional[Address]:
        query = f"""
            SELECT {_COLUMNS}
            FROM addresses
            WHERE id = :address_id AND user_id = :user_id AND is_deleted = false
        """
        row = await database.fetch_one(query, {"address_id": address_id, "user_id": user_id})
        if not row:
            return None
        return Address.from_dict(dict(row))

    async def update(self, address_id: int, user_id: str, fields: Dict[str, Any]) -> Optional[Address]:
        """Replace the address fields. Returns None if not found or not owned."""
        set_clauses = []
        values: Dict[str, Any] = {"address_id": address_id, "user_id": user_id}

        for name in ADDRESS_FIELDS:
            if name in fields:
                set_clauses.append(f"{name} = :{name}")
                values[name] = fields[name]

        if not set_clauses:
            return await self.get_by_id_and_user(address_id, user_id)

        set_clauses.append("updated_at = CURRENT_TIMESTAMP")
        query = f"""
            UPDATE addresses
            SET {', '.join(set_clauses)}
            WHERE id = :address_id AND user_id = :user_id AND is_deleted = false
            RETURNING {_COLUMNS}
        """
        row = await database.fetch_one(query, values)
        if not row:
            return None
        return Address.from_dict(dict(row))

    async def soft_delete(self, address_id: int, user_id: str) -> bool:
        """Soft delete address (set is_deleted = true). False if not found or not owned."""
        query = """
            UPDATE addresses
            SET is_deleted = true, updated_at = CURRENT_TIMESTAMP
            WHERE id = :address_id AND user_id = :user_id AND is_deleted = false
            RETURNING id
        """
        deleted_id = await database.fetch_val(query, {"address_id": address_id, "user_id": user_id})
        return deleted_id is not None
