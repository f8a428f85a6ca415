"""
Data Access Layer (Repositories)

Repositories handle all database interactions.
"""

from .address_repository import AddressRepository

__all__ = [
    "AddressRepository",
]
