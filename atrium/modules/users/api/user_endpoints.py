"""
Self-Service User Endpoints

The caller's own profile and postal addresses.
The caller is always identified by the verified token subject.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict
from fastapi import APIRouter, Depends, HTTPException
from atrium.modules.users.api.schemas import AddressRequest, api_success, error_response
from atrium.modules.users.auth.middleware import get_current_principal
from atrium.modules.users.auth.tokens import GROUPS_CLAIM, Principal
from atrium.modules.users.domain.errors import UserServiceError
from atrium.modules.users.services.user_service import UserService, get_user_service

logger = logging.getLogger("atrium.users.api")

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _epoch_to_iso(value: Any):
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc).isoformat()
    except (TypeError, ValueError):
        return None


def profile_from_claims(principal: Principal) -> Dict[str, Any]:
    """Best-effort profile built from token claims when the provider is unreachable."""
    claims = principal.claims
    issued_at = _epoch_to_iso(claims.get("iat"))
    groups = claims.get(GROUPS_CLAIM)
    email_verified = claims.get("email_verified")
    return {
        "id": principal.user_id,
        "username": principal.user_id,
        "email": claims.get("email") or claims.get("username"),
        "firstName": claims.get("given_name"),
        "lastName": claims.get("family_name"),
        "phone": claims.get("phone_number"),
        "emailVerified": str(email_verified).lower() == "true" if email_verified is not None else False,
        "status": "CONFIRMED",
        "createdDate": issued_at,
        "lastModifiedDate": issued_at,
        "userGroups": list(groups) if isinstance(groups, list) else [],
    }


@router.get("")
async def users_root():
    """There is no collection resource here; admins list users under /api/v1/admin/users."""
    return error_response(404, "Internal server error: No static resource api/v1/users.")


@router.get("/me")
async def get_my_profile(
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service)
):
    """
    Current user profile from the identity provider.

    Falls back to the token claims if the provider lookup fails.
    """
    logger.debug(f"[user_endpoints.get_my_profile] user_id={principal.user_id}")
    try:
        user = await service.get_user_profile(principal.user_id)
        return user.to_dict()
    except UserServiceError as e:
        logger.warning(f"[user_endpoints.get_my_profile] provider lookup failed, using token claims: {e}")
        return profile_from_claims(principal)


@router.post("/me/addresses", status_code=201)
async def add_my_address(
    request: AddressRequest,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service)
):
    try:
        address = await service.add_address(principal.user_id, request.to_fields())
        return api_success("Address added successfully", address.to_dict())
    except Exception as e:
        logger.error(f"[user_endpoints.add_my_address] ERROR: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to add address: {e}")


@router.get("/me/addresses")
async def get_my_addresses(
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service)
):
    try:
        addresses = await service.get_addresses(principal.user_id)
        return api_success("Addresses retrieved successfully", [a.to_dict() for a in addresses])
    except Exception as e:
        logger.error(f"[user_endpoints.get_my_addresses] ERROR: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to retrieve addresses: {e}")


@router.put("/me/addresses/{address_id}")
async def update_my_address(
    address_id: int,
    request: AddressRequest,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service)
):
    try:
        address = await service.update_address(principal.user_id, address_id, request.to_fields())
    except Exception as e:
        logger.error(f"[user_endpoints.update_my_address] ERROR: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update address: {e}")

    if not address:
        return error_response(404, "Address not found or you do not have permission to update it.")
    return api_success("Address updated successfully", address.to_dict())


@router.delete("/me/addresses/{address_id}")
async def delete_my_address(
    address_id: int,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service)
):
    try:
        deleted = await service.delete_address(principal.user_id, address_id)
    except Exception as e:
        logger.error(f"[user_endpoints.delete_my_address] ERROR: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete address: {e}")

    if not deleted:
        return error_response(404, "Address not found or you do not have permission to delete it.")
    return api_success("Address deleted successfully")
