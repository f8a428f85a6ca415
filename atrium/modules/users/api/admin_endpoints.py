"""
Admin User Endpoints

User listing, search, creation, role and status management.
Every route requires the SuperAdmins group.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from atrium.modules.users.api.schemas import (
    CreateAdminUserRequest,
    UpdateUserRoleRequest,
    UpdateUserStatusRequest,
    api_success,
    error_response,
)
from atrium.modules.users.auth.middleware import require_super_admin
from atrium.modules.users.auth.tokens import Principal
from atrium.modules.users.domain.errors import ProtectedUserError, UserServiceError
from atrium.modules.users.identity.cognito_client import MAX_PAGE_SIZE
from atrium.modules.users.services.user_service import UserService, get_user_service

logger = logging.getLogger("atrium.users.admin_api")

router = APIRouter(
    prefix="/api/v1/admin/users",
    tags=["admin-users"],
    dependencies=[Depends(require_super_admin)],
)


@router.get("")
async def list_users(
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    next_token: Optional[str] = Query(None, alias="nextToken"),
    service: UserService = Depends(get_user_service)
):
    """One page of users with their groups. Pass nextToken to continue."""
    page = await service.list_users(limit, next_token)
    return api_success("Users retrieved successfully", page.to_dict())


@router.get("/search")
async def search_users_by_email(
    email: str = Query(..., description="Email prefix"),
    service: UserService = Depends(get_user_service)
):
    users = await service.search_users_by_email(email)
    return api_success("Search completed successfully", [u.to_dict() for u in users])


@router.get("/filter")
async def filter_users(
    email: Optional[str] = Query(None),
    first_name: Optional[str] = Query(None, alias="firstName"),
    last_name: Optional[str] = Query(None, alias="lastName"),
    username: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="ENABLED or DISABLED"),
    role: Optional[str] = Query(None),
    service: UserService = Depends(get_user_service)
):
    """Multi-criteria search over the whole pool."""
    users = await service.search_users(
        email=email,
        first_name=first_name,
        last_name=last_name,
        username=username,
        status=status,
        role=role,
    )
    return api_success("Search completed successfully", [u.to_dict() for u in users])


@router.get("/employees")
async def list_employees(service: UserService = Depends(get_user_service)):
    users = await service.get_employee_users()
    return api_success("Employees retrieved successfully", [u.to_dict() for u in users])


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    logger.debug(f"[admin_endpoints.get_user] user_id={user_id}")
    try:
        user = await service.get_user_profile(user_id)
    except UserServiceError as e:
        logger.info(f"[admin_endpoints.get_user] {e}")
        return error_response(404, str(e))
    return api_success("User retrieved successfully", user.to_dict())


@router.post("", status_code=201)
async def create_admin_user(
    request: CreateAdminUserRequest,
    principal: Principal = Depends(require_super_admin),
    service: UserService = Depends(get_user_service)
):
    """Create a staff user and add it to the requested role group."""
    try:
        user = await service.create_admin_user(
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            role=request.role.value,
            actor_id=principal.user_id,
        )
    except UserServiceError as e:
        logger.warning(f"[admin_endpoints.create_admin_user] {e}")
        return error_response(400, str(e))
    return api_success("User created successfully", user.to_dict())


@router.put("/{user_id}/role")
async def update_user_roles(
    user_id: str,
    request: UpdateUserRoleRequest,
    principal: Principal = Depends(require_super_admin),
    service: UserService = Depends(get_user_service)
):
    try:
        await service.sync_user_roles(user_id, request.role_names(), actor_id=principal.user_id)
    except ProtectedUserError as e:
        return error_response(403, str(e))
    except UserServiceError as e:
        logger.warning(f"[admin_endpoints.update_user_roles] {e}")
        return error_response(400, str(e))
    return api_success("User roles updated successfully")


@router.put("/{user_id}/status")
async def update_user_status(
    user_id: str,
    request: UpdateUserStatusRequest,
    principal: Principal = Depends(require_super_admin),
    service: UserService = Depends(get_user_service)
):
    try:
        await service.update_user_status(user_id, request.enabled, actor_id=principal.user_id)
    except ProtectedUserError as e:
        return error_response(403, str(e))
    except UserServiceError as e:
        logger.warning(f"[admin_endpoints.update_user_status] {e}")
        return error_response(400, str(e))
    status = "enabled" if request.enabled else "disabled"
    return api_success(f"User status successfully updated to {status}")
