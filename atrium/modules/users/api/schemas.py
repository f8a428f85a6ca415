"""
Request models and the response envelope shared by the user endpoints.
"""
from typing import Annotated, Any, List
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from atrium.modules.users.domain.user import UserRole

SUCCESS = "SUCCESS"
ERROR = "ERROR"

NonBlank100 = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
NonBlank255 = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
PostalCode = Annotated[str, StringConstraints(pattern=r"^[a-zA-Z0-9\- ]{3,20}$")]
NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def api_success(message: str, data: Any = None) -> dict:
    return {"status": SUCCESS, "message": message, "data": data}


def api_error(message: str, data: Any = None) -> dict:
    return {"status": ERROR, "message": message, "data": data}


def error_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(api_error(message, data)))


class AddressRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    street: NonBlank255
    city: NonBlank100
    state: NonBlank100
    postal_code: PostalCode = Field(alias="postalCode")
    country: NonBlank100

    def to_fields(self) -> dict:
        return self.model_dump(by_alias=False)


class CreateAdminUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: NonBlank = Field(alias="firstName")
    last_name: NonBlank = Field(alias="lastName")
    email: EmailStr
    role: UserRole


class UpdateUserRoleRequest(BaseModel):
    roles: List[UserRole] = Field(min_length=1)

    def role_names(self) -> List[str]:
        return [role.value for role in self.roles]


class UpdateUserStatusRequest(BaseModel):
    enabled: bool

