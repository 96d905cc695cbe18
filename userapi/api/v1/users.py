"""Protected user endpoints. Every route here sits behind the auth guard."""

from typing import Annotated

from fastapi import APIRouter, Depends

from userapi.api.v1.auth import get_current_username, get_user_service
from userapi.schemas.user import (
    CountriesResponse,
    MessageResponse,
    UserOut,
    UserResponse,
    UsersListResponse,
    UserUpdateRequest,
)
from userapi.services.user_service import UserService

router = APIRouter(dependencies=[Depends(get_current_username)])

UserServiceDep = Annotated[UserService, Depends(get_user_service)]


@router.get("/users", response_model=UsersListResponse)
def list_users(service: UserServiceDep) -> UsersListResponse:
    """List all users ordered by id."""
    users = service.get_users()
    return UsersListResponse(data=[UserOut.model_validate(u) for u in users])


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, service: UserServiceDep) -> UserResponse:
    return UserResponse(data=UserOut.model_validate(service.get_user(user_id)))


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    service: UserServiceDep,
) -> UserResponse:
    """Update password and/or country. Username in the body is ignored."""
    user = service.update_user(user_id, body)
    return UserResponse(data=UserOut.model_validate(user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, service: UserServiceDep) -> MessageResponse:
    service.delete_user(user_id)
    return MessageResponse(data="User deleted")


@router.get("/countries", response_model=CountriesResponse)
def list_countries(service: UserServiceDep) -> CountriesResponse:
    """Distinct countries of all registered users."""
    return CountriesResponse(data=service.get_countries())
