"""FastAPI routes for user registration and lookup."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.auth import current_user
from storefront.api.schemas import ERROR_RESPONSES, RegisterUserRequest, UserResponse
from storefront.identity.registration import RegisterUser
from storefront.identity.user import User

user_router = APIRouter(prefix="/users", tags=["users"], responses=ERROR_RESPONSES)


@user_router.post("", status_code=201, response_model=UserResponse)
async def register_user(body: RegisterUserRequest) -> UserResponse:
    """Self-service sign-up. Always creates a customer account."""
    command = RegisterUser(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    user_id = current_domain.process(command, asynchronous=False)
    return UserResponse.from_user(current_domain.repository_for(User).get(user_id))


@user_router.get("/me", response_model=UserResponse)
async def who_am_i(user: User = Depends(current_user)) -> UserResponse:
    return UserResponse.from_user(user)
