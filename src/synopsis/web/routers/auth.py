from fastapi import APIRouter
from pydantic import BaseModel, EmailStr, Field

from synopsis.core.modules.user.models import UserView
from synopsis.core.modules.user.validators import MIN_PASSWORD_LENGTH
from synopsis.web.deps import AppDep
from synopsis.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class RegisterRequest(BaseModel):
    """Account registration request."""

    email: EmailStr = Field(..., description="Email address, used as the login")
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, description="Password, at least 6 characters")


class LoginRequest(BaseModel):
    """Authentication request."""

    email: EmailStr = Field(..., description="Registered email address")
    password: str = Field(..., description="Password")


class AuthResponse(BaseModel):
    """Authentication response."""

    token: str = Field(..., description="Bearer token for subsequent requests")
    user: UserView


@router.post(
    "/auth/register",
    summary="Register account",
    description="Create an account and receive a bearer token.",
    operation_id="register",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid email or password"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def register(register_data: RegisterRequest, app: AppDep) -> AuthResponse:
    token, user = await app.register(register_data.email, register_data.password)
    return AuthResponse(token=token, user=user)


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password to receive a bearer token.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "Malformed request"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(login_data: LoginRequest, app: AppDep) -> AuthResponse:
    token, user = await app.login(login_data.email, login_data.password)
    return AuthResponse(token=token, user=user)
