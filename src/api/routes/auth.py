from fastapi import APIRouter, status

from src.api.deps import Context, CurrentIdentity
from src.api.errors import error_for
from src.api.schemas import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    SignupRequest,
    UserResponse,
)
from src.components.auth import (
    CurrentUserInput,
    LoginInput,
    SignupInput,
    UpdateProfileInput,
    run_get_current_user,
    run_login,
    run_signup,
    run_update_profile,
)

router = APIRouter()


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(body: SignupRequest, ctx: Context) -> AuthResponse:
    """Register an account and return a token for it."""
    result = run_signup(
        SignupInput(email=body.email, password=body.password, name=body.name),
        user_repo=ctx.user_repo,
        hasher=ctx.hasher,
        tokens=ctx.tokens,
        clock=ctx.clock,
        min_password_length=ctx.config.auth.password_min_length,
    )
    if not result.success or result.user is None or result.token is None:
        raise error_for(result.error_kind, result.error or "Signup failed")

    return AuthResponse(
        message="User created successfully",
        token=result.token,
        user=UserResponse.from_user(result.user),
    )


@router.post("/login")
def login(body: LoginRequest, ctx: Context) -> AuthResponse:
    result = run_login(
        LoginInput(email=body.email, password=body.password),
        user_repo=ctx.user_repo,
        hasher=ctx.hasher,
        tokens=ctx.tokens,
        clock=ctx.clock,
    )
    if not result.success or result.user is None or result.token is None:
        raise error_for(result.error_kind, result.error or "Invalid credentials")

    return AuthResponse(
        message="Login successful",
        token=result.token,
        user=UserResponse.from_user(result.user),
    )


@router.get("/me")
def read_current_user(identity: CurrentIdentity, ctx: Context) -> UserResponse:
    """Get current user info."""
    result = run_get_current_user(CurrentUserInput(identity=identity), user_repo=ctx.user_repo)
    if not result.success or result.user is None:
        raise error_for(result.error_kind, result.error or "User not found")
    return UserResponse.from_user(result.user)


@router.put("/profile")
def update_profile(
    body: ProfileUpdateRequest, identity: CurrentIdentity, ctx: Context
) -> ProfileResponse:
    result = run_update_profile(
        UpdateProfileInput(
            identity=identity,
            name=body.name,
            email=body.email,
            current_password=body.current_password,
            new_password=body.new_password,
        ),
        user_repo=ctx.user_repo,
        hasher=ctx.hasher,
        clock=ctx.clock,
        min_password_length=ctx.config.auth.password_min_length,
    )
    if not result.success or result.user is None:
        raise error_for(result.error_kind, result.error or "Profile update failed")

    return ProfileResponse(
        message="Profile updated successfully",
        user=UserResponse.from_user(result.user),
    )
