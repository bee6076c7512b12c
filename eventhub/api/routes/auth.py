"""Authentication routes for signup, login and the current user's profile."""
from fastapi import APIRouter, Depends, Request, status
from eventhub.schemas import SignupRequest, LoginRequest, ApiResponse, AuthResult, ProfileData
from eventhub.services.auth_service import AuthService
from eventhub.db.session import get_session
from eventhub.db.models.user import User
from eventhub.auth import get_current_user
from eventhub.core.config import settings
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi import Limiter
from slowapi.util import get_remote_address

router = APIRouter(prefix="/auth", tags=["auth"])
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

def get_auth_service(session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session)

@router.post("/signup", response_model=ApiResponse[AuthResult], status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.SIGNUP_RATE_LIMIT)
async def signup(
    request: Request,
    payload: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Create an account and return it together with an access token.

    Fails with 400 when the email is already registered.
    """
    result = await auth_service.signup(payload)
    return {"message": "User created successfully", "data": result}

@router.post("/login", response_model=ApiResponse[AuthResult])
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Exchange email and password for an access token.

    Any credential mismatch yields the same 401 message.
    """
    result = await auth_service.login(payload)
    return {"message": "Login successful", "data": result}

@router.get("/profile", response_model=ApiResponse[ProfileData])
async def get_profile(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
):
    user = await auth_service.get_profile(current_user.id)
    return {"message": "Profile retrieved successfully", "data": ProfileData(user=user)}
