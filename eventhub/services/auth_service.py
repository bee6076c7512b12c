"""Authentication service for signup, login and profile lookup."""
from sqlalchemy.ext.asyncio import AsyncSession
from eventhub.schemas import SignupRequest, LoginRequest, UserOut, AuthResult
from eventhub.db.models.user import User
from eventhub.db.repositories import create_user as db_create_user, get_user_by_email as db_get_user_by_email, get_user as db_get_user
from eventhub.core.security import create_access_token, verify_password
from eventhub.core.errors import DuplicateKeyError, NotFoundError, UnauthorizedError
from eventhub.core.logging import logger

INVALID_CREDENTIALS = "Invalid email or password"


def issue_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "email": user.email})


class AuthService:
    """
    Service layer for authentication operations.

    Handles user signup, login and profile retrieval.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def signup(self, payload: SignupRequest) -> AuthResult:
        """
        Register a new user and sign them in.

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        existing = await db_get_user_by_email(self.session, payload.email)
        if existing:
            raise DuplicateKeyError("email", "User already exists with this email")

        user = await db_create_user(self.session, payload)
        logger.info(f"User {user.id} signed up")
        return AuthResult(user=UserOut.model_validate(user), token=issue_token(user))

    async def login(self, payload: LoginRequest) -> AuthResult:
        """
        Authenticate a user by email and password.

        Unknown emails and wrong passwords fail with the same message.

        Raises:
            UnauthorizedError: If credentials are invalid
        """
        user = await db_get_user_by_email(self.session, payload.email)
        if not user or not verify_password(payload.password, user.hashed_password):
            logger.warning("Failed login attempt")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        return AuthResult(user=UserOut.model_validate(user), token=issue_token(user))

    async def get_profile(self, user_id) -> UserOut:
        user = await db_get_user(self.session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserOut.model_validate(user)
