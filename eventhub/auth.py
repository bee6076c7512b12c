from typing import Optional
import uuid
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from eventhub.db.session import get_session
from sqlalchemy.ext.asyncio import AsyncSession
from eventhub.db.models.user import User
from eventhub.db.repositories import get_user
from eventhub.core.security import decode_token
from eventhub.core.errors import TokenInvalidError, UnauthorizedError

# auto_error is off so a missing header goes through the same error translator
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the user behind the bearer token on the request.

    Raises:
        UnauthorizedError: If no token was presented
        TokenExpiredError: If the token has expired
        TokenInvalidError: If the token is invalid or its user no longer exists
    """
    if credentials is None:
        raise UnauthorizedError()

    payload = decode_token(credentials.credentials)

    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise TokenInvalidError()

    user = await get_user(session, user_id)
    if not user:
        raise TokenInvalidError()
    return user
