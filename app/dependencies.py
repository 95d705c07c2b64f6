"""
FastAPI dependencies: database session and the authenticated caller.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.db import get_db
from app.entities import User
from app.errors import AuthenticationError
from app.services.auth_service import verify_token

bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db=Depends(get_db),
) -> User:
    """
    Resolve ``Authorization: Bearer <token>`` to a user.

    Raises:
        AuthenticationError: no token, bad token, or the user no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token, authorization denied")
    user_id = verify_token(credentials.credentials)
    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Token is not valid")
    return user
