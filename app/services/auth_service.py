"""
Auth service.
Password hashing, signed bearer tokens, registration/login and profile.
"""
import base64
import hashlib
import hmac
import logging
import secrets
import time
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.config import PBKDF2_ITERATIONS, SECRET_KEY, TOKEN_TTL_HOURS
from app.entities import User
from app.errors import AuthenticationError, ConflictError, ValidationFailed
from app.models import ChangePasswordIn, LoginIn, ProfileUpdate, RegisterIn

logger = logging.getLogger(__name__)


# =========================
# Passwords
# =========================
def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS).hex()
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest}"


def verify_password(password: str, stored: str) -> bool:
    try:
        _, iterations, salt, digest = stored.split("$")
    except ValueError:
        return False
    candidate = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations)).hex()
    return hmac.compare_digest(candidate, digest)


# =========================
# Tokens
# =========================
def _sign(payload: str) -> str:
    return hmac.new(SECRET_KEY.encode(), payload.encode(), hashlib.sha256).hexdigest()


def issue_token(user_id: str, ttl_hours: int = TOKEN_TTL_HOURS) -> str:
    """
    Issue a bearer token: base64url("<user id>:<expiry epoch>") + "." + HMAC-SHA256.
    """
    expires = int(time.time()) + ttl_hours * 3600
    payload = base64.urlsafe_b64encode(f"{user_id}:{expires}".encode()).decode().rstrip("=")
    return f"{payload}.{_sign(payload)}"


def verify_token(token: str) -> str:
    """
    Check a bearer token's signature and expiry.

    Returns:
        the user id carried by the token

    Raises:
        AuthenticationError: malformed, tampered or expired token
    """
    try:
        payload, signature = token.split(".", 1)
    except (AttributeError, ValueError):
        raise AuthenticationError("Invalid token")
    if not hmac.compare_digest(_sign(payload), signature):
        raise AuthenticationError("Invalid token")
    try:
        padded = payload + "=" * (-len(payload) % 4)
        user_id, expires = base64.urlsafe_b64decode(padded.encode()).decode().rsplit(":", 1)
        expires = int(expires)
    except ValueError:
        raise AuthenticationError("Invalid token")
    if expires < time.time():
        raise AuthenticationError("Token expired")
    return user_id


# =========================
# Accounts
# =========================
def get_user_by_email(db, email: str) -> Optional[User]:
    return db.scalar(select(User).where(User.email == email.lower()))


def register(db, data: RegisterIn) -> Tuple[User, str]:
    if get_user_by_email(db, data.email):
        raise ConflictError("User already exists with this email")
    user = User(name=data.name, email=data.email, password_hash=hash_password(data.password), role="user")
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists with this email")
    logger.info("[Auth] Registered user %s", user.id)
    return user, issue_token(user.id)


def login(db, data: LoginIn) -> Tuple[User, str]:
    user = get_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return user, issue_token(user.id)


def update_profile(db, user: User, data: ProfileUpdate) -> User:
    if data.name is not None:
        user.name = data.name
    if data.email is not None and data.email != user.email:
        if get_user_by_email(db, data.email):
            raise ConflictError("Email is already in use")
        user.email = data.email
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email is already in use")
    return user


def change_password(db, user: User, data: ChangePasswordIn) -> None:
    if not verify_password(data.current_password, user.password_hash):
        raise ValidationFailed("Current password is incorrect")
    user.password_hash = hash_password(data.new_password)
    db.commit()
    logger.info("[Auth] Password changed for user %s", user.id)
