"""Service for password hashing and login checks."""

from __future__ import annotations

import bcrypt

from leavedesk.domain.errors import AuthenticationError
from leavedesk.domain.models import User, UserRole


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is malformed
        return False


def authenticate(user: User | None, password: str | None, role: UserRole) -> User:
    """Check a login attempt against the user found by email.

    Employees sign in with email and role only; managers also need their
    password. Raises ``AuthenticationError`` carrying the HTTP status.
    """
    if user is None:
        raise AuthenticationError("User not found", status_code=404)
    if user.role != role:
        raise AuthenticationError("Role does not match", status_code=403)
    if role == UserRole.MANAGER:
        if not password or not user.password_hash:
            raise AuthenticationError("Wrong password", status_code=401)
        if not verify_password(password, user.password_hash):
            raise AuthenticationError("Wrong password", status_code=401)
    return user
