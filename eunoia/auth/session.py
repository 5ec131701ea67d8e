"""
Authentication: email/password accounts and guest sessions.

- AuthBackend: account operations (sign up, sign in, sign out, reset)
- LocalAuthBackend: JSON-file accounts with bcrypt password hashes
- AuthSession: the current user as seen by the rest of the app
"""

from __future__ import annotations

import json
import secrets
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import bcrypt
from loguru import logger
from pydantic import BaseModel, EmailStr, Field, ValidationError

from eunoia.errors import AuthenticationError, DatabaseError, UserNotAuthenticatedError
from eunoia.utils.helpers import ensure_dir, utcnow

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


@dataclass
class AuthUser:
    """A signed-in (or guest) user."""

    uid: str
    email: str | None = None
    is_guest: bool = False
    token: str | None = None


class AuthBackend(ABC):
    """Account operations."""

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthUser:
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        pass

    @abstractmethod
    async def sign_out(self, user: AuthUser) -> None:
        pass

    @abstractmethod
    async def reset_password(self, email: str) -> None:
        pass

    @abstractmethod
    def verify_token(self, token: str) -> str | None:
        """Map a session token to a user id, or None if unknown."""
        pass


class Credentials(BaseModel):
    """Sign-up / reset input."""

    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Over-long input or a hash bcrypt cannot read
        return False


def validate_credentials(email: str, password: str) -> None:
    """
    Check email format and password length.

    Raises:
        AuthenticationError: With a user-facing message.
    """
    try:
        Credentials(email=email or "", password=password or "")
    except ValidationError as e:
        fields = {err["loc"][0] for err in e.errors() if err["loc"]}
        if "email" in fields:
            raise AuthenticationError("Please enter a valid email address.") from e
        raise AuthenticationError(f"The password must be at least {MIN_PASSWORD_LENGTH} characters long.") from e
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise AuthenticationError(f"The password must be at most {MAX_PASSWORD_BYTES} bytes long.")


class LocalAuthBackend(AuthBackend):
    """
    Accounts kept in a JSON file.

    File layout: {"accounts": {email: {...}}, "sessions": {token: uid},
    "resets": {token: email}}.
    """

    def __init__(self, path: Path):
        self.path = path
        ensure_dir(path.parent)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"accounts": {}, "sessions": {}, "resets": {}}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read accounts file {}: {}", self.path, e)
            raise DatabaseError() from e
        for key in ("accounts", "sessions", "resets"):
            data.setdefault(key, {})
        return data

    def _save(self, data: dict[str, Any]) -> None:
        try:
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write accounts file {}: {}", self.path, e)
            raise DatabaseError() from e

    def _open_session(self, data: dict[str, Any], uid: str, email: str) -> AuthUser:
        token = secrets.token_urlsafe(32)
        data["sessions"][token] = uid
        return AuthUser(uid=uid, email=email, token=token)

    async def sign_up(self, email: str, password: str) -> AuthUser:
        email = (email or "").strip().lower()
        validate_credentials(email, password)
        data = self._load()
        if email in data["accounts"]:
            raise AuthenticationError("An account with this email already exists.")

        uid = str(uuid.uuid4())
        data["accounts"][email] = {
            "uid": uid,
            "password_hash": hash_password(password),
            "created_at": utcnow().isoformat(),
        }
        user = self._open_session(data, uid, email)
        self._save(data)
        logger.info("Created account {}", uid)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        email = (email or "").strip().lower()
        data = self._load()
        account = data["accounts"].get(email)
        if account is None:
            raise AuthenticationError()
        if not check_password(password or "", account["password_hash"]):
            logger.warning("Failed sign-in for account {}", account["uid"])
            raise AuthenticationError()
        user = self._open_session(data, account["uid"], email)
        self._save(data)
        logger.info("Signed in {}", account["uid"])
        return user

    async def sign_out(self, user: AuthUser) -> None:
        if not user.token:
            return
        data = self._load()
        if data["sessions"].pop(user.token, None) is not None:
            self._save(data)

    async def reset_password(self, email: str) -> None:
        """Issue a reset token. Unknown addresses are ignored without error."""
        email = (email or "").strip().lower()
        data = self._load()
        if email not in data["accounts"]:
            logger.info("Password reset requested for unknown address")
            return
        token = secrets.token_urlsafe(16)
        data["resets"][token] = email
        self._save(data)
        logger.info("Password reset token issued for {}", data["accounts"][email]["uid"])

    async def confirm_password_reset(self, token: str, new_password: str) -> None:
        """
        Set a new password using a reset token.

        Raises:
            AuthenticationError: If the token is unknown or the password too short.
        """
        data = self._load()
        email = data["resets"].pop(token, None)
        if email is None or email not in data["accounts"]:
            raise AuthenticationError("This reset link is invalid or has expired.")
        validate_credentials(email, new_password)
        account = data["accounts"][email]
        account["password_hash"] = hash_password(new_password)
        # Existing sessions end with a password change
        data["sessions"] = {t: uid for t, uid in data["sessions"].items() if uid != account["uid"]}
        self._save(data)

    def pending_reset_tokens(self, email: str) -> list[str]:
        email = (email or "").strip().lower()
        return [t for t, e in self._load()["resets"].items() if e == email]

    def verify_token(self, token: str) -> str | None:
        try:
            return self._load()["sessions"].get(token)
        except DatabaseError:
            return None


class AuthSession:
    """Holds the current user for the app."""

    def __init__(self, backend: AuthBackend):
        self.backend = backend
        self.current_user: AuthUser | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def is_guest(self) -> bool:
        return self.current_user is not None and self.current_user.is_guest

    async def sign_up(self, email: str, password: str) -> AuthUser:
        self.current_user = await self.backend.sign_up(email, password)
        return self.current_user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        self.current_user = await self.backend.sign_in(email, password)
        return self.current_user

    async def reset_password(self, email: str) -> None:
        await self.backend.reset_password(email)

    def continue_as_guest(self) -> AuthUser:
        """Start a guest session with a fresh local-only user id."""
        self.current_user = AuthUser(uid=f"guest-{uuid.uuid4()}", is_guest=True)
        logger.info("Continuing as guest {}", self.current_user.uid)
        return self.current_user

    async def sign_out(self) -> None:
        if self.current_user is None:
            return
        if not self.current_user.is_guest:
            await self.backend.sign_out(self.current_user)
        logger.info("Signed out {}", self.current_user.uid)
        self.current_user = None

    def require_user(self) -> AuthUser:
        """
        Return the current user.

        Raises:
            UserNotAuthenticatedError: If nobody is signed in.
        """
        if self.current_user is None:
            raise UserNotAuthenticatedError()
        return self.current_user
