"""Authentication and user sessions."""

from eunoia.auth.session import AuthBackend, AuthSession, AuthUser, LocalAuthBackend

__all__ = ["AuthBackend", "AuthSession", "AuthUser", "LocalAuthBackend"]
