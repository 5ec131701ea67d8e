"""
Error types surfaced to users and to function callers.

Every error carries a short user-facing ``message`` suitable for an alert.
Function handlers map them onto HTTP status codes and callable error codes.
"""

from __future__ import annotations

from enum import Enum


class EunoiaError(Exception):
    """Base class for all eunoia errors."""

    message = "An unexpected error occurred. Please try again."
    code = "internal"
    status_code = 500

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


class UserNotAuthenticatedError(EunoiaError):
    message = "Please sign in to continue."
    code = "unauthenticated"
    status_code = 401


class InvalidResponseError(EunoiaError):
    message = "The server returned an invalid response."


class NetworkErrorKind(str, Enum):
    """Kinds of network failure."""

    NO_CONNECTION = "no_connection"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"


_NETWORK_MESSAGES = {
    NetworkErrorKind.NO_CONNECTION: "No internet connection. Your changes are saved locally.",
    NetworkErrorKind.TIMEOUT: "The request timed out. Please try again.",
    NetworkErrorKind.SERVER_ERROR: "The server is having trouble. Please try again later.",
}


class NetworkError(EunoiaError):
    """Connectivity problem talking to the cloud store or an API."""

    status_code = 503

    def __init__(self, kind: NetworkErrorKind = NetworkErrorKind.NO_CONNECTION, message: str | None = None):
        self.kind = kind
        super().__init__(message or _NETWORK_MESSAGES[kind])


class DatabaseError(EunoiaError):
    message = "Could not access your saved data."


class ServiceUnavailableError(EunoiaError):
    message = "The service is temporarily unavailable. Please try again later."
    status_code = 503


class QuotaExceededError(EunoiaError):
    message = "The daily limit for AI requests has been reached. Please try again tomorrow."
    status_code = 429


class AIServiceUnavailableError(EunoiaError):
    message = "The AI service is not available right now."
    code = "failed-precondition"
    status_code = 412


class AIGenerationError(EunoiaError):
    """The LLM call failed; the provider's message is kept for logs."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"AI generation failed: {detail}")


class NoNuggetsAvailableError(EunoiaError):
    message = "No new learning nuggets are available for this category."
    status_code = 404


class GenerationFailedError(EunoiaError):
    message = "Could not generate new learning nuggets."


class InvalidDataError(EunoiaError):
    message = "The data is invalid."
    code = "invalid-argument"
    status_code = 400


class SyncError(EunoiaError):
    message = "Sync failed. Your changes are saved locally and will sync later."


class AuthenticationError(EunoiaError):
    """Sign-up or sign-in was rejected (bad credentials, weak password, ...)."""

    message = "Sign-in failed. Please check your email and password."
    code = "unauthenticated"
    status_code = 401
