"""Typed failures returned by the stores."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every recoverable store failure."""

    code = "store_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingFieldError(StoreError):
    code = "missing_field"
    status_code = 400


class DuplicateUsernameError(StoreError):
    code = "duplicate_username"
    status_code = 409


class DuplicateEmailError(StoreError):
    code = "duplicate_email"
    status_code = 409


class InvalidCredentialsError(StoreError):
    code = "invalid_credentials"
    status_code = 401


class NotFoundError(StoreError):
    code = "not_found"
    status_code = 404


class ForbiddenError(StoreError):
    code = "forbidden"
    status_code = 403


class InvalidOrExpiredTokenError(StoreError):
    code = "invalid_or_expired_token"
    status_code = 400


class CorruptDocumentError(StoreError):
    """Raised when a backing file exists but is not a JSON array."""

    code = "corrupt_document"
    status_code = 500
