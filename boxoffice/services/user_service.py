"""
Account use cases: registration, login, role management and password reset.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterator, Optional
import logging

from boxoffice.core.security import (
    dummy_hash,
    hash_password,
    needs_rehash,
    new_token,
    tokens_match,
    verify_password,
)
from boxoffice.domain.errors import (
    DuplicateEmailError,
    DuplicateUsernameError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    MissingFieldError,
    NotFoundError,
)
from boxoffice.domain.records import ROLE_ADMIN, ROLE_USER, ResetTicket, UserRecord, next_id, same_text
from boxoffice.repositories.json_storage import DocumentStore
from boxoffice.services.reset_delivery import ResetDelivery, email_reset_delivery

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _by_username(records: list[UserRecord], username: str) -> Optional[UserRecord]:
    return next((r for r in records if same_text(r.username, username)), None)


def _by_email(records: list[UserRecord], email: str) -> Optional[UserRecord]:
    return next((r for r in records if same_text(r.email, email)), None)


@dataclass
class UserStore:
    """User accounts persisted as one JSON array."""

    storage: DocumentStore
    reset_ttl_seconds: int = 3600
    deliver_reset: ResetDelivery = email_reset_delivery
    clock: Callable[[], datetime] = _utcnow

    # -------------------------------------- helpers --------------------------------------
    def _records(self) -> list[UserRecord]:
        return [UserRecord.from_document(doc) for doc in self.storage.load()]

    @contextmanager
    def _edit(self) -> Iterator[list[UserRecord]]:
        with self.storage.transaction() as docs:
            records = [UserRecord.from_document(doc) for doc in docs]
            yield records
            docs[:] = [record.to_document() for record in records]

    @staticmethod
    def _ensure_unique(records: list[UserRecord], username: str, email: str) -> None:
        if _by_username(records, username):
            raise DuplicateUsernameError("Username already exists.")
        if _by_email(records, email):
            raise DuplicateEmailError("Email already registered.")

    def _check_reset(self, records: list[UserRecord], email: str, token: str, now: datetime) -> UserRecord:
        record = _by_email(records, email)
        if not record:
            raise NotFoundError("No account uses that email.")
        ticket = record.reset
        if not ticket or not tokens_match(ticket.token, token) or ticket.expired(now):
            raise InvalidOrExpiredTokenError("Invalid or expired reset token.")
        return record

    # -------------------------------------- registration --------------------------------------
    def register(self, fullname: str, username: str, email: str, password: str, role: str | None = None) -> dict:
        fullname, username, email = _clean(fullname), _clean(username), _clean(email)
        if not (fullname and username and email and password):
            raise MissingFieldError("All fields are required.")
        # Uniqueness is final only under the lock below.
        self._ensure_unique(self._records(), username, email)
        password_hash = hash_password(password)
        wanted_role = ROLE_ADMIN if _clean(role).lower() == ROLE_ADMIN else ROLE_USER

        with self._edit() as records:
            self._ensure_unique(records, username, email)
            record = UserRecord(
                id=next_id(r.id for r in records),
                fullname=fullname,
                username=username,
                email=email,
                password_hash=password_hash,
                role=wanted_role,
            )
            records.append(record)
        logger.info("Registered user %s (id=%s, role=%s)", record.username, record.id, record.role)
        return record.public_view()

    # -------------------------------------- login --------------------------------------
    def authenticate(self, username: str, password: str) -> dict:
        record = _by_username(self._records(), _clean(username))
        if not record:
            # Same argon2 cost as a real mismatch.
            verify_password(password or "", dummy_hash())
            raise InvalidCredentialsError("Invalid username or password.")
        if not verify_password(password or "", record.password_hash):
            raise InvalidCredentialsError("Invalid username or password.")
        if needs_rehash(record.password_hash):
            self._upgrade_hash(record, hash_password(password))
        return record.public_view()

    def _upgrade_hash(self, record: UserRecord, new_hash: str) -> None:
        with self._edit() as records:
            current = next((r for r in records if r.id == record.id), None)
            # Leave it alone if the password changed in the meantime.
            if current and current.password_hash == record.password_hash:
                current.password_hash = new_hash
        logger.info("Upgraded password hash for user id=%s", record.id)

    # -------------------------------------- listing --------------------------------------
    def list_public(self) -> list[dict]:
        return [record.public_view() for record in self._records()]

    def get(self, username: str) -> dict:
        record = _by_username(self._records(), _clean(username))
        if not record:
            raise NotFoundError("User not found.")
        return record.public_view()

    # -------------------------------------- roles --------------------------------------
    def promote(self, username: str) -> None:
        with self._edit() as records:
            record = _by_username(records, _clean(username))
            if not record:
                raise NotFoundError("User not found.")
            already_admin = record.is_admin
            record.role = ROLE_ADMIN
        if not already_admin:
            logger.info("Promoted user %s to admin", record.username)

    def delete(self, username: str) -> None:
        with self._edit() as records:
            record = _by_username(records, _clean(username))
            if not record:
                raise NotFoundError("User not found.")
            if record.is_admin:
                raise ForbiddenError("Admin accounts cannot be deleted.")
            records.remove(record)
        logger.info("Deleted user %s (id=%s)", record.username, record.id)

    # -------------------------------------- password reset --------------------------------------
    def request_reset(self, email_or_username: str) -> str:
        identifier = _clean(email_or_username)
        if not identifier:
            raise MissingFieldError("Email or username is required.")
        token = new_token()
        expires = self.clock() + timedelta(seconds=self.reset_ttl_seconds)
        with self._edit() as records:
            record = _by_email(records, identifier) or _by_username(records, identifier)
            if not record:
                raise NotFoundError("No account matches that email or username.")
            record.reset = ResetTicket(token=token, expires=expires)
            view = record.public_view()
        try:
            delivered = bool(self.deliver_reset(view, token))
        except Exception:
            logger.exception("Reset delivery failed for user id=%s", view["id"])
            delivered = False
        logger.info("Issued password reset for user id=%s (delivered=%s)", view["id"], delivered)
        return token

    def reset_password(self, email: str, token: str, new_password: str) -> None:
        email, token = _clean(email), _clean(token)
        if not email or not new_password:
            raise MissingFieldError("Email and new password are required.")
        self._check_reset(self._records(), email, token, self.clock())
        new_hash = hash_password(new_password)
        with self._edit() as records:
            record = self._check_reset(records, email, token, self.clock())
            record.password_hash = new_hash
            record.reset = None
        logger.info("Password reset completed for user id=%s", record.id)
