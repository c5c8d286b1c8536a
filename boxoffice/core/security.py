"""Security helpers (hashing, verification and opaque tokens)."""

from __future__ import annotations

from functools import lru_cache
import secrets

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Create an Argon2 hash of the plaintext password."""
    return _ph.hash(password)


def verify_password(password: str, stored_hash: str | None) -> bool:
    if not stored_hash:
        return False
    try:
        return _ph.verify(stored_hash, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


@lru_cache(maxsize=1)
def dummy_hash() -> str:
    """Hash of a random secret, verified against when no account matches."""
    return _ph.hash(secrets.token_urlsafe(16))


def needs_rehash(stored_hash: str) -> bool:
    """True when the hash was produced with parameters other than the current ones."""
    try:
        return _ph.check_needs_rehash(stored_hash)
    except argon_exc.InvalidHashError:
        return True


def new_token() -> str:
    return secrets.token_urlsafe(32)


def tokens_match(expected: str | None, supplied: str | None) -> bool:
    if not expected or not supplied:
        return False
    return secrets.compare_digest(expected, supplied)
