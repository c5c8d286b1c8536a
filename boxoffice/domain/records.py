"""Record types stored by the user and inventory stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Iterable, Optional

from boxoffice.domain.errors import CorruptDocumentError

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def same_text(left: str | None, right: str | None) -> bool:
    """Case-insensitive equality used for usernames, e-mails and event names."""
    return (left or "").casefold() == (right or "").casefold()


def next_id(ids: Iterable[int]) -> int:
    """Max existing id + 1, or 1 for an empty collection."""
    return max(ids, default=0) + 1


def _text(doc: dict[str, Any], key: str) -> str:
    value = doc[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be text, got {type(value).__name__}")
    return value


def _price(value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"price must be a number, got {type(value).__name__}")
    return value


def _mapping(doc: Any) -> dict[str, Any]:
    if not isinstance(doc, dict):
        raise TypeError(f"expected an object, got {type(doc).__name__}")
    return doc


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class ResetTicket:
    """Pending password reset: both halves exist together or not at all."""

    token: str
    expires: datetime

    def expired(self, now: datetime) -> bool:
        return now > self.expires


@dataclass
class UserRecord:
    id: int
    fullname: str
    username: str
    email: str
    password_hash: str
    role: str = ROLE_USER
    reset: Optional[ResetTicket] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "UserRecord":
        try:
            doc = _mapping(doc)
            reset = None
            if doc.get("resetToken") and doc.get("resetExpires"):
                reset = ResetTicket(
                    token=_text(doc, "resetToken"),
                    expires=_parse_timestamp(_text(doc, "resetExpires")),
                )
            role = doc.get("role") or ROLE_USER
            if role not in (ROLE_USER, ROLE_ADMIN):
                raise ValueError(f"unknown role {role!r}")
            return cls(
                id=int(doc["id"]),
                fullname=_text(doc, "fullname"),
                username=_text(doc, "username"),
                email=_text(doc, "email"),
                password_hash=_text(doc, "passwordHash"),
                role=role,
                reset=reset,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptDocumentError(f"Malformed user record: {exc}") from exc

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "id": self.id,
            "fullname": self.fullname,
            "username": self.username,
            "email": self.email,
            "passwordHash": self.password_hash,
            "role": self.role,
        }
        if self.reset:
            doc["resetToken"] = self.reset.token
            doc["resetExpires"] = self.reset.expires.isoformat()
        return doc

    def public_view(self) -> dict[str, Any]:
        """Everything a caller may see: no hash, no reset state."""
        return {
            "id": self.id,
            "fullname": self.fullname,
            "username": self.username,
            "email": self.email,
            "role": self.role,
        }


@dataclass
class PriceTier:
    price: int | float
    stock: int
    owner_user_id: int

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PriceTier":
        try:
            doc = _mapping(doc)
            return cls(price=_price(doc["price"]), stock=int(doc["stock"]), owner_user_id=int(doc["ownerUserId"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptDocumentError(f"Malformed price tier: {exc}") from exc

    def to_document(self) -> dict[str, Any]:
        return {"price": self.price, "stock": self.stock, "ownerUserId": self.owner_user_id}


@dataclass
class EventRecord:
    id: int
    name: str
    price_tiers: list[PriceTier] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "EventRecord":
        try:
            doc = _mapping(doc)
            tiers = [PriceTier.from_document(t) for t in doc.get("priceTiers") or []]
            event = cls(id=int(doc["id"]), name=_text(doc, "name"), price_tiers=tiers)
            event.sort_tiers()
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptDocumentError(f"Malformed event record: {exc}") from exc
        return event

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "priceTiers": [tier.to_document() for tier in self.price_tiers],
        }

    def find_tier(self, price: int | float) -> Optional[PriceTier]:
        for tier in self.price_tiers:
            if tier.price == price:
                return tier
        return None

    def sort_tiers(self) -> None:
        self.price_tiers.sort(key=lambda tier: tier.price)
