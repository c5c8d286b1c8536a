"""Event inventory use cases (listing, tier upserts)."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterator, Optional
import logging
import math

from boxoffice.domain.errors import MissingFieldError
from boxoffice.domain.records import EventRecord, PriceTier, next_id, same_text
from boxoffice.repositories.json_storage import DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class TierUpsertResult:
    event_id: int
    event_name: str
    price: int | float
    stock: int
    created_event: bool
    created_tier: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "eventId": self.event_id,
            "eventName": self.event_name,
            "price": self.price,
            "stock": self.stock,
            "createdEvent": self.created_event,
            "createdTier": self.created_tier,
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def normalize_price(value: Any) -> Optional[int | float]:
    """Non-negative finite price with integral floats folded to int, else None."""
    if not _is_number(value) or not math.isfinite(value) or value < 0:
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


class InventoryStore:
    """Events with nested price tiers persisted as one JSON array."""

    def __init__(self, storage: DocumentStore) -> None:
        self.storage = storage

    def _events(self) -> list[EventRecord]:
        return [EventRecord.from_document(doc) for doc in self.storage.load()]

    @contextmanager
    def _edit(self) -> Iterator[list[EventRecord]]:
        with self.storage.transaction() as docs:
            events = [EventRecord.from_document(doc) for doc in docs]
            yield events
            docs[:] = [event.to_document() for event in events]

    def list_events(self) -> list[dict]:
        return [event.to_document() for event in self._events()]

    def upsert_tier(self, event_name: str, price: Any, additional_stock: Any, owner_user_id: Any) -> TierUpsertResult:
        """
        Add stock to the (event, price) tier, creating the event and/or tier on first use.

        Event names match case-insensitively and keep their first spelling.
        An existing tier keeps its original owner.
        """
        name = (event_name or "").strip() if isinstance(event_name, str) else ""
        amount = _positive_int(additional_stock)
        owner = _positive_int(owner_user_id)
        tier_price = normalize_price(price)
        if not name or tier_price is None or amount is None or owner is None:
            raise MissingFieldError("All fields are required.")

        with self._edit() as events:
            event = next((e for e in events if same_text(e.name, name)), None)
            created_event = event is None
            if event is None:
                event = EventRecord(id=next_id(e.id for e in events), name=name)
                events.append(event)

            tier = event.find_tier(tier_price)
            created_tier = tier is None
            if tier is None:
                tier = PriceTier(price=tier_price, stock=amount, owner_user_id=owner)
                event.price_tiers.append(tier)
            else:
                tier.stock += amount
            event.sort_tiers()

        logger.info(
            "Tier upsert event=%s (id=%s) price=%s +%s -> stock=%s",
            event.name, event.id, tier.price, amount, tier.stock,
        )
        return TierUpsertResult(
            event_id=event.id,
            event_name=event.name,
            price=tier.price,
            stock=tier.stock,
            created_event=created_event,
            created_tier=created_tier,
        )
