from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from boxoffice.routers.deps import get_inventory_store
from boxoffice.services.inventory_service import InventoryStore

router = APIRouter(prefix="/events", tags=["events"])


class TierIn(BaseModel):
    # Loosely typed: InventoryStore.upsert_tier validates and reports missing_field.
    eventName: Any = None
    price: Any = None
    amount: Any = None
    ownerUserId: Any = None


@router.get("")
def list_events(inventory: InventoryStore = Depends(get_inventory_store)):
    return inventory.list_events()


@router.post("/tiers")
def add_tickets(payload: TierIn, inventory: InventoryStore = Depends(get_inventory_store)):
    result = inventory.upsert_tier(payload.eventName, payload.price, payload.amount, payload.ownerUserId)
    return result.as_dict()
