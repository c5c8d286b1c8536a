from __future__ import annotations

from fastapi import Request

from boxoffice.core.config import Settings
from boxoffice.services.inventory_service import InventoryStore
from boxoffice.services.user_service import UserStore


def _state(request: Request, name: str):
    value = getattr(getattr(request.app, "state", None), name, None)
    if value is None:
        raise RuntimeError(f"{name} not configured")
    return value


def get_user_store(request: Request) -> UserStore:
    return _state(request, "user_store")


def get_inventory_store(request: Request) -> InventoryStore:
    return _state(request, "inventory_store")


def get_app_settings(request: Request) -> Settings:
    return _state(request, "settings")
