from __future__ import annotations

from fastapi import APIRouter, Depends

from boxoffice.routers.deps import get_user_store
from boxoffice.services.user_service import UserStore

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
def list_users(users: UserStore = Depends(get_user_store)):
    return users.list_public()


@router.get("/{username}")
def get_user(username: str, users: UserStore = Depends(get_user_store)):
    return users.get(username)


@router.post("/{username}/promote")
def promote_user(username: str, users: UserStore = Depends(get_user_store)):
    users.promote(username)
    return {"success": True}


@router.delete("/{username}")
def delete_user(username: str, users: UserStore = Depends(get_user_store)):
    users.delete(username)
    return {"success": True}
