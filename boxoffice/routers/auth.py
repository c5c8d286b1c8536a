from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from boxoffice.core.config import Settings
from boxoffice.core.rate_limiter import rate_limit_ip
from boxoffice.routers.deps import get_app_settings, get_user_store
from boxoffice.services.user_service import UserStore

router = APIRouter(tags=["auth"])


class RegisterIn(BaseModel):
    fullname: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginIn(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ForgotIn(BaseModel):
    identifier: Optional[str] = None


class ResetIn(BaseModel):
    email: Optional[str] = None
    token: Optional[str] = None
    password: Optional[str] = None


@router.post("/register")
def register(payload: RegisterIn, users: UserStore = Depends(get_user_store)):
    user = users.register(payload.fullname, payload.username, payload.email, payload.password, payload.role)
    return {"success": True, "user": user}


@router.post("/login")
def login(payload: LoginIn, request: Request, users: UserStore = Depends(get_user_store)):
    rate_limit_ip(request, "auth:login", limit=10, window_seconds=60)
    user = users.authenticate(payload.username or "", payload.password or "")
    return {"success": True, "user": user}


@router.post("/auth/forgot")
def forgot_password(
    payload: ForgotIn,
    request: Request,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
):
    rate_limit_ip(request, "auth:forgot", limit=5, window_seconds=300)
    token = users.request_reset(payload.identifier or "")
    body: dict = {"success": True}
    if settings.app_env == "dev":
        body["token"] = token
    return body


@router.post("/auth/reset")
def reset_password(payload: ResetIn, users: UserStore = Depends(get_user_store)):
    users.reset_password(payload.email or "", payload.token or "", payload.password or "")
    return {"success": True}
