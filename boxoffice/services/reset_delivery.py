"""Out-of-band delivery of password reset tokens."""

from __future__ import annotations

from typing import Any, Callable, Mapping
import html

from boxoffice.core.mailer import send_email
from boxoffice.core.utils import absolute_url

# (public user view, token) -> whether the token reached the user
ResetDelivery = Callable[[Mapping[str, Any], str], bool]


def email_reset_delivery(user: Mapping[str, Any], token: str) -> bool:
    email = user.get("email") or ""
    reset_url = absolute_url("/reset", email=email, token=token)
    name = html.escape(user.get("fullname") or user.get("username") or "")
    html_body = f"""
    <p>Hi {name},</p>
    <p>We received a request to reset your password. The link below is valid for one hour.</p>
    <p><a href="{reset_url}" style="background:#0ea5e9;color:#fff;padding:12px 18px;border-radius:8px;text-decoration:none;">Reset password</a></p>
    <p>If you did not ask for this, ignore this message.</p>
    """
    return send_email("Reset your password", email, html_body, f"Use this link to reset your password: {reset_url}")


def no_delivery(user: Mapping[str, Any], token: str) -> bool:
    """Delivery used when the caller conveys the token itself."""
    return False
