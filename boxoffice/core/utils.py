"""
Utility helpers shared across routers/services.
"""

from urllib.parse import urlencode
from typing import Optional

from .config import get_settings


def absolute_url(path: str, base: Optional[str] = None, **query: str) -> str:
    """
    Turn a relative path into an absolute URL rooted at PUBLIC_BASE_URL.
    Keyword arguments are appended as an encoded query string.
    """
    settings = get_settings()
    base_url = (base or settings.public_base_url).rstrip("/")
    if not path:
        path = "/"
    if not (path.startswith("http://") or path.startswith("https://")):
        if not path.startswith("/"):
            path = "/" + path
        path = base_url + path
    if query:
        path = f"{path}?{urlencode(query)}"
    return path
