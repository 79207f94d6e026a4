"""
Authentication header helpers, for ApiClient(default_headers=...) or
RequestConfig.with_headers(**...).
"""

from __future__ import annotations

import base64

from fpcore.core import constants as C


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def basic(username: str, password: str) -> dict[str, str]:
    credentials = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return {"Authorization": f"Basic {credentials}"}


def api_key(key: str, header: str = C.API_KEY_HEADER) -> dict[str, str]:
    return {header: key}
