"""Shared-secret admin gate for mutating endpoints.

Resolution order for the caller's secret:
1. X-Admin-Password header
2. adminPassword body field (multipart/urlencoded form or JSON object)
3. adminPassword query parameter
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, Header, Request

from .errors import AdminAuthError

logger = logging.getLogger("kitchen_stories.auth")

ADMIN_HEADER = "X-Admin-Password"
ADMIN_FIELD = "adminPassword"

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")
_JSON_TYPE = "application/json"


class AdminGate:
    """Stateless check against the configured admin secret."""

    def __init__(self, secret: str):
        self._secret = secret.encode("utf-8")

    def check(self, candidate: Optional[str]) -> bool:
        if not candidate:
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), self._secret)


def get_admin_gate(request: Request) -> AdminGate:
    return request.app.state.context.gate


async def resolve_admin_secret(request: Request, header_value: Optional[str]) -> Optional[str]:
    if header_value:
        return header_value

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_TYPES):
        # Starlette caches the parsed form, so the endpoint's own Form/File params still work
        form = await request.form()
        value = form.get(ADMIN_FIELD)
        if isinstance(value, str) and value:
            return value
    elif content_type.startswith(_JSON_TYPE):
        try:
            body = await request.json()
        except ValueError:
            logger.warning(f"Unreadable JSON body on {request.method} {request.url.path}")
            body = None
        value = body.get(ADMIN_FIELD) if isinstance(body, dict) else None
        if isinstance(value, str) and value:
            return value

    return request.query_params.get(ADMIN_FIELD)


async def require_admin(
    request: Request,
    x_admin_password: Optional[str] = Header(None, alias=ADMIN_HEADER),
    gate: AdminGate = Depends(get_admin_gate),
) -> None:
    secret = await resolve_admin_secret(request, x_admin_password)
    if not gate.check(secret):
        client = request.client.host if request.client else "unknown"
        logger.warning(f"Rejected admin request {request.method} {request.url.path} from {client}")
        raise AdminAuthError()


async def require_admin_for_favorites(
    request: Request,
    x_admin_password: Optional[str] = Header(None, alias=ADMIN_HEADER),
    gate: AdminGate = Depends(get_admin_gate),
) -> None:
    if request.app.state.context.settings.gate_favorite_toggle:
        await require_admin(request, x_admin_password, gate)
