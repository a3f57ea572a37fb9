"""Request dependencies shared by the routers."""

from uuid import UUID

from fastapi import Header, HTTPException, Request, status

from foodlens.containers import AppContainer
from foodlens.errors import ValidationError


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


async def current_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the caller's id as forwarded by the authenticating proxy."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return UUID(x_user_id)
    except ValueError as exc:
        raise ValidationError("X-User-Id must be a UUID", field="X-User-Id") from exc
