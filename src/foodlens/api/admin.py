"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from foodlens.api.schemas import SubscriptionGrantRequest  # noqa: TC001

if TYPE_CHECKING:
    from foodlens.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/users", dependencies=[Depends(require_admin)])
async def list_users(request: Request) -> dict[str, object]:
    """Return all users with tier, streak and today's usage."""
    container: AppContainer = request.app.state.container
    return {"success": True, "users": container.admin_service.list_users()}


@router.post("/users/{user_id}/subscription", dependencies=[Depends(require_admin)])
async def grant_subscription(
    user_id: UUID, body: SubscriptionGrantRequest, request: Request
) -> dict[str, object]:
    """Set a user's subscription tier."""
    container: AppContainer = request.app.state.container
    user = container.admin_service.grant(user_id, body.type, body.duration_days)
    expires_at = user.subscription.expires_at
    return {
        "success": True,
        "subscription": {
            "type": user.subscription.type,
            "expiresAt": expires_at.isoformat() if expires_at else None,
        },
    }


@router.get("/stats", dependencies=[Depends(require_admin)])
async def stats(request: Request) -> dict[str, object]:
    """Return user counts and today's usage totals."""
    container: AppContainer = request.app.state.container
    return {"success": True, "stats": container.admin_service.stats()}


@router.post("/reconcile", dependencies=[Depends(require_admin)])
async def reconcile(request: Request) -> dict[str, object]:
    """Run the streak and subscription reconciliation now."""
    container: AppContainer = request.app.state.container
    report = container.admin_service.reconcile()
    return {"success": True, "report": report.as_dict()}
