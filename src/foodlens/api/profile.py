"""Account, profile, limits and streak endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile

from foodlens.api.dependencies import current_user_id, get_container
from foodlens.api.schemas import (
    ProfileUpdateRequest,
    RegisterRequest,
    serialize_streak,
    serialize_user,
)
from foodlens.containers import AppContainer

router = APIRouter(prefix="/api", tags=["profile"])


@router.post("/auth/register", status_code=201)
async def register(
    body: RegisterRequest, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Create an account."""
    user = container.user_service.register(body.email, body.name)
    limits = container.limit_gate.overview(user.id)
    return {"success": True, "user": serialize_user(user, limits)}


@router.get("/profile")
async def get_profile(
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the caller's profile with tier, usage and streak."""
    limits = container.limit_gate.overview(user_id)
    user = container.user_service.get_user(user_id)
    return {"success": True, "user": serialize_user(user, limits)}


@router.put("/profile")
async def update_profile(
    body: ProfileUpdateRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Apply a partial profile update."""
    user = container.user_service.update_profile(
        user_id, body.model_dump(exclude_unset=True)
    )
    limits = container.limit_gate.overview(user_id)
    return {"success": True, "user": serialize_user(user, limits)}


@router.delete("/profile")
async def delete_profile(
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Delete the caller's account and everything stored for it."""
    container.user_service.delete_account(user_id)
    return {"success": True}


@router.get("/profile/limits")
async def get_limits(
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the effective tier and today's usage against limits."""
    return {"success": True, **container.limit_gate.overview(user_id)}


@router.post("/profile/avatar")
async def upload_avatar(
    avatar: UploadFile = File(...),
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Replace the caller's avatar."""
    user = await container.user_service.upload_avatar(user_id, avatar)
    return {"success": True, "avatar": user.avatar.to_data_url()}


@router.post("/streak")
async def record_streak(
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, int]:
    """Record a visit and return the streak counters."""
    streak = container.streak_service.record_activity(user_id)
    return serialize_streak(streak)
