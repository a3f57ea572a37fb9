"""Assistant chat endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile

from foodlens.api.dependencies import current_user_id, get_container
from foodlens.api.schemas import ChatRequest, parse_chat_history, serialize_summary
from foodlens.containers import AppContainer

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/chat")
async def chat(
    body: ChatRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Send a message to the nutrition assistant."""
    reply = await container.chat_service.send(
        user_id, body.message, [turn.to_turn() for turn in body.history]
    )
    return {"success": True, "response": reply}


@router.post("/chat-image")
async def chat_image(
    image: UploadFile = File(...),
    message: str | None = Form(None),
    chat_history: str | None = Form(None, alias="chatHistory"),
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Ask the nutrition assistant about a photo."""
    reply = await container.chat_service.send_with_image(
        user_id, message, image, parse_chat_history(chat_history)
    )
    return {"success": True, "response": reply}


@router.post("/daily-summary")
async def daily_summary(
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return an AI review of today's diary."""
    review = await container.chat_service.daily_summary(user_id)
    return {
        "success": True,
        "summary": review.text,
        "stats": serialize_summary(review.summary),
    }
