# backend/itineria/api/routes_chat.py

from fastapi import APIRouter, HTTPException

from itineria.models.chat_models import AssistantReply, ChatIn
from itineria.services.chat_client import ChatClient

router = APIRouter(prefix="/chat", tags=["chat"])
chat_client = ChatClient()


# -----------------------------
# Chat endpoint - the caller owns the conversation history
# -----------------------------
@router.post("", response_model=AssistantReply, summary="Ask the travel assistant")
async def chat(req: ChatIn):
    if not req.messages or not req.messages[-1].content.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    reply = await chat_client.complete(req.messages)
    if reply is None:
        raise HTTPException(status_code=502, detail="Assistant unavailable")
    return reply
