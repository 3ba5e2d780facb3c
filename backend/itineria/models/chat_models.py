# backend/itineria/models/chat_models.py

from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Literal
from uuid import uuid4


class Message(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class AssistantReply(BaseModel):
    id: str
    content: str


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    content: str
    created_at: datetime = Field(default_factory=datetime.now)
    sender: Literal["user", "assistant"] = "user"

    def to_message(self) -> Message:
        return Message(role=self.sender, content=self.content)


class ChatIn(BaseModel):
    messages: List[Message]
