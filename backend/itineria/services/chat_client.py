# backend/itineria/services/chat_client.py

import string
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from itineria.core.config_loader import settings
from itineria.core.logger import logger
from itineria.models.chat_models import AssistantReply, ChatMessage, Message


# Characters stripped from both ends of an assistant reply
REPLY_TRIM_CHARS = string.whitespace + '"'


class ChatClient:
    """
    Chat-completion client for the travel assistant.

    `complete` never raises: any network, API or decoding problem is logged
    and reported as None. Requests are not retried.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.chat_model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.openai_base_url,
                timeout=settings.request_timeout,
                max_retries=0,
            )
        return self._client

    async def complete(self, history: List[Message]) -> Optional[AssistantReply]:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[m.model_dump() for m in history],
            )
        except OpenAIError as e:
            logger.error(f"Unable to send message: {e}")
            return None
        except ValueError as e:
            logger.error(f"Unable to decode chat completion: {e}")
            return None

        # The SDK builds responses without validation, so any field may be missing
        try:
            if not completion.choices:
                logger.warning(f"Chat completion {completion.id} returned no choices")
                return None

            content = completion.choices[0].message.content
            if content is None:
                logger.warning(f"Chat completion {completion.id} has no content")
                return None

            return AssistantReply(id=completion.id, content=content.strip(REPLY_TRIM_CHARS))
        except (AttributeError, TypeError, IndexError, ValidationError) as e:
            logger.error(f"Unable to decode chat completion: {e}")
            return None


class ChatSession:
    """In-memory conversation with the assistant. Nothing outlives the process."""

    def __init__(self, client: Optional[ChatClient] = None):
        self.client = client or ChatClient()
        self.messages: List[ChatMessage] = []

    @property
    def last_message_id(self) -> Optional[str]:
        return self.messages[-1].id if self.messages else None

    async def send(self, text: str) -> Optional[ChatMessage]:
        if not text.strip():
            return None

        self.messages.append(ChatMessage(content=text, sender="user"))

        reply = await self.client.complete([m.to_message() for m in self.messages])
        if reply is None:
            return None

        assistant_message = ChatMessage(id=reply.id, content=reply.content, sender="assistant")
        self.messages.append(assistant_message)
        return assistant_message
