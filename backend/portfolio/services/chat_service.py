"""
Persona chat gateway.

Flow per message: validate -> daily counter -> conversation (create or reuse)
-> store user message -> completion -> store assistant message -> reply.
Storage is best effort throughout; only the completion call can fail the
request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio.models.chat_conversation import ChatConversation
from portfolio.models.chat_message import ChatMessage
from portfolio.services.geolocation import GeoResolver
from portfolio.services.llm_client import OpenAIChatClient
from portfolio.services.persona import SUGGESTED_QUESTIONS, build_system_prompt, pick_suggested_questions
from portfolio.services.rate_limiter import DailyRequestCounter, RequestUsage
from portfolio.utils.exceptions import BadRequestException, InternalServerException, RateLimitException
from portfolio.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class ClientContext:
    """What the HTTP layer knows about the caller."""
    ip: str = "0.0.0.0"
    user_agent: str = ""


@dataclass
class ChatReply:
    response: str
    suggested_questions: List[str]
    conversation_id: Optional[int]
    usage: RequestUsage

    def to_dict(self) -> Dict[str, Any]:
        return {
            "response": self.response,
            "suggestedQuestions": self.suggested_questions,
            "conversationId": self.conversation_id,
            "usage": self.usage.to_dict(),
        }


async def ensure_conversation(
    db: Session,
    conversation_id: Optional[int],
    session_id: Optional[str],
    client: ClientContext,
    geo_resolver: GeoResolver,
) -> Optional[int]:
    """Reuse the caller's conversation when it exists, otherwise start a new one.

    Returns None when storage fails; the chat goes on without a conversation.
    """
    try:
        if conversation_id is not None:
            existing = db.query(ChatConversation.id).filter(ChatConversation.id == conversation_id).first()
            if existing:
                return existing.id
            logger.warning(f"Conversation {conversation_id} not found, starting a new one")

        geo = await geo_resolver.resolve(client.ip)
        conversation = ChatConversation(
            session_id=session_id or None,
            ip_address=client.ip,
            user_agent=client.user_agent,
            country=geo.country,
            city=geo.city,
        )
        db.add(conversation)
        db.commit()
        db.refresh(conversation)
        return conversation.id
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create conversation: {str(e)}")
        return None


def store_user_message(db: Session, conversation_id: int, content: str) -> bool:
    try:
        db.add(ChatMessage(conversation_id=conversation_id, role="user", content=content))
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store user message: {str(e)}")
        return False


def store_assistant_message(
    db: Session,
    conversation_id: int,
    content: str,
    prompt_tokens: Optional[int] = None,
    completion_tokens: Optional[int] = None,
) -> bool:
    """Store the reply and advance the conversation by one exchange (two messages)."""
    try:
        db.add(ChatMessage(
            conversation_id=conversation_id,
            role="assistant",
            content=content,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        ))
        db.query(ChatConversation).filter(ChatConversation.id == conversation_id).update(
            {
                ChatConversation.last_message_at: utcnow(),
                ChatConversation.message_count: ChatConversation.message_count + 2,
            },
            synchronize_session=False,
        )
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store AI response: {str(e)}")
        return False


class ChatGateway:
    def __init__(
        self,
        llm_client: OpenAIChatClient,
        rate_limiter: DailyRequestCounter,
        geo_resolver: GeoResolver,
        owner_name: str,
        biography: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_completion_tokens: int = 300,
        history_limit: int = 20,
        suggested_questions: Sequence[str] = SUGGESTED_QUESTIONS,
    ):
        self.llm_client = llm_client
        self.rate_limiter = rate_limiter
        self.geo_resolver = geo_resolver
        self.system_prompt = build_system_prompt(owner_name, biography)
        self.model = model
        self.temperature = temperature
        self.max_completion_tokens = max_completion_tokens
        self.history_limit = history_limit
        self.suggested_questions = list(suggested_questions)

    def build_messages(self, message: str, history: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
        recent = list(history)[-self.history_limit:] if self.history_limit > 0 else []
        return [
            {"role": "system", "content": self.system_prompt},
            *({"role": h["role"], "content": h["content"]} for h in recent),
            {"role": "user", "content": message},
        ]

    def suggestions(self) -> List[str]:
        return pick_suggested_questions(self.suggested_questions, k=3)

    async def handle_message(
        self,
        db: Optional[Session],
        message: Optional[str],
        history: Optional[Sequence[Dict[str, str]]] = None,
        session_id: Optional[str] = None,
        conversation_id: Optional[int] = None,
        client: Optional[ClientContext] = None,
    ) -> ChatReply:
        if not message or not message.strip():
            raise BadRequestException("Message is required")

        logger.info(f"Chat message received: {message[:200]}")

        if not self.rate_limiter.try_consume():
            logger.warning(f"Daily chat limit of {self.rate_limiter.limit} reached")
            raise RateLimitException(limit=self.rate_limiter.limit)

        client = client or ClientContext()

        if db is not None:
            conversation_id = await ensure_conversation(db, conversation_id, session_id, client, self.geo_resolver)
            if conversation_id is not None:
                store_user_message(db, conversation_id, message)

        messages = self.build_messages(message, history or [])
        try:
            result = await self.llm_client.chat_completion(
                messages,
                model=self.model,
                temperature=self.temperature,
                max_completion_tokens=self.max_completion_tokens,
            )
        except Exception as e:
            logger.error(f"Error in chat completion: {str(e)}")
            result = None

        if result is None:
            raise InternalServerException("Failed to process chat request")

        if db is not None and conversation_id is not None:
            store_assistant_message(db, conversation_id, result.content, result.prompt_tokens, result.completion_tokens)

        return ChatReply(
            response=result.content,
            suggested_questions=self.suggestions(),
            conversation_id=conversation_id,
            usage=self.rate_limiter.usage(),
        )
