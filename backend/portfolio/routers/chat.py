from typing import Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from portfolio.database import get_db
from portfolio.schemas.chat import ChatRequest, UsageResponse, SuggestedQuestionsResponse
from portfolio.services.chat_service import ChatGateway, ClientContext
from portfolio.services.geolocation import get_client_ip
from portfolio.services.rate_limiter import DailyRequestCounter
from portfolio.utils.dependencies import get_chat_gateway, get_rate_limiter
from portfolio.utils.logger import chat_logger

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.post(
    "",
    summary="Ask the persona a question",
    description="""
Answers a visitor question in the site owner's voice.

- `message` is required (400 otherwise).
- `history`: earlier turns of this chat, roles `user` / `assistant` only.
- `conversationId`: omit on the first message; reuse the returned value afterwards.
- 429 once the daily request limit is used up, 500 if the language model call fails.
""",
)
async def chat(
    body: ChatRequest,
    request: Request,
    db: Optional[Session] = Depends(get_db),
    gateway: ChatGateway = Depends(get_chat_gateway),
):
    reply = await gateway.handle_message(
        db,
        body.message,
        history=[h.model_dump() for h in body.history or []],
        session_id=body.session_id,
        conversation_id=body.conversation_id,
        client=ClientContext(
            ip=get_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        ),
    )
    chat_logger.info(f"Chat reply sent (conversation {reply.conversation_id}, {reply.usage.remaining} requests left today)")
    return reply.to_dict()


@router.get("/usage", response_model=UsageResponse, summary="Today's chat usage")
def chat_usage(rate_limiter: DailyRequestCounter = Depends(get_rate_limiter)):
    usage = rate_limiter.usage()
    return UsageResponse(
        usage=usage.count,
        limit=usage.limit,
        remaining=usage.remaining,
        reset_date=usage.date.isoformat(),
    )


@router.get("/suggested-questions", response_model=SuggestedQuestionsResponse, summary="Three random starter questions")
def suggested_questions(gateway: ChatGateway = Depends(get_chat_gateway)):
    return SuggestedQuestionsResponse(suggested_questions=gateway.suggestions())
