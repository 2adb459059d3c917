import logging
from dataclasses import dataclass
from typing import List, Optional

import anyio.to_thread
from openai import OpenAI, OpenAIError
from openai.types.chat import ChatCompletionMessageParam

from portfolio.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    content: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


class OpenAIChatClient:
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.base_url = base_url if base_url is not None else settings.OPENAI_BASE_URL
        self.model = model or settings.OPENAI_MODEL
        self._client: Optional[OpenAI] = None

    @property
    def client(self) -> OpenAI:
        # Built on first use so the app can start without a key (chat then fails per request)
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url or None)
        return self._client

    async def chat_completion(
        self,
        messages: List[ChatCompletionMessageParam],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_completion_tokens: int = 300,
    ) -> Optional[CompletionResult]:
        """One completion request, no retries. Returns None when the call fails."""

        def sync_call():
            return self.client.chat.completions.create(
                model=model or self.model,
                messages=messages,
                temperature=temperature,
                max_completion_tokens=max_completion_tokens,
            )

        try:
            completion = await anyio.to_thread.run_sync(sync_call)
        except OpenAIError as e:
            logger.error(f"OpenAI API call failed: {str(e)}")
            return None

        if not completion.choices:
            logger.error("OpenAI API returned no choices")
            return None

        usage = completion.usage
        return CompletionResult(
            content=completion.choices[0].message.content or "",
            prompt_tokens=usage.prompt_tokens if usage else None,
            completion_tokens=usage.completion_tokens if usage else None,
        )
