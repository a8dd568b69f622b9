from __future__ import annotations

import logging
from typing import Optional

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from app.core.config import GeneratorConfig
from app.core.errors import UpstreamError, UpstreamRateLimitedError, UpstreamUsageLimitError

logger = logging.getLogger(__name__)


def build_client(config: GeneratorConfig, http_client: Optional[httpx.AsyncClient] = None) -> AsyncOpenAI:
    """AsyncOpenAI client aimed at the chat-completion gateway; retries are left to the caller."""
    return AsyncOpenAI(
        api_key=config.llm_api_key,
        base_url=config.llm_base_url,
        timeout=config.llm_timeout_seconds,
        max_retries=0,
        http_client=http_client,
    )


class ChatGateway:
    def __init__(self, config: GeneratorConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.model = config.llm_model
        self.client = build_client(config, http_client)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Single non-streaming completion; returns the first choice's text or ""."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except APIStatusError as exc:
            if exc.status_code == 429:
                raise UpstreamRateLimitedError() from exc
            if exc.status_code == 402:
                raise UpstreamUsageLimitError() from exc
            logger.error("AI gateway error: %s %s", exc.status_code, exc.response.text)
            raise UpstreamError() from exc
        except APIConnectionError as exc:
            logger.error("AI gateway unreachable: %s", exc)
            raise UpstreamError() from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
