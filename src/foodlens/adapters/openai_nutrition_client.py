"""OpenAI Responses API client for nutrition tasks."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import openai
from openai import AsyncOpenAI

from foodlens.domain.ai import ChatTurn
from foodlens.errors import UpstreamUnavailable
from foodlens.services.ai import NutritionAIClient

logger = logging.getLogger(__name__)

OVERLOADED_STATUS = 503


@dataclass
class OpenAINutritionClient(NutritionAIClient):
    """Nutrition AI client backed by OpenAI Responses API.

    A 503 answer means the provider is overloaded and is retried after
    ``2 * retry`` seconds, up to ``max_retries`` times. The SDK's own retries
    are disabled so this loop is the only one.
    """

    client: AsyncOpenAI
    max_retries: int = 3
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    @classmethod
    def create(
        cls, api_key: str, timeout: float = 60.0, max_retries: int = 3
    ) -> "OpenAINutritionClient":
        """Create a client with a per-call timeout."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0),
            max_retries=max_retries,
        )

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        output_text = await self._create(request_payload)
        return json.loads(output_text)

    async def complete_text(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        history: list[ChatTurn] | None = None,
        image_data_url: str | None = None,
    ) -> str:
        """Call OpenAI Responses API for a plain-text reply."""
        messages: list[dict[str, object]] = [
            {"role": turn.role, "content": turn.text} for turn in history or []
        ]
        if image_data_url:
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": prompt},
                        {"type": "input_image", "image_url": image_data_url},
                    ],
                }
            )
        else:
            messages.append({"role": "user", "content": prompt})
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": messages,
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}
        return await self._create(request_payload)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()

    async def _create(self, request_payload: dict[str, object]) -> str:
        retry = 0
        while True:
            try:
                response = await self.client.responses.create(**request_payload)
                break
            except openai.InternalServerError as exc:
                if exc.status_code != OVERLOADED_STATUS:
                    logger.warning(
                        "OpenAI server error", extra={"status": exc.status_code}
                    )
                    raise UpstreamUnavailable() from exc
                if retry >= self.max_retries:
                    logger.warning(
                        "OpenAI still overloaded, giving up",
                        extra={"attempts": retry + 1},
                    )
                    raise UpstreamUnavailable() from exc
                retry += 1
                delay = 2 * retry
                logger.warning(
                    "OpenAI overloaded, retrying",
                    extra={"retry": retry, "delay_seconds": delay},
                )
                await self.sleep(delay)
            except (openai.APIConnectionError, openai.RateLimitError) as exc:
                logger.warning("OpenAI request failed", extra={"error": str(exc)})
                raise UpstreamUnavailable() from exc

        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text
