"""OpenAI-compatible LLM client adapter (OpenAI, Groq, ...)."""

import json
import re
from typing import Any

from openai import AsyncOpenAI

from autobrief.adapters.llm.base import AbstractLLMClient

DEFAULT_SYSTEM_PROMPT = "Output JSON only. No extra text or markdown formatting."

_CODE_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def _strip_code_fences(content: str) -> str:
    """Remove markdown code fences some models wrap around JSON."""
    return _CODE_FENCE_RE.sub("", content).strip()


class OpenAIClient(AbstractLLMClient):
    """Client for chat completions returning a JSON object.

    Uses the official OpenAI Python SDK; any OpenAI-compatible provider works
    through ``base_url``.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 45.0,
    ) -> None:
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model

    async def generate_json(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Generate a JSON object using chat completions in JSON mode.

        Args:
            prompt: User prompt to send to the model.
            system_prompt: Optional system instruction.
            **kwargs: Provider options (temperature, max_tokens, top_p, seed).

        Returns:
            dict[str, Any]: Parsed JSON object from the LLM response.

        Raises:
            RuntimeError: If the API call fails or the response is not a JSON object.
        """
        messages = [
            {"role": "system", "content": system_prompt or DEFAULT_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": kwargs.pop("temperature", 0.2),
            "response_format": {"type": "json_object"},
        }

        for param in ("max_tokens", "top_p", "seed"):
            if param in kwargs:
                request_params[param] = kwargs[param]

        try:
            response = await self.client.chat.completions.create(**request_params)
            content = response.choices[0].message.content
        except Exception as exc:
            raise RuntimeError(f"OpenAI API error: {str(exc)}") from exc

        if not content:
            raise RuntimeError("LLM returned empty response")

        try:
            parsed = json.loads(_strip_code_fences(content))
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"LLM returned invalid JSON: {str(exc)}") from exc

        if not isinstance(parsed, dict):
            raise RuntimeError("LLM returned JSON that is not an object")

        return parsed
