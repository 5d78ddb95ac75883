"""LLM adapter layer - abstracts over multiple LLM providers."""

from autobrief.adapters.llm.base import AbstractLLMClient
from autobrief.adapters.llm.factory import create_llm_client
from autobrief.adapters.llm.openai_client import OpenAIClient

__all__ = [
    "AbstractLLMClient",
    "OpenAIClient",
    "create_llm_client",
]
