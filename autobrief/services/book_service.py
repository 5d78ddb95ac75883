"""Book ingestion and study-artifact generation.

Business logic behind the gated endpoints:
- ingest: title -> structured knowledge, cached in the knowledge store by slug
- generate_artifact: stored knowledge -> slides or flashcards

Inputs arrive already sanitized by the admission pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from autobrief.adapters.knowledge_store.base import AbstractKnowledgeStore
from autobrief.adapters.llm.base import AbstractLLMClient
from autobrief.core.errors import LLMAppError, NotFoundAppError
from autobrief.schemas.book import (
    ArtifactResponse,
    BookKnowledge,
    FlashcardDeck,
    IngestResponse,
    SlideDeck,
)
from autobrief.utils.text_sanitizer import slugify

logger = logging.getLogger(__name__)

INGEST_SYSTEM_PROMPT = "You are a senior literary analyst. Output strict JSON only."
ARTIFACT_SYSTEM_PROMPT = "You are a specialized book summarizer that outputs only valid JSON."


def build_ingest_prompt(book_title: str) -> str:
    """Prompt asking the model to verify a title and analyse the book."""
    return f"""
FIRST, verify that the book "{book_title}" actually exists and is a known published work.

If the input is gibberish, random letters, or not a real book, output EXACTLY:
{{ "error": "Book not found", "is_real": false }}

If the book IS real, write a simple, clear analysis in plain English and output
strict JSON with this structure:
{{
  "is_real": true,
  "title": "{book_title}",
  "author": "Author name",
  "core_thesis": "What the book is about, why people like it, and what problem it solves.",
  "key_concepts": [{{ "title": "Main idea", "explanation": "Simple explanation." }}],
  "mental_models": [{{ "name": "Model or tool", "description": "How to use it in real life." }}],
  "misconceptions": ["Common mistake people make about this topic"]
}}

Rules:
- key_concepts: 5-7 items.
- mental_models: 3-5 practical thinking tools.
- No markdown or text outside the JSON object.
""".strip()


def build_slides_prompt(knowledge: dict[str, Any]) -> str:
    return f"""
Using the book analysis below, create an 8-slide deep dive deck.

Each slide's content must contain 80-120 words and may use <p>, <ul><li> and
<strong> tags for structure. Be specific to this book; avoid generic claims.

Slides, in order: the hook (author and audience), the core problem, the
central thesis, key concept I, key concept II, key concept III, the golden
nugget (a story, quote or case study), and a 3-step action plan.

Output JSON:
{{
  "book_title": "String",
  "author": "String",
  "theme_color": "#HexCode (warm, professional tone)",
  "slides": [{{ "title": "Slide title", "content": "<p>...</p>" }}]
}}

BOOK ANALYSIS:
{json.dumps(knowledge, ensure_ascii=False)}
""".strip()


def build_flashcards_prompt(knowledge: dict[str, Any]) -> str:
    return f"""
Using the book analysis below, write 10 study flashcards that test
understanding of the book's thesis, key concepts and mental models.
Questions must be answerable from the analysis; answers are 1-3 sentences.

Output JSON:
{{
  "book_title": "String",
  "cards": [{{ "question": "String", "answer": "String" }}]
}}

BOOK ANALYSIS:
{json.dumps(knowledge, ensure_ascii=False)}
""".strip()


_ARTIFACT_BUILDERS: dict[str, tuple[Callable[[dict[str, Any]], str], type[BaseModel]]] = {
    "slides": (build_slides_prompt, SlideDeck),
    "flashcards": (build_flashcards_prompt, FlashcardDeck),
}


class BookService:
    """Coordinates the LLM client and the knowledge store.

    Args:
        llm: Client used to produce knowledge and artifacts.
        store: Slug-keyed knowledge persistence.
    """

    def __init__(self, llm: AbstractLLMClient, store: AbstractKnowledgeStore) -> None:
        self.llm = llm
        self.store = store

    async def _generate(self, prompt: str, *, system_prompt: str, temperature: float) -> dict[str, Any]:
        try:
            return await self.llm.generate_json(prompt, system_prompt=system_prompt, temperature=temperature)
        except RuntimeError as exc:
            logger.error("book.llm_failed", extra={"error_msg": str(exc)})
            raise LLMAppError(
                code="llm_generation_failed",
                message="AI generation failed to produce a valid response",
            ) from exc

    async def ingest(self, book_title: str) -> IngestResponse:
        """Return knowledge for a title, generating and storing it on a miss.

        Raises:
            NotFoundAppError: If the model reports that the book does not exist.
            LLMAppError: If the model call fails or returns malformed knowledge.
        """
        slug = slugify(book_title)
        if not slug:
            raise NotFoundAppError(
                code="book_not_found",
                message="Sorry, I couldn't find that book. Please check the title.",
            )

        existing = await self.store.get(slug)
        if existing is not None:
            logger.info("book.ingest.cache_hit", extra={"slug": slug})
            return IngestResponse(source="database", data=existing.knowledge, slug=slug)

        logger.info("book.ingest.cache_miss", extra={"slug": slug})
        raw = await self._generate(
            build_ingest_prompt(book_title),
            system_prompt=INGEST_SYSTEM_PROMPT,
            temperature=0.1,
        )

        if raw.get("is_real") is False or raw.get("error"):
            logger.info("book.ingest.not_real", extra={"slug": slug})
            raise NotFoundAppError(
                code="book_not_found",
                message="Sorry, I couldn't find that book. Please check the title.",
                details={"slug": slug},
            )

        try:
            knowledge = BookKnowledge.model_validate({"title": book_title, **raw}).model_dump()
        except ValidationError as exc:
            logger.error("book.ingest.invalid_knowledge", extra={"error_count": exc.error_count()})
            raise LLMAppError(
                code="llm_invalid_knowledge",
                message="AI generation returned an incomplete book analysis",
            ) from exc

        try:
            await self.store.put(slug, book_title, knowledge)
        except RuntimeError as exc:
            # Still serve the fresh result; the next request regenerates it
            logger.error("book.ingest.store_failed", extra={"slug": slug, "error_msg": str(exc)})

        return IngestResponse(source="ai_generated", data=knowledge, slug=slug)

    async def generate_artifact(self, slug: str, artifact_type: str) -> ArtifactResponse:
        """Turn stored knowledge into the requested artifact.

        Raises:
            NotFoundAppError: If nothing has been ingested for ``slug``.
            LLMAppError: If the model call fails or returns a malformed artifact.
        """
        build_prompt, model = _ARTIFACT_BUILDERS[artifact_type]

        book = await self.store.get(slug)
        if book is None:
            raise NotFoundAppError(
                code="book_not_ingested",
                message="No analysis exists for this book yet. Ingest it first.",
                details={"slug": slug},
            )

        raw = await self._generate(
            build_prompt(book.knowledge),
            system_prompt=ARTIFACT_SYSTEM_PROMPT,
            temperature=0.3,
        )

        try:
            artifact = model.model_validate(raw).model_dump()
        except ValidationError as exc:
            logger.error(
                "book.artifact.invalid",
                extra={"slug": slug, "artifact_type": artifact_type, "error_count": exc.error_count()},
            )
            raise LLMAppError(
                code="llm_invalid_artifact",
                message="AI generation returned a malformed artifact",
                details={"artifact_type": artifact_type},
            ) from exc

        logger.info("book.artifact.generated", extra={"slug": slug, "artifact_type": artifact_type})
        return ArtifactResponse(slug=slug, artifact_type=artifact_type, data=artifact)
