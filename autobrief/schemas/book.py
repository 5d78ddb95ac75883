"""Pydantic schemas for book knowledge and generated study artifacts."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class KeyConcept(BaseModel):
    title: str
    explanation: str


class MentalModel(BaseModel):
    name: str
    description: str


class BookKnowledge(BaseModel):
    """Structured analysis of a book, as produced by the ingestion prompt."""

    model_config = ConfigDict(extra="ignore")

    is_real: bool = Field(True, description="False when the model could not identify the book.")
    title: str = Field(..., description="Book title as submitted.")
    author: str | None = Field(default=None, description="Author, when the model knows it.")
    core_thesis: str = Field(..., description="What the book is about and what problem it solves.")
    key_concepts: list[KeyConcept] = Field(default_factory=list)
    mental_models: list[MentalModel] = Field(default_factory=list)
    misconceptions: list[str] = Field(default_factory=list)


class IngestResponse(BaseModel):
    source: Literal["database", "ai_generated"] = Field(
        ..., description="Whether the knowledge came from the store or a fresh LLM call."
    )
    data: dict[str, Any] = Field(..., description="Book knowledge object.")
    slug: str = Field(..., description="Lookup key for artifact generation.")


class Slide(BaseModel):
    title: str
    content: str = Field(..., description="Slide body; may contain basic HTML (p, ul, li, strong).")


class SlideDeck(BaseModel):
    model_config = ConfigDict(extra="ignore")

    book_title: str
    author: str | None = None
    theme_color: str | None = Field(default=None, description="Hex color suggested for the deck.")
    slides: list[Slide] = Field(..., min_length=1)


class Flashcard(BaseModel):
    question: str
    answer: str


class FlashcardDeck(BaseModel):
    model_config = ConfigDict(extra="ignore")

    book_title: str
    cards: list[Flashcard] = Field(..., min_length=1)


class ArtifactResponse(BaseModel):
    slug: str
    artifact_type: Literal["slides", "flashcards"]
    data: dict[str, Any] = Field(..., description="SlideDeck or FlashcardDeck payload.")
