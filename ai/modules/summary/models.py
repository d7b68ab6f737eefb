from __future__ import annotations

from typing import List, Any

from pydantic import BaseModel, Field, model_validator


class Flashcard(BaseModel):
    question: str
    answer: str


class SummaryRecord(BaseModel):
    """Ordered summary points plus ordered question/answer flashcards."""

    summary_points: List[str] = Field(default_factory=list)
    flashcards: List[Flashcard] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def _accept_browser_layout(cls, data: Any) -> Any:
        # records saved by the browser page used {summary, flashcards: [{q, a}]}
        if not isinstance(data, dict) or 'summary_points' in data or 'summary' not in data:
            return data
        cards = []
        for card in data.get('flashcards') or []:
            if isinstance(card, dict) and 'question' not in card:
                card = {'question': card.get('q', ''), 'answer': card.get('a', '')}
            cards.append(card)
        return {'summary_points': data.get('summary') or [], 'flashcards': cards}

    def is_empty(self) -> bool:
        return not self.summary_points and not self.flashcards


class Notice(BaseModel):
    """Transient user-facing message produced by an operation."""

    message: str
    level: str = Field('info', description='info|warning|error')
