"""Project a SummaryRecord into the output view.

The view is plain data so it can be inspected, exported and saved without a
display surface; ``OutputView.to_html`` produces the markup served to
browsers.
"""
from __future__ import annotations

import html
from typing import List, Optional, TYPE_CHECKING

from pydantic import BaseModel, Field, computed_field

from .models import SummaryRecord

if TYPE_CHECKING:
    from .state import AppState

KEY_POINTS_LABEL = 'Key Points'
KEY_POINTS_ICON = '\U0001F4DD'


class FlipCard(BaseModel):
    front_label: str = KEY_POINTS_LABEL
    points: List[str] = Field(default_factory=list)
    flipped: bool = False


class FlashcardCard(BaseModel):
    index: int
    question: str
    answer: str

    @computed_field
    @property
    def content_text(self) -> str:
        # text content of "<strong>Qn:</strong> q<br><strong>An:</strong> a"
        return f'Q{self.index}: {self.question}A{self.index}: {self.answer}'


class OutputView(BaseModel):
    visible: bool = False
    summary_items: List[str] = Field(default_factory=list)
    key_points_card: Optional[FlipCard] = None
    flashcard_cards: List[FlashcardCard] = Field(default_factory=list)

    def clear(self):
        self.summary_items = []
        self.key_points_card = None
        self.flashcard_cards = []

    def hide(self):
        self.visible = False

    def to_html(self) -> str:
        if not self.visible:
            return '<section id="outputSection" style="display:none"></section>'
        esc = html.escape
        parts = ['<section id="outputSection">', '<ul id="summaryList">']
        parts.extend(f'<li>{esc(item)}</li>' for item in self.summary_items)
        parts.append('</ul>')
        parts.append('<div id="flashcardsContainer">')
        card = self.key_points_card
        if card is not None:
            classes = 'flipcard flipped' if card.flipped else 'flipcard'
            parts.append(f'<div class="{classes}"><div class="flipcard-inner">')
            parts.append(
                f'<div class="flipcard-front"><div class="flipcard-title">{esc(card.front_label)}</div>'
                f'<div style="font-size:2rem">{KEY_POINTS_ICON}</div></div>'
            )
            parts.append('<div class="flipcard-back"><ul class="flipcard-points">')
            parts.extend(f'<li>{esc(p)}</li>' for p in card.points)
            parts.append('</ul></div></div></div>')
        for fc in self.flashcard_cards:
            parts.append(
                '<div class="flashcard no-flip"><div class="flashcard-content">'
                f'<strong>Q{fc.index}:</strong> {esc(fc.question)}<br>'
                f'<strong>A{fc.index}:</strong> {esc(fc.answer)}'
                '</div></div>'
            )
        parts.append('</div>')
        parts.append('</section>')
        return ''.join(parts)


def render_output(state: 'AppState', record: SummaryRecord) -> OutputView:
    """Replace whatever was rendered before with ``record``."""
    view = state.view
    view.visible = True
    view.clear()

    view.summary_items = list(record.summary_points)
    if record.summary_points:
        view.key_points_card = FlipCard(points=list(record.summary_points))
    view.flashcard_cards = [
        FlashcardCard(index=i, question=card.question, answer=card.answer)
        for i, card in enumerate(record.flashcards, start=1)
    ]
    return view


def toggle_key_points(state: 'AppState') -> bool:
    card = state.view.key_points_card
    if card is None:
        return False
    card.flipped = not card.flipped
    return card.flipped


def render_page(view: OutputView, dark_mode: bool = False) -> str:
    body_class = ' class="dark-mode"' if dark_mode else ''
    return (
        '<!DOCTYPE html><html><head><meta charset="utf-8"><title>Smart Summary</title></head>'
        f'<body{body_class}>{view.to_html()}</body></html>'
    )
