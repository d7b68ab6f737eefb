"""Turn a free-form model response into a SummaryRecord.

Two independent extractors run over the same immutable text:

- ``extract_bullets`` collects lines that start with a bullet glyph
- ``extract_qa_pairs`` collects ``Q: ... A: ...`` pairs, which may span lines

``parse_response`` composes them and degrades to line-based points and
synthesized flashcards when either extractor finds nothing. It never raises.
"""
from __future__ import annotations

import re
from typing import List, Optional

from .models import Flashcard, SummaryRecord

BULLET_GLYPHS = '-*•'
FALLBACK_POINT_LIMIT = 7
SYNTHESIZED_FLASHCARD_LIMIT = 5

_BULLET_RE = re.compile(r'^[' + re.escape(BULLET_GLYPHS) + r']\s+(.+?)\r?$', re.MULTILINE)
# answer runs lazily up to the next "Q:" or the very end of the text
_QA_RE = re.compile(r'Q:\s*(.+?)\s*A:\s*(.+?)(?=Q:|\Z)', re.DOTALL)


def extract_bullets(text: str) -> List[str]:
    return [m.group(1) for m in _BULLET_RE.finditer(text or '')]


def extract_qa_pairs(text: str) -> List[Flashcard]:
    return [
        Flashcard(question=m.group(1).strip(), answer=m.group(2).strip())
        for m in _QA_RE.finditer(text or '')
    ]


def fallback_points(text: str, limit: int = FALLBACK_POINT_LIMIT) -> List[str]:
    lines = [line.strip() for line in (text or '').split('\n')]
    return [line for line in lines if line][:limit]


def synthesize_flashcards(points: List[str], limit: int = SYNTHESIZED_FLASHCARD_LIMIT) -> List[Flashcard]:
    return [Flashcard(question=f'What does this mean: "{p}"?', answer=p) for p in points[:limit]]


def parse_response(text: Optional[str]) -> SummaryRecord:
    text = text or ''
    points = extract_bullets(text)
    cards = extract_qa_pairs(text)
    if not points:
        points = fallback_points(text)
    if not cards:
        cards = synthesize_flashcards(points)
    return SummaryRecord(summary_points=points, flashcards=cards)


def used_fallback(text: Optional[str]) -> bool:
    """True when either extractor found nothing and a degraded path was taken."""
    text = text or ''
    return not extract_bullets(text) or not extract_qa_pairs(text)
