from __future__ import annotations

from .renderer import OutputView

EXPORT_FILENAME = 'smart-summary.txt'
EXPORT_MEDIA_TYPE = 'text/plain'


def export_text(view: OutputView) -> str:
    """Plain-text rendition rebuilt from what is currently rendered."""
    txt = 'Summary:\n'
    for item in view.summary_items:
        txt += f'- {item}\n'
    txt += '\nFlashcards:\n'
    # the key-points flip card is not a flashcard and is never exported
    for card in view.flashcard_cards:
        txt += f'{card.content_text}\n\n'
    return txt


def content_disposition(filename: str = EXPORT_FILENAME) -> str:
    return f'attachment; filename="{filename}"'
