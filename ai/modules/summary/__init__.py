"""
Summary record pipeline: response parsing, rendering, local persistence
and text export.
"""
from .models import Flashcard, SummaryRecord, Notice
from .response_parser import parse_response, extract_bullets, extract_qa_pairs, fallback_points, synthesize_flashcards
from .renderer import OutputView, FlipCard, FlashcardCard, render_output, toggle_key_points, render_page
from .persistence import (
	LocalStorage,
	StorageError,
	persist_record,
	restore_state,
	load_record,
	manual_save,
	record_from_view,
	load_dark_mode,
	toggle_dark_mode,
	STORAGE_FAILURE_NOTICE,
)
from .exporter import export_text, content_disposition, EXPORT_FILENAME
from .state import AppState

__all__ = [
	'Flashcard', 'SummaryRecord', 'Notice',
	'parse_response', 'extract_bullets', 'extract_qa_pairs', 'fallback_points', 'synthesize_flashcards',
	'OutputView', 'FlipCard', 'FlashcardCard', 'render_output', 'toggle_key_points', 'render_page',
	'LocalStorage', 'StorageError', 'persist_record', 'restore_state', 'load_record', 'manual_save', 'record_from_view',
	'load_dark_mode', 'toggle_dark_mode', 'STORAGE_FAILURE_NOTICE',
	'export_text', 'content_disposition', 'EXPORT_FILENAME',
	'AppState',
]
