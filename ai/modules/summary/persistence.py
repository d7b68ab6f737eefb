from __future__ import annotations

import os
import json
from typing import Optional, TYPE_CHECKING

import redis
from pydantic import ValidationError

from modules.utils import get_logger, log_storage_operation
from .models import Flashcard, Notice, SummaryRecord
from .renderer import render_output

if TYPE_CHECKING:
    from .state import AppState

LOG = get_logger()

STORAGE_FAILURE_NOTICE = 'LocalStorage full or blocked.'
MANUAL_SAVE_NOTICE = 'Summary saved locally!'


class StorageError(Exception):
    pass


class LocalStorage:
    """Redis-backed string key/value store standing in for browser local storage."""

    def __init__(self):
        host = os.getenv('REDIS_HOST', 'redis')
        port = int(os.getenv('REDIS_PORT', '6379'))
        db = int(os.getenv('REDIS_DB', '0'))
        password = os.getenv('REDIS_PASSWORD') or None
        self.enabled = os.getenv('LOCAL_STORAGE_ENABLED', 'true').lower() in ('1', 'true', 'yes')
        self._client = None
        if not self.enabled:
            LOG.info('local_storage_disabled')
            return
        try:
            self._client = redis.Redis(host=host, port=port, db=db, password=password, decode_responses=True, socket_connect_timeout=3, socket_timeout=3)
            self._client.ping()
            LOG.info('local_storage_connected', extra={'host': host, 'port': port})
        except redis.RedisError as e:
            LOG.warning('local_storage_unavailable', extra={'error': str(e)})
            self.enabled = False

    def get_item(self, key: str) -> Optional[str]:
        if not self.enabled or not self._client:
            return None
        try:
            return self._client.get(key)
        except (redis.RedisError, UnicodeDecodeError) as e:
            # values written outside this service may not be valid UTF-8
            LOG.warning('local_storage_get_failed', extra={'key': key, 'error': str(e)})
            return None

    def set_item(self, key: str, value: str):
        if not self.enabled or not self._client:
            raise StorageError('local storage unavailable')
        try:
            self._client.set(key, value)
        except redis.RedisError as e:
            raise StorageError(str(e)) from e


def persist_record(state: 'AppState', record: SummaryRecord) -> Optional[Notice]:
    """Store ``record`` as the only value under the summary key.

    Storage failures come back as a notice; the rendered view is left alone.
    """
    payload = record.model_dump_json()
    try:
        state.storage.set_item(state.storage_key, payload)
    except StorageError as e:
        log_storage_operation('set', state.storage_key, False, error=str(e))
        return Notice(message=STORAGE_FAILURE_NOTICE, level='warning')
    log_storage_operation('set', state.storage_key, True, size_bytes=len(payload))
    return None


def load_record(state: 'AppState') -> Optional[SummaryRecord]:
    raw = state.storage.get_item(state.storage_key)
    if not raw:
        return None
    try:
        data = json.loads(raw)
        # a stored value with no summary list at all is not a record
        if isinstance(data, dict) and 'summary_points' not in data and 'summary' not in data:
            raise ValueError('stored value has no summary points')
        return SummaryRecord.model_validate(data)
    except (ValueError, RecursionError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError; deeply nested input raises RecursionError
        LOG.warning('stored_summary_unparsable', extra={'key': state.storage_key, 'error': str(e)})
        return None


def restore_state(state: 'AppState') -> Optional[SummaryRecord]:
    """Render the last stored record, or hide the output when there is none."""
    record = load_record(state)
    if record is None:
        state.view.hide()
        LOG.info('summary_restore_skipped', extra={'key': state.storage_key})
        return None
    render_output(state, record)
    LOG.info('summary_restored', extra={'summary_points': len(record.summary_points), 'flashcards': len(record.flashcards)})
    return record


def record_from_view(state: 'AppState') -> SummaryRecord:
    # question text is not recovered from the rendered cards
    view = state.view
    return SummaryRecord(
        summary_points=list(view.summary_items),
        flashcards=[Flashcard(question='', answer=card.content_text) for card in view.flashcard_cards],
    )


def manual_save(state: 'AppState') -> Notice:
    record = record_from_view(state)
    failure = persist_record(state, record)
    if failure is not None:
        return failure
    return Notice(message=MANUAL_SAVE_NOTICE)


def load_dark_mode(state: 'AppState') -> bool:
    state.dark_mode = state.storage.get_item(state.dark_mode_key) == '1'
    return state.dark_mode


def toggle_dark_mode(state: 'AppState') -> Optional[Notice]:
    state.dark_mode = not state.dark_mode
    try:
        state.storage.set_item(state.dark_mode_key, '1' if state.dark_mode else '0')
    except StorageError as e:
        log_storage_operation('set', state.dark_mode_key, False, error=str(e))
        return Notice(message=STORAGE_FAILURE_NOTICE, level='warning')
    log_storage_operation('set', state.dark_mode_key, True)
    return None
