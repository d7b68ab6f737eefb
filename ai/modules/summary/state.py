from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from typing import Optional

from .renderer import OutputView
from .persistence import LocalStorage

SUMMARY_STORAGE_KEY = os.getenv('SUMMARY_STORAGE_KEY', 'lastSummary')
DARK_MODE_STORAGE_KEY = os.getenv('DARK_MODE_STORAGE_KEY', 'darkMode')


class AppState:
    """Everything the render/persist/restore cycle touches.

    One instance backs the running service; tests build their own around a
    mock storage client.
    """

    _instance = None

    def __init__(self, storage: Optional[LocalStorage] = None, storage_key: str = None, dark_mode_key: str = None):
        self.storage = storage if storage is not None else LocalStorage()
        self.storage_key = storage_key or SUMMARY_STORAGE_KEY
        self.dark_mode_key = dark_mode_key or DARK_MODE_STORAGE_KEY
        self.view = OutputView()
        self.loading = False
        self._in_flight = 0
        self._lock = threading.Lock()
        self.dark_mode = False

    @classmethod
    def get_instance(cls) -> 'AppState':
        if cls._instance is None:
            cls._instance = AppState()
        return cls._instance

    @classmethod
    def reset_instance(cls):
        cls._instance = None

    def set_loading(self, loading: bool):
        # one call in flight more or less; the indicator stays up until all finish
        with self._lock:
            self._in_flight = max(0, self._in_flight + (1 if loading else -1))
            self.loading = self._in_flight > 0

    @contextmanager
    def loading_scope(self):
        # raised around a collaborator call, lowered even when it fails
        self.set_loading(True)
        try:
            yield self
        finally:
            self.set_loading(False)
