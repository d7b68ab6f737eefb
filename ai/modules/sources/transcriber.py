from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Optional

from openai import OpenAI, APIStatusError, APITimeoutError, OpenAIError

from modules.utils import get_logger, log_transcription

LOG = get_logger()


class TranscriptionError(Exception):
    pass


class TranscriptionAPIError(TranscriptionError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


OPENAI_TRANSCRIBE_MODEL = os.getenv('OPENAI_TRANSCRIBE_MODEL', 'whisper-1')
OPENAI_BASE_URL = os.getenv('OPENAI_BASE_URL') or None
OPENAI_TIMEOUT = int(os.getenv('OPENAI_TIMEOUT', '120'))


class Transcriber:
    _instance = None

    def __init__(self):
        self.model = OPENAI_TRANSCRIBE_MODEL
        self.timeout = OPENAI_TIMEOUT
        LOG.info('Transcriber initialized', extra={'model': self.model})

    @classmethod
    def get_instance(cls) -> 'Transcriber':
        if cls._instance is None:
            cls._instance = Transcriber()
        return cls._instance

    def transcribe(self, file_path: str, api_key: str, request_id: Optional[str] = None) -> str:
        if not api_key or not api_key.strip():
            raise TranscriptionError('OpenAI API key is required')
        path = Path(file_path)
        if not path.exists():
            raise TranscriptionError(f'File not found: {path.name}')
        client = OpenAI(api_key=api_key.strip(), base_url=OPENAI_BASE_URL, timeout=self.timeout, max_retries=0)
        start = time.time()
        try:
            with path.open('rb') as fh:
                result = client.audio.transcriptions.create(model=self.model, file=fh, response_format='text')
        except APITimeoutError as e:
            LOG.exception('transcription_timeout', exc_info=True)
            raise TranscriptionError(f'Transcription timed out: {e}') from e
        except APIStatusError as e:
            LOG.exception('transcription_api_error', exc_info=True)
            raise TranscriptionAPIError(f'Transcription failed ({e.status_code})', status_code=e.status_code) from e
        except OpenAIError as e:
            LOG.exception('transcription_unknown_error', exc_info=True)
            raise TranscriptionAPIError(str(e)) from e
        # response_format="text" yields a plain string; older SDKs wrap it
        text = result if isinstance(result, str) else getattr(result, 'text', '') or ''
        text = text.strip()
        duration_ms = int((time.time() - start) * 1000)
        log_transcription(request_id or '', self.model, path.stat().st_size / (1024 * 1024), len(text), duration_ms)
        return text


def transcribe_media(file_path: str, api_key: str, request_id: Optional[str] = None) -> str:
    return Transcriber.get_instance().transcribe(file_path, api_key, request_id=request_id)
