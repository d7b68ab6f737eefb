from __future__ import annotations

import os
import time
from typing import Optional

from modules.utils import get_logger, log_llm_call

LOG = get_logger()

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from openai import OpenAI, APIStatusError, APITimeoutError, OpenAIError


class GeneratorError(Exception):
    pass


class GeneratorAPIError(GeneratorError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GeneratorTimeoutError(GeneratorError):
    pass


# Config
GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-1.5-flash')
GEMINI_BASE_URL = os.getenv('GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta/openai/')
GEMINI_TIMEOUT = int(os.getenv('GEMINI_TIMEOUT', '60'))
# one attempt means failures surface immediately
GEMINI_RETRY_ATTEMPTS = int(os.getenv('GEMINI_RETRY_ATTEMPTS', '1'))
GEMINI_RETRY_MULTIPLIER = int(os.getenv('GEMINI_RETRY_MULTIPLIER', '2'))
GEMINI_RETRY_MAX_WAIT = int(os.getenv('GEMINI_RETRY_MAX_WAIT', '10'))
FLASHCARD_COUNT = 5


def build_prompt(content: str, level: str) -> str:
    return (
        f'You are an educational assistant. Summarize the following content at a {level} reading level into bullet points. '
        f'Then create {FLASHCARD_COUNT} flashcards with question-answer pairs to help a student understand the topic better. '
        f'Content: {content}'
    )


class ContentGenerator:
    """Calls the Gemini OpenAI-compatible endpoint with a caller-supplied key."""

    _instance = None

    def __init__(self):
        self.model = GEMINI_MODEL
        self.base_url = GEMINI_BASE_URL
        self.timeout = GEMINI_TIMEOUT
        LOG.info('ContentGenerator initialized', extra={'model': self.model})

    @classmethod
    def get_instance(cls) -> 'ContentGenerator':
        if cls._instance is None:
            cls._instance = ContentGenerator()
        return cls._instance

    def _client(self, api_key: str) -> OpenAI:
        return OpenAI(api_key=api_key, base_url=self.base_url, timeout=self.timeout, max_retries=0)

    @retry(stop=stop_after_attempt(GEMINI_RETRY_ATTEMPTS), wait=wait_exponential(multiplier=GEMINI_RETRY_MULTIPLIER, max=GEMINI_RETRY_MAX_WAIT), retry=retry_if_exception_type(GeneratorTimeoutError), reraise=True)
    def _call_gemini(self, prompt: str, api_key: str, request_id: Optional[str] = None) -> str:
        start = time.time()
        try:
            resp = self._client(api_key).chat.completions.create(
                model=self.model,
                messages=[{'role': 'user', 'content': prompt}],
            )
        except APITimeoutError as e:
            LOG.exception('gemini_timeout', exc_info=True)
            raise GeneratorTimeoutError(str(e)) from e
        except APIStatusError as e:
            LOG.exception('gemini_api_error', exc_info=True)
            raise GeneratorAPIError(f'API error ({e.status_code})', status_code=e.status_code) from e
        except OpenAIError as e:
            LOG.exception('gemini_unknown_error', exc_info=True)
            raise GeneratorAPIError(str(e)) from e

        duration_ms = int((time.time() - start) * 1000)
        text = ''
        choices = getattr(resp, 'choices', None) or []
        if choices and choices[0].message is not None:
            text = choices[0].message.content or ''
        usage = getattr(resp, 'usage', None)
        log_llm_call(
            request_id or '',
            self.model,
            len(prompt),
            len(text),
            duration_ms,
            prompt_tokens=getattr(usage, 'prompt_tokens', None),
            completion_tokens=getattr(usage, 'completion_tokens', None),
        )
        return text

    def generate(self, content: str, level: str, api_key: str, request_id: Optional[str] = None) -> str:
        """Return the raw model response; an empty string when it carried no text."""
        if not api_key or not api_key.strip():
            raise GeneratorError('Gemini API key is required')
        prompt = build_prompt(content, level)
        return self._call_gemini(prompt, api_key.strip(), request_id=request_id)


def generate_study_text(content: str, level: str, api_key: str, request_id: Optional[str] = None) -> str:
    gen = ContentGenerator.get_instance()
    return gen.generate(content, level, api_key, request_id=request_id)
