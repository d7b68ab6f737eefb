import os
import sys
import logging
import pathlib
import contextvars
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger

_request_ctx_var = contextvars.ContextVar('request_ctx', default={})


def set_request_context(request_id: str, session_id: str = None):
    _request_ctx_var.set({'request_id': request_id, 'session_id': session_id})


def get_request_context():
    return _request_ctx_var.get()


def _inject_request_context(record):
    ctx = get_request_context()
    record.request_id = ctx.get('request_id')
    record.session_id = ctx.get('session_id')
    return True


def get_logger(name: str = 'smart_summary'):
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.getenv('LOG_FORMAT', 'json')
    # relative to the working directory unless absolute
    LOG_FILE_PATH = os.getenv('LOG_FILE_PATH', 'logs')
    LOG_MAX_SIZE = int(os.getenv('LOG_MAX_SIZE', str(10 * 1024 * 1024)))
    LOG_MAX_FILES = int(os.getenv('LOG_MAX_FILES', '7'))

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL.upper())
    log_path = pathlib.Path(LOG_FILE_PATH)
    if not log_path.is_absolute():
        log_path = pathlib.Path(os.getcwd()) / log_path
    log_path.mkdir(parents=True, exist_ok=True)

    ch = logging.StreamHandler(sys.stdout)
    if LOG_FORMAT == 'json':
        fmt = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s')
    else:
        fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    combined = RotatingFileHandler(log_path / 'combined.log', maxBytes=LOG_MAX_SIZE, backupCount=LOG_MAX_FILES)
    combined.setFormatter(fmt)
    logger.addHandler(combined)

    errors = RotatingFileHandler(log_path / 'error.log', maxBytes=LOG_MAX_SIZE, backupCount=LOG_MAX_FILES)
    errors.setLevel(logging.ERROR)
    errors.setFormatter(fmt)
    logger.addHandler(errors)

    f = logging.Filter()
    f.filter = _inject_request_context
    logger.addFilter(f)

    logging.captureWarnings(True)

    return logger


def log_request(request_id: str, method: str, path: str, status_code: int, duration_ms: float, ip: str = None):
    logger = get_logger()
    logger.info('http_request', extra={'request_id': request_id, 'method': method, 'path': path, 'status_code': status_code, 'duration_ms': duration_ms, 'ip': ip})


def log_error(error: Exception, context: dict = None):
    logger = get_logger()
    logger.exception('error', exc_info=True, extra=context or {})


def log_notice(message: str, level: str = 'info'):
    # user-facing notices are transient; keep a trace of them in the service log
    logger = get_logger()
    if level == 'warning':
        logger.warning('user_notice', extra={'notice': message})
    else:
        logger.info('user_notice', extra={'notice': message})


def log_llm_call(request_id: str, model: str, prompt_length: int, response_length: int, duration_ms: float, prompt_tokens: int = None, completion_tokens: int = None):
    logger = get_logger()
    logger.info('llm_call', extra={
        'request_id': request_id,
        'model': model,
        'prompt_length': prompt_length,
        'response_length': response_length,
        'prompt_tokens': prompt_tokens,
        'completion_tokens': completion_tokens,
        'duration_ms': duration_ms,
    })


def log_summary_generation(request_id: str, summary_point_count: int, flashcard_count: int, used_fallback: bool, duration_ms: float):
    logger = get_logger()
    logger.info('summary_generation', extra={
        'request_id': request_id,
        'summary_point_count': summary_point_count,
        'flashcard_count': flashcard_count,
        'used_fallback': used_fallback,
        'duration_ms': duration_ms,
    })


def log_transcription(request_id: str, model: str, file_size_mb: float, text_length: int, duration_ms: float):
    logger = get_logger()
    logger.info('transcription', extra={'request_id': request_id, 'model': model, 'file_size_mb': file_size_mb, 'text_length': text_length, 'duration_ms': duration_ms})


def log_pdf_extraction(request_id: str, page_count: int, text_length: int, duration_ms: float):
    logger = get_logger()
    logger.info('pdf_extraction', extra={'request_id': request_id, 'page_count': page_count, 'text_length': text_length, 'duration_ms': duration_ms})


def log_storage_operation(operation: str, key: str, success: bool, size_bytes: int = None, error: str = None):
    logger = get_logger()
    extra = {'operation': operation, 'key': key, 'success': success, 'size_bytes': size_bytes, 'error': error}
    if success:
        logger.info('storage_operation', extra=extra)
    else:
        logger.warning('storage_operation', extra=extra)
