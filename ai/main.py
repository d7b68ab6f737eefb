import os
import time
import signal
import asyncio
from datetime import datetime
from typing import Optional, List

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

load_dotenv()

from fastapi import FastAPI, Request, Response, UploadFile, File, Form
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, HTMLResponse

from modules.semantic import (
    generate_study_text,
    GeneratorError,
    GeneratorAPIError,
    GeneratorTimeoutError,
)
from modules.sources import (
    extract_text_from_pdf,
    PDFExtractionError,
    transcribe_media,
    TranscriptionError,
)
from modules.summary import (
    AppState,
    SummaryRecord,
    parse_response,
    render_output,
    render_page,
    toggle_key_points,
    persist_record,
    restore_state,
    manual_save,
    export_text,
    content_disposition,
    load_dark_mode,
    toggle_dark_mode,
    EXPORT_FILENAME,
)
from modules.summary.exporter import EXPORT_MEDIA_TYPE
from modules.summary.response_parser import used_fallback
from modules.utils import get_logger, set_request_context, log_request, log_error, log_notice, log_summary_generation, FileHandler, UploadValidationError

LOG = get_logger()


class Settings(BaseSettings):
    HOST: str = '0.0.0.0'
    PORT: int = 8000
    ENVIRONMENT: str = 'development'
    LOG_LEVEL: str = 'INFO'
    CORS_ORIGIN: str = '*'
    DEFAULT_READING_LEVEL: str = 'high school'
    # optional server-side fallbacks for the per-request credentials
    GEMINI_API_KEY: str = ''
    OPENAI_API_KEY: str = ''


settings = Settings()

app = FastAPI(title='Smart Summary Service', version='1.0.0', description='Summaries and flashcards from notes, PDFs and recordings')

origins = [o.strip() for o in settings.CORS_ORIGIN.split(',') if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware('http')
async def add_request_id_and_logging(request: Request, call_next):
    # prefer incoming X-Request-ID header for cross-service tracing
    request_id = request.headers.get('x-request-id') or os.urandom(8).hex()
    request.state.request_id = request_id
    set_request_context(request_id)
    start = time.time()
    LOG.info('http_request_start', extra={'method': request.method, 'path': request.url.path, 'request_id': request_id, 'client': request.client.host if request.client else None})
    try:
        response: Response = await call_next(request)
    except Exception as exc:
        log_error(exc, {'request_id': request_id, 'path': request.url.path})
        body = {'success': False, 'error': {'message': 'Internal server error', 'request_id': request_id}}
        return JSONResponse(status_code=500, content=body)
    duration = int((time.time() - start) * 1000)
    log_request(request_id, request.method, request.url.path, response.status_code, duration, ip=request.client.host if request.client else None)
    response.headers['X-Request-ID'] = request_id
    return response


def _request_id(fastapi_request: Request) -> str:
    return getattr(fastapi_request.state, 'request_id', None) or os.urandom(8).hex()


def _state() -> AppState:
    return AppState.get_instance()


def _error(status_code: int, error: str, notice: str, request_id: str, details: Optional[str] = None) -> JSONResponse:
    log_notice(notice, level='warning')
    content = {'success': False, 'error': error, 'notice': notice, 'request_id': request_id}
    if details:
        content['details'] = details
    return JSONResponse(status_code=status_code, content=content)


async def _generate_and_render(state: AppState, content: str, level: str, api_key: str, request_id: str):
    """Generation call, parse, render, persist. Returns (record, storage notice)."""
    start = time.time()
    with state.loading_scope():
        response_text = await asyncio.to_thread(generate_study_text, content, level, api_key, request_id=request_id)
    record = parse_response(response_text)
    render_output(state, record)
    storage_notice = persist_record(state, record)
    log_summary_generation(request_id, len(record.summary_points), len(record.flashcards), used_fallback(response_text), int((time.time() - start) * 1000))
    return record, storage_notice


@app.get('/health')
async def health():
    return {'status': 'ok', 'timestamp': datetime.utcnow().isoformat() + 'Z', 'service': 'smart-summary'}


@app.get('/ready')
async def ready():
    storage = _state().storage
    services = {'storage': 'ok' if storage.enabled else 'error: local storage unavailable'}
    # storage failures are non-fatal, so readiness only reports them
    return JSONResponse(status_code=200, content={'status': 'ready', 'services': services})


class SummarizeRequest(BaseModel):
    content: str = Field('', description='Text to summarize')
    reading_level: Optional[str] = Field(None, description='Free-form reading level, e.g. "middle school"')
    api_key: Optional[str] = Field(None, description='Gemini API key; falls back to the server key')


class SummarizeResponse(BaseModel):
    success: bool
    summary: SummaryRecord
    notices: List[str]
    request_id: str


class ExtractPdfResponse(BaseModel):
    success: bool
    text: str
    summary: Optional[SummaryRecord] = None
    notices: List[str]
    request_id: str


class TranscribeResponse(BaseModel):
    success: bool
    text: str
    notices: List[str]
    request_id: str


@app.post('/summarize', response_model=SummarizeResponse)
async def summarize(req: SummarizeRequest, fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    content = (req.content or '').strip()
    level = req.reading_level or settings.DEFAULT_READING_LEVEL
    api_key = (req.api_key or settings.GEMINI_API_KEY or '').strip()
    if not content:
        return _error(400, 'Missing content', 'Please enter or upload some content.', request_id)
    if not api_key:
        return _error(400, 'Missing API key', 'Please enter your Gemini API key.', request_id)

    LOG.info('summarize_start', extra={'request_id': request_id, 'content_length': len(content), 'reading_level': level})
    state = _state()
    try:
        record, storage_notice = await _generate_and_render(state, content, level, api_key, request_id)
    except GeneratorTimeoutError as e:
        LOG.exception('summarize_timeout', exc_info=True)
        return _error(504, 'LLM request timeout', f'Error: {e}', request_id)
    except GeneratorAPIError as e:
        LOG.exception('summarize_api_error', exc_info=True)
        return _error(502, 'LLM API error', f'Error: {e}', request_id)
    except GeneratorError as e:
        LOG.exception('summarize_failed', exc_info=True)
        return _error(500, 'Summarization failed', f'Error: {e}', request_id)

    notices = [storage_notice.message] if storage_notice else []
    notices.append('Summary & flashcards generated!')
    for n in notices:
        log_notice(n)
    LOG.info('summarize_complete', extra={'request_id': request_id, 'summary_points': len(record.summary_points), 'flashcards': len(record.flashcards)})
    return SummarizeResponse(success=True, summary=record, notices=notices, request_id=request_id)


@app.post('/extract/pdf', response_model=ExtractPdfResponse)
async def extract_pdf(
    fastapi_request: Request,
    file: Optional[UploadFile] = File(None),
    reading_level: Optional[str] = Form(None),
    api_key: Optional[str] = Form(None),
):
    request_id = _request_id(fastapi_request)
    if file is None or not file.filename:
        return _error(400, 'Missing file', 'Please select a PDF file.', request_id)

    fh = FileHandler()
    local_path = None
    state = _state()
    try:
        try:
            local_path = fh.save_upload(await file.read(), file.filename, 'document')
        except UploadValidationError as e:
            return _error(400, 'Invalid upload', f'Error: {e}', request_id)
        try:
            with state.loading_scope():
                text = await asyncio.to_thread(extract_text_from_pdf, local_path, request_id=request_id)
        except (PDFExtractionError, FileNotFoundError) as e:
            LOG.exception('pdf_extraction_failed', exc_info=True)
            return _error(422, 'PDF extraction failed', 'PDF extraction failed.', request_id, details=str(e))
    finally:
        if local_path:
            fh.cleanup_temp_file(local_path)

    notices = ['PDF text extracted!']
    record = None
    key = (api_key or settings.GEMINI_API_KEY or '').strip()
    level = reading_level or settings.DEFAULT_READING_LEVEL
    if key and text:
        # extraction already succeeded, so a failed summary only adds a notice
        try:
            record, storage_notice = await _generate_and_render(state, text, level, key, request_id)
            if storage_notice:
                notices.append(storage_notice.message)
            notices.append('PDF summarized!')
        except GeneratorError as e:
            LOG.exception('pdf_summarize_failed', exc_info=True)
            notices.append(f'Error: {e}')
    for n in notices:
        log_notice(n)
    return ExtractPdfResponse(success=True, text=text, summary=record, notices=notices, request_id=request_id)


@app.post('/transcribe', response_model=TranscribeResponse)
async def transcribe(
    fastapi_request: Request,
    file: Optional[UploadFile] = File(None),
    openai_api_key: Optional[str] = Form(None),
):
    request_id = _request_id(fastapi_request)
    key = (openai_api_key or settings.OPENAI_API_KEY or '').strip()
    if file is None or not file.filename:
        return _error(400, 'Missing file', 'Please select an audio or video file.', request_id)
    if not key:
        return _error(400, 'Missing API key', 'Please enter your OpenAI API key for transcription.', request_id)

    fh = FileHandler()
    local_path = None
    state = _state()
    try:
        local_path = fh.save_upload(await file.read(), file.filename, 'media')
        with state.loading_scope():
            text = await asyncio.to_thread(transcribe_media, local_path, key, request_id=request_id)
    except UploadValidationError as e:
        return _error(400, 'Invalid upload', f'Error: {e}', request_id)
    except TranscriptionError as e:
        LOG.exception('transcription_failed', exc_info=True)
        return _error(502, 'Transcription failed', f'Error: {e}', request_id)
    finally:
        if local_path:
            fh.cleanup_temp_file(local_path)

    log_notice('Transcription complete!')
    return TranscribeResponse(success=True, text=text, notices=['Transcription complete!'], request_id=request_id)


@app.get('/summary')
async def get_summary():
    state = _state()
    return {
        'success': True,
        'visible': state.view.visible,
        'view': state.view.model_dump(),
        'loading': state.loading,
        'dark_mode': state.dark_mode,
    }


@app.post('/summary/flip')
async def flip_key_points():
    state = _state()
    flipped = toggle_key_points(state)
    return {'success': True, 'flipped': flipped}


@app.post('/summary/save')
async def save_summary(fastapi_request: Request):
    request_id = _request_id(fastapi_request)
    notice = manual_save(_state())
    log_notice(notice.message, level=notice.level)
    return {'success': notice.level != 'warning', 'notices': [notice.message], 'request_id': request_id}


@app.get('/summary/export')
async def export_summary():
    txt = export_text(_state().view)
    return Response(content=txt, media_type=EXPORT_MEDIA_TYPE, headers={'Content-Disposition': content_disposition(EXPORT_FILENAME)})


@app.get('/summary/view', response_class=HTMLResponse)
async def view_summary():
    state = _state()
    return HTMLResponse(render_page(state.view, dark_mode=state.dark_mode))


@app.get('/preferences/dark-mode')
async def get_dark_mode():
    return {'success': True, 'dark_mode': _state().dark_mode}


@app.post('/preferences/dark-mode/toggle')
async def post_toggle_dark_mode():
    state = _state()
    notice = toggle_dark_mode(state)
    notices = [notice.message] if notice else []
    for n in notices:
        log_notice(n, level='warning')
    return {'success': True, 'dark_mode': state.dark_mode, 'notices': notices}


@app.on_event('startup')
async def on_startup():
    LOG.info('Smart summary service starting', extra={'env': settings.ENVIRONMENT})
    state = _state()
    load_dark_mode(state)
    record = restore_state(state)
    if record is None:
        LOG.info('No previous summary to restore')
    else:
        LOG.info('Previous summary restored')


@app.on_event('shutdown')
async def on_shutdown():
    LOG.info('Smart summary service shutting down')


def _install_signal_handlers(loop: Optional[asyncio.AbstractEventLoop] = None):
    if loop is None:
        loop = asyncio.get_event_loop()

    def _handler(signum, frame):
        LOG.info('Received shutdown signal', extra={'signal': signum})
        loop.call_soon_threadsafe(loop.stop)

    signal.signal(signal.SIGTERM, _handler)
    signal.signal(signal.SIGINT, _handler)


if __name__ == '__main__':
    import uvicorn

    _install_signal_handlers()
    reload_enabled = settings.ENVIRONMENT == 'development'

    uvicorn.run(
        'main:app',
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=reload_enabled,
    )
