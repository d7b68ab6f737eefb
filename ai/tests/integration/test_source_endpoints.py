import pytest
from fastapi.testclient import TestClient
import main as ai_main

from tests.fixtures.mock_openai import api_status_error


@pytest.fixture
def fake_pdf_text(monkeypatch):
    calls = []

    def _fake(path, request_id=None):
        calls.append(path)
        return 'Cell biology\nMitosis and meiosis'

    monkeypatch.setattr(ai_main, 'extract_text_from_pdf', _fake)
    return calls


@pytest.mark.integration
def test_pdf_extract_without_key_only_returns_text(app_state, upload_dir, fake_pdf_text, mock_openai_client, no_server_keys):
    client = TestClient(ai_main.app)
    r = client.post('/extract/pdf', files={'file': ('notes.pdf', b'%PDF-1.4 data', 'application/pdf')})
    assert r.status_code == 200
    data = r.json()
    assert data['text'] == 'Cell biology\nMitosis and meiosis'
    assert data['summary'] is None
    assert data['notices'] == ['PDF text extracted!']
    assert mock_openai_client.chat_calls == []


@pytest.mark.integration
def test_pdf_extract_with_key_summarizes(app_state, mock_redis_client, upload_dir, fake_pdf_text, mock_openai_client, no_server_keys):
    client = TestClient(ai_main.app)
    r = client.post(
        '/extract/pdf',
        files={'file': ('notes.pdf', b'%PDF-1.4 data', 'application/pdf')},
        data={'api_key': 'g-key', 'reading_level': 'college'},
    )
    assert r.status_code == 200
    data = r.json()
    assert data['summary']['summary_points']
    assert data['notices'] == ['PDF text extracted!', 'PDF summarized!']
    assert 'lastSummary' in mock_redis_client.store
    assert 'Content: Cell biology\nMitosis and meiosis' in mock_openai_client.chat_calls[0]['messages'][0]['content']


@pytest.mark.integration
def test_pdf_extract_summary_failure_keeps_text(app_state, upload_dir, fake_pdf_text, mock_openai_client, no_server_keys):
    mock_openai_client.chat_error = api_status_error(500)
    client = TestClient(ai_main.app)
    r = client.post('/extract/pdf', files={'file': ('notes.pdf', b'%PDF-1.4 data', 'application/pdf')}, data={'api_key': 'g-key'})
    assert r.status_code == 200
    data = r.json()
    assert data['text']
    assert data['summary'] is None
    assert data['notices'][-1] == 'Error: API error (500)'


@pytest.mark.integration
def test_pdf_extract_broken_file(app_state, upload_dir, no_server_keys):
    client = TestClient(ai_main.app)
    r = client.post('/extract/pdf', files={'file': ('notes.pdf', b'%PDF-1.4\n% not a real document\n', 'application/pdf')})
    assert r.status_code == 422
    assert r.json()['notice'] == 'PDF extraction failed.'
    assert app_state.loading is False


@pytest.mark.integration
def test_pdf_extract_rejects_other_types(app_state, upload_dir, no_server_keys):
    client = TestClient(ai_main.app)
    r = client.post('/extract/pdf', files={'file': ('notes.txt', b'plain text', 'text/plain')})
    assert r.status_code == 400


@pytest.mark.integration
def test_pdf_extract_requires_file(app_state, no_server_keys):
    client = TestClient(ai_main.app)
    r = client.post('/extract/pdf')
    assert r.status_code == 400
    assert r.json()['notice'] == 'Please select a PDF file.'


@pytest.mark.integration
def test_transcribe_success(app_state, upload_dir, mock_openai_client, no_server_keys):
    client = TestClient(ai_main.app)
    r = client.post('/transcribe', files={'file': ('lecture.mp3', b'ID3fake', 'audio/mpeg')}, data={'openai_api_key': 'sk-test'})
    assert r.status_code == 200
    data = r.json()
    assert data['text'] == 'Today we talk about photosynthesis.'
    assert data['notices'] == ['Transcription complete!']


@pytest.mark.integration
def test_transcribe_requires_file(app_state, mock_openai_client, no_server_keys):
    client = TestClient(ai_main.app)
    r = client.post('/transcribe', data={'openai_api_key': 'sk-test'})
    assert r.status_code == 400
    assert r.json()['notice'] == 'Please select an audio or video file.'


@pytest.mark.integration
def test_transcribe_requires_key(app_state, upload_dir, mock_openai_client, no_server_keys):
    client = TestClient(ai_main.app)
    r = client.post('/transcribe', files={'file': ('lecture.mp3', b'ID3fake', 'audio/mpeg')})
    assert r.status_code == 400
    assert r.json()['notice'] == 'Please enter your OpenAI API key for transcription.'
    assert mock_openai_client.transcribe_calls == []


@pytest.mark.integration
def test_transcribe_http_failure(app_state, upload_dir, mock_openai_client, no_server_keys):
    mock_openai_client.transcribe_error = api_status_error(401)
    client = TestClient(ai_main.app)
    r = client.post('/transcribe', files={'file': ('lecture.mp3', b'ID3fake', 'audio/mpeg')}, data={'openai_api_key': 'sk-bad'})
    assert r.status_code == 502
    assert r.json()['notice'] == 'Error: Transcription failed (401)'
