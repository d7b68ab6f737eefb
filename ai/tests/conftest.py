import os
import pytest
from unittest.mock import MagicMock
from pathlib import Path

from dotenv import load_dotenv

# load test env first
env_path = Path(__file__).resolve().parents[1] / '.env.test'
if env_path.exists():
    load_dotenv(env_path)

os.environ.setdefault('TESTING', '1')


@pytest.fixture(autouse=True)
def silence_logger(monkeypatch):
    # Patch any project logger acquisition to avoid noisy logs
    try:
        import modules.utils.logger as logger_mod
        monkeypatch.setattr(logger_mod, 'get_logger', lambda *a, **k: MagicMock())
    except Exception:
        pass
    yield


@pytest.fixture(autouse=True)
def reset_singletons():
    from modules.summary import AppState
    from modules.semantic import ContentGenerator
    from modules.sources import Transcriber
    AppState.reset_instance()
    ContentGenerator._instance = None
    Transcriber._instance = None
    yield
    AppState.reset_instance()


@pytest.fixture
def mock_redis_client(monkeypatch):
    from tests.fixtures.mock_redis import MockRedisClient
    client = MockRedisClient()
    monkeypatch.setattr('redis.Redis', lambda *a, **k: client)
    return client


@pytest.fixture
def full_redis_client(monkeypatch):
    from tests.fixtures.mock_redis import FullRedisClient
    client = FullRedisClient()
    monkeypatch.setattr('redis.Redis', lambda *a, **k: client)
    return client


@pytest.fixture
def app_state(mock_redis_client):
    from modules.summary import AppState
    state = AppState()
    AppState._instance = state
    return state


@pytest.fixture
def full_app_state(full_redis_client):
    from modules.summary import AppState
    state = AppState()
    AppState._instance = state
    return state


@pytest.fixture
def mock_openai_client(monkeypatch):
    from tests.fixtures.mock_openai import MockOpenAIController
    controller = MockOpenAIController()
    fake_cls = controller.client_class()
    monkeypatch.setattr('modules.semantic.generator.OpenAI', fake_cls)
    monkeypatch.setattr('modules.sources.transcriber.OpenAI', fake_cls)
    return controller


@pytest.fixture
def no_server_keys(monkeypatch):
    import main as ai_main
    monkeypatch.setattr(ai_main.settings, 'GEMINI_API_KEY', '')
    monkeypatch.setattr(ai_main.settings, 'OPENAI_API_KEY', '')
    return ai_main.settings


@pytest.fixture
def upload_dir(monkeypatch, tmp_path):
    d = tmp_path / 'uploads'
    monkeypatch.setattr('modules.utils.file_handler.TEMP_DIR', str(d))
    return d


@pytest.fixture
def sample_record():
    from modules.summary import SummaryRecord
    from tests.fixtures.sample_data import small_summary_record
    return SummaryRecord.model_validate(small_summary_record())
