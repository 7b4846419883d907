"""
Общие фикстуры тестов.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

import pytest

from repo_transfer.core.retry_manager import RetryConfig, RetryManager
from repo_transfer.core.transfer_executor import TRANSPORT_EXCEPTIONS, classify_response
from repo_transfer.models.job import TransferJob, TransferOutcome
from repo_transfer.utils.config import TransferConfig, PoolConfig
from repo_transfer.utils.logger import StructuredLogger


class FakeResponse:
    """Минимальный ответ requests."""

    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text


class FakeSession:
    """Потокобезопасная подмена requests.Session."""

    def __init__(self, responder: Callable[[str, dict], FakeResponse]):
        self._responder = responder
        self._lock = threading.Lock()
        self.calls: List[Dict] = []
        self.closed = False

    def post(self, url, json=None, headers=None, timeout=None):
        with self._lock:
            self.calls.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        return self._responder(url, json)

    def close(self):
        self.closed = True


class FakeExecutor:
    """Исполнитель без сети: статус ответа выбирается функцией от задачи."""

    def __init__(self, status_for: Callable[[TransferJob], int], delay: float = 0.0):
        self._status_for = status_for
        self._delay = delay
        self._lock = threading.Lock()
        self.executed: List[TransferJob] = []
        self.closed = False

    def execute(self, job: TransferJob) -> TransferOutcome:
        if self._delay:
            threading.Event().wait(self._delay)
        with self._lock:
            self.executed.append(job)
        return classify_response(job, self._status_for(job), '{"message": "test"}')

    def close(self):
        self.closed = True


class RecordingLogger(StructuredLogger):
    """Логгер событий, сохраняющий события в памяти."""

    def __init__(self):
        super().__init__("tests.events")
        self._lock = threading.Lock()
        self.events: List[Dict] = []
        self.errors: List[Exception] = []

    def log_event(self, event: str, level: str = "INFO", **data):
        with self._lock:
            self.events.append({'event': event, 'level': level, 'context': self.get_context(), **data})

    def log_error(self, error: Exception, **context):
        with self._lock:
            self.errors.append(error)

    def named(self, event: str) -> List[Dict]:
        with self._lock:
            return [e for e in self.events if e['event'] == event]


@pytest.fixture
def fast_retry_manager():
    """Менеджер ретраев без реальных пауз."""
    delays: List[float] = []
    config = RetryConfig(
        max_retries=3,
        base_delay=2.0,
        max_delay=10.0,
        jitter=False,
        retry_on_exceptions=list(TRANSPORT_EXCEPTIONS)
    )
    manager = RetryManager(config, sleep=delays.append)
    manager.recorded_delays = delays
    return manager


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def make_config():
    def factory(resources: Optional[List[str]] = None, num_workers: int = 5, **pool) -> TransferConfig:
        return TransferConfig(
            original_account="test-orig-user",
            new_account="test-new-user",
            resources=["repo-a", "repo-b"] if resources is None else resources,
            pool=PoolConfig(num_workers=num_workers, **pool),
        )
    return factory


@pytest.fixture
def job():
    return TransferJob(resource="test-repo", source_account="test-orig-user", destination_account="test-new-user")


@pytest.fixture
def restore_logging():
    """Восстановление корневого логгера после setup_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
