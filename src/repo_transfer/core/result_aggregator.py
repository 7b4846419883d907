"""
Агрегатор результатов: сворачивает поток итогов в сводку прогона.
"""

import threading
from datetime import datetime
from typing import Optional

from ..models.job import TransferOutcome
from ..models.summary import RunSummary
from ..utils.logger import get_logger


logger = get_logger(__name__)


class ResultAggregator:
    """
    Агрегатор итогов задач.

    Итоги могут приходить в любом порядке. Подсчет ведется только по виду
    итога, без разбора текстовых сообщений.
    """

    def __init__(self, expected_total: int):
        self.expected_total = expected_total
        self._lock = threading.Lock()
        self._summary = RunSummary(total=expected_total, started_at=datetime.now())

    def record(self, outcome: TransferOutcome):
        """Учет одного итога."""
        with self._lock:
            summary = self._summary
            summary.outcomes.append(outcome)
            summary.attempts += outcome.attempts

            if outcome.is_success():
                summary.succeeded += 1
            else:
                summary.failed += 1
                summary.failures_by_kind[outcome.failure] = summary.failures_by_kind.get(outcome.failure, 0) + 1

            if outcome.worker_id is not None:
                summary.jobs_per_worker[outcome.worker_id] = summary.jobs_per_worker.get(outcome.worker_id, 0) + 1

    @property
    def observed(self) -> int:
        with self._lock:
            return len(self._summary.outcomes)

    def is_complete(self) -> bool:
        """Все ожидаемые итоги получены."""
        return self.observed == self.expected_total

    def finalize(self, finished_at: Optional[datetime] = None) -> RunSummary:
        """Фиксация сводки прогона."""
        with self._lock:
            self._summary.finished_at = finished_at or datetime.now()
            logger.debug(f"Aggregated {len(self._summary.outcomes)}/{self.expected_total} outcomes")
            return self._summary

    def __repr__(self) -> str:
        return f"ResultAggregator(observed={self.observed}, expected={self.expected_total})"
