"""
Модели воркеров для пула переноса.
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock


class WorkerStatus(Enum):
    """Статусы воркеров."""
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class WorkerMetrics:
    """Метрики воркера."""

    jobs_succeeded: int = 0
    jobs_failed: int = 0
    total_execution_time: float = 0.0
    last_job_at: Optional[datetime] = None

    @property
    def jobs_processed(self) -> int:
        return self.jobs_succeeded + self.jobs_failed


@dataclass
class Worker:
    """
    Представление воркера.

    Идентификатор воркера используется только для диагностики и
    не влияет на распределение задач.
    """

    id: int
    status: WorkerStatus = WorkerStatus.IDLE
    started_at: Optional[datetime] = None
    stopped_at: Optional[datetime] = None
    metrics: WorkerMetrics = field(default_factory=WorkerMetrics)
    _lock: Lock = field(default_factory=Lock, repr=False)

    @property
    def name(self) -> str:
        return f"worker-{self.id}"

    def start(self):
        """Запуск воркера."""
        with self._lock:
            self.status = WorkerStatus.IDLE
            self.started_at = datetime.now()

    def stop(self):
        """Остановка воркера."""
        with self._lock:
            self.status = WorkerStatus.STOPPED
            self.stopped_at = datetime.now()

    def set_busy(self):
        with self._lock:
            if self.status == WorkerStatus.IDLE:
                self.status = WorkerStatus.BUSY

    def set_idle(self):
        with self._lock:
            if self.status == WorkerStatus.BUSY:
                self.status = WorkerStatus.IDLE

    def update_metrics(self, execution_time: float, success: bool = True):
        """Обновление метрик после завершения задачи."""
        with self._lock:
            if success:
                self.metrics.jobs_succeeded += 1
            else:
                self.metrics.jobs_failed += 1
            self.metrics.total_execution_time += execution_time
            self.metrics.last_job_at = datetime.now()
