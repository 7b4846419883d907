"""
Канал задач: ограниченная очередь, которая заполняется один раз и закрывается.
"""

import queue
import threading
from typing import Optional

from ..models.job import TransferJob
from ..utils.logger import get_logger
from ..exceptions import JobChannelError


logger = get_logger(__name__)


class JobChannel:
    """
    Канал для передачи задач воркерам.

    После close() новые задачи не принимаются, а get_job() возвращает None,
    как только очередь опустела.
    """

    def __init__(self, capacity: int, poll_interval: float = 0.1):
        if capacity < 1:
            raise JobChannelError("Channel capacity must be >= 1")

        self.capacity = capacity
        self.poll_interval = poll_interval
        self._queue: "queue.Queue[TransferJob]" = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self._metrics_lock = threading.Lock()

        self._metrics = {
            'jobs_submitted': 0,
            'jobs_retrieved': 0,
        }

        logger.debug(f"JobChannel initialized with capacity {capacity}")

    def submit_job(self, job: TransferJob):
        """
        Отправка задачи в канал.

        Raises:
            JobChannelError: Канал закрыт или переполнен
        """
        if self._closed.is_set():
            raise JobChannelError("Channel is closed")

        try:
            self._queue.put_nowait(job)
        except queue.Full:
            raise JobChannelError(f"Channel is full (capacity {self.capacity})") from None

        with self._metrics_lock:
            self._metrics['jobs_submitted'] += 1

        logger.debug(f"Job {job.resource} submitted to channel")

    def close(self):
        """Закрытие канала для новых задач."""
        self._closed.set()
        logger.debug("Job channel closed")

    def get_job(self) -> Optional[TransferJob]:
        """
        Получение задачи из канала.

        Блокируется, пока канал открыт и пуст.

        Returns:
            Задача или None, если канал закрыт и опустошен
        """
        while True:
            try:
                job = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                if not self._closed.is_set():
                    continue
                # Все put завершились до close(), поэтому достаточно одной проверки
                try:
                    job = self._queue.get_nowait()
                except queue.Empty:
                    return None

            with self._metrics_lock:
                self._metrics['jobs_retrieved'] += 1
            return job

    def is_closed(self) -> bool:
        return self._closed.is_set()

    def get_metrics(self) -> dict:
        """Получение метрик канала."""
        with self._metrics_lock:
            metrics = self._metrics.copy()
        metrics['current_size'] = self._queue.qsize()
        return metrics

    def __len__(self) -> int:
        return self._queue.qsize()

    def __repr__(self) -> str:
        return f"JobChannel(size={len(self)}, capacity={self.capacity}, closed={self.is_closed()})"
