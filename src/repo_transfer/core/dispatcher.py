"""
Диспетчер задач: фиксированный пул потоков-воркеров над общим каналом.
"""

import dataclasses
import queue
import threading
import time
from typing import Callable, Iterator, List, Optional, Sequence

from .job_channel import JobChannel
from ..models.job import TransferJob, TransferOutcome, FailureKind
from ..models.worker import Worker
from ..utils.logger import get_logger, StructuredLogger
from ..exceptions import DispatchError


logger = get_logger(__name__)


class JobDispatcher:
    """
    Пул из W воркеров, разбирающих задачи из одного канала.

    Каждый воркер - блокирующий цикл: взять задачу, выполнить, опубликовать
    итог. Назначение задач - первому свободному воркеру.
    """

    def __init__(
        self,
        execute: Callable[[TransferJob], TransferOutcome],
        num_workers: int = 5,
        event_logger: Optional[StructuredLogger] = None
    ):
        if num_workers < 1:
            raise DispatchError("num_workers must be >= 1")

        self._execute = execute
        self.num_workers = num_workers
        self._event_logger = event_logger or StructuredLogger()

        self._channel: Optional[JobChannel] = None
        self._outcomes: "queue.Queue[TransferOutcome]" = queue.Queue()
        self._workers: List[Worker] = []
        self._threads: List[threading.Thread] = []
        self._started = False

    def seed(self, jobs: Sequence[TransferJob]):
        """
        Заполнение канала задачами и его закрытие.

        Дубликаты допустимы: каждая задача обрабатывается независимо.
        """
        if self._channel is not None:
            raise DispatchError("Dispatcher has already been seeded")
        if not jobs:
            raise DispatchError("No jobs to dispatch")

        self._channel = JobChannel(capacity=len(jobs))
        for job in jobs:
            self._channel.submit_job(job)
        self._channel.close()

        logger.info(f"Dispatched {len(jobs)} transfer jobs to channel")

    def start(self):
        """Запуск воркеров."""
        if self._channel is None:
            raise DispatchError("Dispatcher must be seeded before start")
        if self._started:
            raise DispatchError("Dispatcher is already started")
        self._started = True

        logger.info(f"Starting {self.num_workers} workers")
        for worker_id in range(1, self.num_workers + 1):
            worker = Worker(id=worker_id)
            thread = threading.Thread(
                target=self._worker_loop,
                args=(worker,),
                name=worker.name,
                daemon=True
            )
            self._workers.append(worker)
            self._threads.append(thread)
            thread.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Ожидание завершения всех воркеров.

        Returns:
            True если все воркеры завершились
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in self._threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)

        finished = not any(thread.is_alive() for thread in self._threads)
        if finished:
            logger.info("All workers have completed")
        return finished

    def drain_outcomes(self) -> Iterator[TransferOutcome]:
        """Выдача всех опубликованных итогов."""
        while True:
            try:
                yield self._outcomes.get_nowait()
            except queue.Empty:
                return

    def get_workers(self) -> List[Worker]:
        return list(self._workers)

    def _worker_loop(self, worker: Worker):
        """Основной цикл воркера."""
        worker.start()
        logger.debug(f"Worker {worker.id} started")

        try:
            while True:
                job = self._channel.get_job()
                if job is None:
                    break

                worker.set_busy()
                start_time = time.time()
                outcome = self._run_job(job, worker)
                worker.update_metrics(time.time() - start_time, success=outcome.is_success())
                worker.set_idle()

                self._publish(outcome)
        finally:
            worker.stop()
            logger.debug(f"Worker {worker.id} finished after {worker.metrics.jobs_processed} jobs")

    def _run_job(self, job: TransferJob, worker: Worker) -> TransferOutcome:
        """Выполнение задачи; любое исключение становится итогом этой задачи."""
        logger.debug(f"Worker {worker.id} processing {job.resource}")
        try:
            outcome = self._execute(job)
        except Exception as e:
            logger.exception(f"Unhandled error while transferring {job.resource} on worker {worker.id}")
            outcome = TransferOutcome.failed(
                job,
                FailureKind.UNEXPECTED,
                f"repo {job.resource}: unhandled error: {type(e).__name__}: {e}",
            )
        return dataclasses.replace(outcome, worker_id=worker.id)

    def _publish(self, outcome: TransferOutcome):
        """Публикация итога и событие в лог."""
        self._outcomes.put(outcome)

        self._event_logger.log_event(
            "transfer.outcome",
            level="INFO" if outcome.is_success() else "ERROR",
            resource=outcome.resource,
            worker_id=outcome.worker_id,
            status=outcome.kind.value if outcome.is_success() else outcome.failure.value,
            status_code=outcome.status_code,
            detail=outcome.detail or "transfer accepted",
        )

    def __repr__(self) -> str:
        return f"JobDispatcher(workers={self.num_workers}, started={self._started})"
