"""
Координатор прогона: связывает исполнитель, диспетчер и агрегатор.
"""

import dataclasses
import threading
from typing import Callable, List, Optional

from .retry_manager import RetryManager
from .transfer_executor import TransferExecutor, TRANSPORT_EXCEPTIONS
from .dispatcher import JobDispatcher
from .result_aggregator import ResultAggregator
from ..models.job import TransferJob
from ..models.summary import RunState, RunSummary
from ..utils.config import TransferConfig
from ..utils.logger import get_logger, StructuredLogger
from ..exceptions import ConfigurationError, CredentialError, DispatchError


logger = get_logger(__name__)


class RunCoordinator:
    """
    Координатор одного прогона переноса.

    Состояния: IDLE -> DISPATCHING -> AWAITING_WORKERS -> AGGREGATING -> DONE.
    Фатальные ошибки до запуска задач переводят его в CONFIG_ERROR или
    CREDENTIAL_ERROR, и ни один запрос не отправляется.
    """

    def __init__(
        self,
        config: TransferConfig,
        token: Optional[str],
        event_logger: Optional[StructuredLogger] = None,
        executor_factory: Optional[Callable[[str], TransferExecutor]] = None
    ):
        self.config = config
        self._token = token
        self._event_logger = event_logger or StructuredLogger()
        self._executor_factory = executor_factory or self._default_executor
        self._lock = threading.Lock()
        self._state = RunState.IDLE
        self._summary: Optional[RunSummary] = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def summary(self) -> Optional[RunSummary]:
        return self._summary

    def _set_state(self, state: RunState):
        with self._lock:
            logger.debug(f"Run state {self._state.value} -> {state.value}")
            self._state = state

    def _default_executor(self, token: str) -> TransferExecutor:
        retry_config = self.config.retry
        if not retry_config.retry_on_exceptions:
            retry_config = dataclasses.replace(retry_config, retry_on_exceptions=list(TRANSPORT_EXCEPTIONS))
        return TransferExecutor(token, self.config.executor, RetryManager(retry_config))

    def _prepare(self) -> List[TransferJob]:
        """Проверка входных данных до запуска каких-либо задач."""
        try:
            self.config.validate()
            jobs = self.config.build_jobs()
        except ConfigurationError as e:
            self._set_state(RunState.CONFIG_ERROR)
            self._event_logger.log_error(e, phase="configuration")
            raise
        except ValueError as e:
            self._set_state(RunState.CONFIG_ERROR)
            self._event_logger.log_error(e, phase="configuration")
            raise ConfigurationError(str(e)) from e

        if not self._token or not self._token.strip():
            self._set_state(RunState.CREDENTIAL_ERROR)
            error = CredentialError("API token is missing or empty")
            self._event_logger.log_error(error, phase="credentials")
            raise error

        return jobs

    def run(self) -> RunSummary:
        """
        Выполнение прогона.

        Returns:
            Сводка прогона

        Raises:
            ConfigurationError: Невалидная конфигурация или пустой список задач
            CredentialError: Отсутствует токен
            DispatchError: Число итогов не совпало с числом задач
        """
        if self._state != RunState.IDLE:
            raise DispatchError(f"Run already started (current state: {self._state.value})")

        jobs = self._prepare()

        self._event_logger.set_context(
            source=self.config.original_account,
            destination=self.config.new_account,
            jobs=len(jobs),
        )
        try:
            return self._execute(jobs)
        finally:
            self._event_logger.clear_context()

    def _execute(self, jobs: List[TransferJob]) -> RunSummary:
        """Диспетчеризация, ожидание воркеров и агрегация."""
        num_workers = self.config.pool.num_workers

        logger.info(f"Processing {len(jobs)} repositories for transfer from "
                    f"{self.config.original_account} to {self.config.new_account}")

        executor = self._executor_factory(self._token)
        aggregator = ResultAggregator(expected_total=len(jobs))
        dispatcher = JobDispatcher(executor.execute, num_workers=num_workers, event_logger=self._event_logger)

        try:
            self._set_state(RunState.DISPATCHING)
            dispatcher.seed(jobs)
            dispatcher.start()

            self._set_state(RunState.AWAITING_WORKERS)
            logger.info("All jobs dispatched. Waiting for workers to complete")
            dispatcher.join()
        finally:
            executor.close()

        self._set_state(RunState.AGGREGATING)
        for outcome in dispatcher.drain_outcomes():
            aggregator.record(outcome)

        if not aggregator.is_complete():
            raise DispatchError(
                f"Expected {len(jobs)} outcomes, observed {aggregator.observed}"
            )

        summary = aggregator.finalize()
        self._summary = summary
        self._set_state(RunState.DONE)

        self._event_logger.log_event(
            "transfer.summary",
            level="INFO" if not summary.has_failures else "WARNING",
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
            duration=round(summary.duration, 3),
        )
        return summary

    def exit_code(self) -> int:
        """
        Код выхода процесса для завершенного прогона.

        0 - прогон завершен; 2 - есть неудачи и включен fail_on_errors.
        """
        if self._summary is None:
            return 1
        if self.config.pool.fail_on_errors and self._summary.has_failures:
            return 2
        return 0

    def __repr__(self) -> str:
        return f"RunCoordinator(state={self._state.value})"
