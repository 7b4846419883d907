"""
Массовый конкурентный перенос репозиториев GitHub между аккаунтами.

Основные компоненты:
- RunCoordinator: прогон целиком, от валидации до сводки
- JobDispatcher: фиксированный пул воркеров над каналом задач
- TransferExecutor: HTTP-запрос переноса, ретраи и классификация ответа
- ResultAggregator: подсчет итогов без потерь и двойного учета
"""

from .core.run_coordinator import RunCoordinator
from .core.dispatcher import JobDispatcher
from .core.job_channel import JobChannel
from .core.transfer_executor import TransferExecutor, ExecutorConfig, classify_response
from .core.retry_manager import RetryManager, RetryConfig
from .core.result_aggregator import ResultAggregator
from .models import (
    TransferJob,
    TransferOutcome,
    OutcomeKind,
    FailureKind,
    RunSummary,
    RunState
)
from .utils.config import TransferConfig, PoolConfig, load_config, load_token
from .utils.logger import get_logger, setup_logging, StructuredLogger
from .exceptions import (
    TransferError,
    ConfigurationError,
    CredentialError,
    DispatchError,
    RetryExhaustedError
)

__version__ = "1.0.0"

__all__ = [
    "RunCoordinator",
    "JobDispatcher",
    "JobChannel",
    "TransferExecutor",
    "ExecutorConfig",
    "classify_response",
    "RetryManager",
    "RetryConfig",
    "ResultAggregator",
    "TransferJob",
    "TransferOutcome",
    "OutcomeKind",
    "FailureKind",
    "RunSummary",
    "RunState",
    "TransferConfig",
    "PoolConfig",
    "load_config",
    "load_token",
    "get_logger",
    "setup_logging",
    "StructuredLogger",
    "TransferError",
    "ConfigurationError",
    "CredentialError",
    "DispatchError",
    "RetryExhaustedError"
]
