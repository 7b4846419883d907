"""
Основные компоненты переноса репозиториев.
"""

from .retry_manager import RetryManager, RetryConfig, BackoffStrategy
from .transfer_executor import TransferExecutor, ExecutorConfig, classify_response
from .job_channel import JobChannel
from .dispatcher import JobDispatcher
from .result_aggregator import ResultAggregator
from .run_coordinator import RunCoordinator

__all__ = [
    "RetryManager",
    "RetryConfig",
    "BackoffStrategy",
    "TransferExecutor",
    "ExecutorConfig",
    "classify_response",
    "JobChannel",
    "JobDispatcher",
    "ResultAggregator",
    "RunCoordinator"
]
