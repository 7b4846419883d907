"""
Модели данных для переноса репозиториев.
"""

from .job import TransferJob, TransferOutcome, OutcomeKind, FailureKind
from .worker import Worker, WorkerStatus, WorkerMetrics
from .summary import RunSummary, RunState

__all__ = [
    "TransferJob",
    "TransferOutcome",
    "OutcomeKind",
    "FailureKind",
    "Worker",
    "WorkerStatus",
    "WorkerMetrics",
    "RunSummary",
    "RunState"
]
