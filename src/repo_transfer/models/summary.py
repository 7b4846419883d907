"""
Итоговая сводка прогона.
"""

from enum import Enum
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime

from .job import TransferOutcome, FailureKind


class RunState(Enum):
    """Состояния координатора прогона."""
    IDLE = "idle"
    DISPATCHING = "dispatching"
    AWAITING_WORKERS = "awaiting_workers"
    AGGREGATING = "aggregating"
    DONE = "done"
    CONFIG_ERROR = "config_error"
    CREDENTIAL_ERROR = "credential_error"


@dataclass
class RunSummary:
    """Сводка прогона: счетчики и результаты в порядке завершения."""

    total: int
    succeeded: int = 0
    failed: int = 0
    outcomes: List[TransferOutcome] = field(default_factory=list)
    failures_by_kind: Dict[FailureKind, int] = field(default_factory=dict)
    jobs_per_worker: Dict[int, int] = field(default_factory=dict)
    attempts: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def duration(self) -> float:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return 0.0

    @property
    def is_complete(self) -> bool:
        """Все задачи получили ровно один итог."""
        return len(self.outcomes) == self.total and self.succeeded + self.failed == self.total

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def failed_outcomes(self) -> List[TransferOutcome]:
        return [o for o in self.outcomes if o.is_failure()]

    def to_dict(self) -> Dict:
        """Преобразование в словарь."""
        return {
            'total': self.total,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'attempts': self.attempts,
            'duration': round(self.duration, 3),
            'failures_by_kind': {k.value: v for k, v in self.failures_by_kind.items()},
            'jobs_per_worker': dict(self.jobs_per_worker),
        }
