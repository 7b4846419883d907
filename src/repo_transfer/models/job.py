"""
Модели задач переноса и их результатов.
"""

from enum import Enum
from typing import Optional, Dict, Any
from dataclasses import dataclass, field
from datetime import datetime


class OutcomeKind(Enum):
    """Итог выполнения задачи."""
    SUCCESS = "success"
    FAILURE = "failure"


class FailureKind(Enum):
    """Классификация неудачного переноса."""
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    UNPROCESSABLE = "unprocessable"
    UNEXPECTED = "unexpected"
    TRANSPORT_ERROR = "transport_error"

    @property
    def is_client_error(self) -> bool:
        return self in (
            FailureKind.UNAUTHORIZED,
            FailureKind.FORBIDDEN,
            FailureKind.NOT_FOUND,
            FailureKind.UNPROCESSABLE,
        )


@dataclass(frozen=True)
class TransferJob:
    """Задача на перенос одного репозитория. Неизменяема."""

    resource: str
    source_account: str
    destination_account: str
    sequence: int = 0

    def __post_init__(self):
        """Валидация после инициализации."""
        if not self.resource or not self.resource.strip():
            raise ValueError("Resource name is required")
        if not self.destination_account:
            raise ValueError("Destination account is required")


@dataclass(frozen=True)
class TransferOutcome:
    """Результат выполнения одной задачи переноса."""

    resource: str
    kind: OutcomeKind
    failure: Optional[FailureKind] = None
    status_code: Optional[int] = None
    detail: str = ""
    body_excerpt: str = ""
    attempts: int = 1
    worker_id: Optional[int] = None
    sequence: int = 0
    completed_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def success(cls, job: TransferJob, status_code: int = 202, attempts: int = 1) -> 'TransferOutcome':
        """Успешный перенос."""
        return cls(
            resource=job.resource,
            kind=OutcomeKind.SUCCESS,
            status_code=status_code,
            attempts=attempts,
            sequence=job.sequence,
        )

    @classmethod
    def failed(
        cls,
        job: TransferJob,
        failure: FailureKind,
        detail: str,
        status_code: Optional[int] = None,
        body_excerpt: str = "",
        attempts: int = 1
    ) -> 'TransferOutcome':
        """Неудачный перенос с классификацией ошибки."""
        return cls(
            resource=job.resource,
            kind=OutcomeKind.FAILURE,
            failure=failure,
            status_code=status_code,
            detail=detail,
            body_excerpt=body_excerpt,
            attempts=attempts,
            sequence=job.sequence,
        )

    def is_success(self) -> bool:
        """Проверка успешности выполнения."""
        return self.kind == OutcomeKind.SUCCESS

    def is_failure(self) -> bool:
        """Проверка неудачного выполнения."""
        return self.kind == OutcomeKind.FAILURE

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь."""
        return {
            'resource': self.resource,
            'status': self.kind.value,
            'failure': self.failure.value if self.failure else None,
            'status_code': self.status_code,
            'detail': self.detail,
            'attempts': self.attempts,
            'worker_id': self.worker_id,
        }
