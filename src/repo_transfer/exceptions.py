"""
Исключения для массового переноса репозиториев.
"""

from typing import Optional


class TransferError(Exception):
    """Базовое исключение для переноса репозиториев."""
    pass


class ConfigurationError(TransferError):
    """Ошибка конфигурации (фатальная, до запуска задач)."""
    pass


class CredentialError(TransferError):
    """Отсутствует или пустой токен доступа."""
    pass


class JobChannelError(TransferError):
    """Ошибка канала задач."""
    pass


class DispatchError(TransferError):
    """Нарушение инварианта диспетчеризации (потерянные или лишние результаты)."""
    pass


class RetryExhaustedError(TransferError):
    """Исчерпаны все попытки ретрая."""

    def __init__(self, message: str, attempts: int = 0, last_exception: Optional[Exception] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception
