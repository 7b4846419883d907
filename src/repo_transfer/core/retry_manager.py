"""
Менеджер ретраев транспортного уровня с экспоненциальным backoff.
"""

import time
import random
import threading
from typing import Callable, Any, Optional, Dict, List, Tuple
from dataclasses import dataclass
from enum import Enum

from ..utils.logger import get_logger
from ..exceptions import RetryExhaustedError


logger = get_logger(__name__)


class BackoffStrategy(Enum):
    """Стратегии backoff."""
    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    FIXED = "fixed"


@dataclass
class RetryConfig:
    """Конфигурация ретраев."""
    max_retries: int = 3  # Повторы сверх первой попытки
    base_delay: float = 2.0  # Начальная задержка в секундах
    max_delay: float = 10.0  # Максимальная задержка в секундах
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_factor: float = 0.1
    strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    retry_on_exceptions: Optional[List[type]] = None  # None - ретраим любые исключения

    def __post_init__(self):
        if isinstance(self.strategy, str):
            self.strategy = BackoffStrategy(self.strategy)


class RetryManager:
    """
    Менеджер ретраев.

    Экземпляр разделяется всеми воркерами: конфигурация неизменна,
    статистика защищена блокировкой.
    """

    def __init__(self, config: Optional[RetryConfig] = None, sleep: Callable[[float], None] = time.sleep):
        self.config = config or RetryConfig()
        self._sleep = sleep
        self._lock = threading.Lock()

        self._stats = {
            'total_calls': 0,
            'total_retries': 0,
            'exhausted': 0,
            'total_delay': 0.0,
            'max_delay_used': 0.0
        }

        logger.debug(f"RetryManager initialized with config: {self.config}")

    @property
    def max_attempts(self) -> int:
        return self.config.max_retries + 1

    def should_retry(self, attempt: int, exception: Exception) -> bool:
        """
        Определение необходимости ретрая.

        Args:
            attempt: Номер завершившейся попытки (начиная с 1)
            exception: Исключение этой попытки

        Returns:
            True если нужен ретрай, False иначе
        """
        if attempt >= self.max_attempts:
            return False

        if self.config.retry_on_exceptions:
            return any(isinstance(exception, exc_type) for exc_type in self.config.retry_on_exceptions)

        return True

    def calculate_delay(self, attempt_number: int) -> float:
        """
        Расчет задержки перед следующей попыткой.

        Args:
            attempt_number: Номер ретрая (начиная с 1)

        Returns:
            Задержка в секундах, не больше max_delay
        """
        if attempt_number <= 0:
            return self.config.base_delay

        if self.config.strategy == BackoffStrategy.FIXED:
            delay = self.config.base_delay
        elif self.config.strategy == BackoffStrategy.LINEAR:
            delay = self.config.base_delay * attempt_number
        else:
            delay = self.config.base_delay * (self.config.exponential_base ** (attempt_number - 1))

        delay = min(delay, self.config.max_delay)

        if self.config.jitter:
            jitter_amount = delay * self.config.jitter_factor
            delay += random.uniform(-jitter_amount, jitter_amount)
            delay = min(max(0.0, delay), self.config.max_delay)

        return delay

    def execute_with_retry(self, operation: Callable[[int], Any], name: str = "") -> Tuple[Any, int]:
        """
        Выполнение операции с ретраями.

        Исключения, не подлежащие ретраю, пробрасываются сразу.

        Args:
            operation: Функция, принимающая номер попытки
            name: Имя операции для логов

        Returns:
            Кортеж (результат, число попыток)

        Raises:
            RetryExhaustedError: Если исчерпаны все попытки
        """
        with self._lock:
            self._stats['total_calls'] += 1

        attempt = 0
        while True:
            attempt += 1
            try:
                logger.debug(f"Executing {name}, attempt {attempt}/{self.max_attempts}")
                return operation(attempt), attempt
            except Exception as e:
                if self.config.retry_on_exceptions and not any(
                    isinstance(e, exc_type) for exc_type in self.config.retry_on_exceptions
                ):
                    raise

                if not self.should_retry(attempt, e):
                    with self._lock:
                        self._stats['exhausted'] += 1
                    error_msg = f"{name} failed after {attempt} attempts: {e}"
                    logger.warning(error_msg)
                    raise RetryExhaustedError(error_msg, attempts=attempt, last_exception=e) from e

                delay = self.calculate_delay(attempt)
                self._record_retry(delay)
                logger.warning(f"{name} failed on attempt {attempt}: {e}. Retrying in {delay:.2f}s")
                self._sleep(delay)

    def _record_retry(self, delay: float):
        with self._lock:
            self._stats['total_retries'] += 1
            self._stats['total_delay'] += delay
            self._stats['max_delay_used'] = max(self._stats['max_delay_used'], delay)

    def get_stats(self) -> Dict[str, Any]:
        """Получение статистики ретраев."""
        with self._lock:
            stats = self._stats.copy()
        if stats['total_retries'] > 0:
            stats['average_delay'] = stats['total_delay'] / stats['total_retries']
        else:
            stats['average_delay'] = 0.0
        return stats

    def __repr__(self) -> str:
        stats = self.get_stats()
        return f"RetryManager(max_retries={self.config.max_retries}, retries={stats['total_retries']})"
