"""
Система логирования для переноса репозиториев.
"""

import logging
import sys
import threading
from typing import Optional, Dict, Any
from datetime import datetime
from pathlib import Path


class TransferFormatter(logging.Formatter):
    """Форматтер логов: время | уровень | логгер | поток | сообщение."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)-20s | %(threadName)-15s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    log_format: Optional[str] = None
):
    """
    Настройка системы логирования.

    Args:
        level: Уровень логирования
        log_file: Путь к файлу логов
        enable_console: Включить вывод в консоль
        log_format: Кастомный формат логов
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if log_format:
        formatter = logging.Formatter(log_format)
    else:
        formatter = TransferFormatter()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Библиотеки HTTP слишком разговорчивы на DEBUG
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Получение логгера для модуля."""
    return logging.getLogger(name)


class StructuredLogger:
    """
    Структурированный логгер событий прогона.

    Передается координатору явно, чтобы тесты могли подменить его
    и проверить поток событий без глобального состояния. Контекст
    прогона (аккаунты, число задач) добавляется ко всем событиям.
    """

    def __init__(self, name: str = "repo_transfer.events"):
        self.logger = get_logger(name)
        self._context: Dict[str, Any] = {}
        self._context_lock = threading.Lock()

    def set_context(self, **kwargs):
        """Установка контекста прогона."""
        with self._context_lock:
            self._context.update(kwargs)

    def clear_context(self):
        with self._context_lock:
            self._context.clear()

    def get_context(self) -> Dict[str, Any]:
        with self._context_lock:
            return dict(self._context)

    def log_event(self, event: str, level: str = "INFO", **data):
        """
        Логирование события.

        Сообщение - имя события и пары key=value (контекст, затем данные);
        полная запись доступна обработчикам в record.structured_data.
        """
        context = self.get_context()
        payload = {
            'event': event,
            'timestamp': datetime.now().isoformat(),
            'context': context,
            'data': data
        }

        fields = " ".join(f"{key}={value}" for key, value in {**context, **data}.items() if value is not None)
        message = f"{event} {fields}" if fields else event

        numeric_level = getattr(logging, level.upper(), logging.INFO)
        self.logger.log(numeric_level, message, extra={'structured_data': payload})

    def log_error(self, error: Exception, **context):
        """Фатальная ошибка прогона как событие transfer.error."""
        self.log_event(
            "transfer.error",
            level="ERROR",
            error=str(error),
            error_type=type(error).__name__,
            **context
        )
