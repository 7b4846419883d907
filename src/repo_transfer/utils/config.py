"""
Система конфигурации для переноса репозиториев.
"""

import json
import os
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path

import yaml

from ..core.retry_manager import RetryConfig
from ..core.transfer_executor import ExecutorConfig
from ..models.job import TransferJob
from ..exceptions import ConfigurationError, CredentialError


DEFAULT_TOKEN_ENV = "GITHUB_TOKEN_CLASSIC"
FALLBACK_TOKEN_ENV = "GITHUB_TOKEN"

# Ключи файла конфигурации и их синонимы
_ACCOUNT_KEYS = {
    'original_account': ('originalUser', 'originalAccount', 'original_account'),
    'new_account': ('newUser', 'newAccount', 'new_account'),
    'resources': ('repositories', 'resources'),
}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class PoolConfig:
    """Параметры пула воркеров и завершения прогона."""
    num_workers: int = 5
    log_level: str = "INFO"
    log_file: Optional[str] = None
    fail_on_errors: bool = False  # Ненулевой код выхода при неудачных переносах


@dataclass
class TransferConfig:
    """Основная конфигурация прогона переноса."""

    original_account: str = ""
    new_account: str = ""
    resources: List[str] = field(default_factory=list)

    pool: PoolConfig = None
    retry: RetryConfig = None
    executor: ExecutorConfig = None

    def __post_init__(self):
        """Инициализация конфигураций по умолчанию."""
        if self.pool is None:
            self.pool = PoolConfig()
        if self.retry is None:
            self.retry = RetryConfig()
        if self.executor is None:
            self.executor = ExecutorConfig()

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь."""
        data = asdict(self)
        data['retry'].pop('retry_on_exceptions', None)
        strategy = data['retry'].get('strategy')
        if isinstance(strategy, Enum):
            data['retry']['strategy'] = strategy.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransferConfig':
        """
        Создание из словаря.

        Принимает как исходные ключи (originalUser, newUser, repositories),
        так и snake_case.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        data = dict(data)
        values = {}
        for name, aliases in _ACCOUNT_KEYS.items():
            for alias in aliases:
                if alias in data:
                    values[name] = data.pop(alias)
                    break

        try:
            pool = PoolConfig(**(data.pop('pool', None) or {}))
            retry_section = dict(data.pop('retry', None) or {})
            if 'retry_on_exceptions' in retry_section:
                raise ConfigurationError("retry.retry_on_exceptions cannot be set from a configuration file")
            retry = RetryConfig(**retry_section)
            executor = ExecutorConfig(**(data.pop('executor', None) or {}))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration section: {e}") from e

        if data:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(data))}")

        return cls(pool=pool, retry=retry, executor=executor, **values)

    def validate(self) -> bool:
        """Валидация конфигурации; собирает все ошибки сразу."""
        errors = []

        if not isinstance(self.original_account, str) or not self.original_account.strip():
            errors.append("originalUser must be a non-empty string")
        if not isinstance(self.new_account, str) or not self.new_account.strip():
            errors.append("newUser must be a non-empty string")

        if not isinstance(self.resources, list) or not self.resources:
            errors.append("repositories must be a non-empty list")
        else:
            for index, name in enumerate(self.resources):
                if not isinstance(name, str) or not name.strip():
                    errors.append(f"repositories[{index}] must be a non-empty string")

        if not _is_int(self.pool.num_workers) or self.pool.num_workers < 1:
            errors.append("pool.num_workers must be an integer >= 1")

        if not _is_int(self.retry.max_retries) or self.retry.max_retries < 0:
            errors.append("retry.max_retries must be an integer >= 0")

        delays_are_numbers = True
        for name in ("base_delay", "max_delay"):
            value = getattr(self.retry, name)
            if not _is_number(value) or value < 0:
                errors.append(f"retry.{name} must be a number >= 0")
                delays_are_numbers = False
        if delays_are_numbers and self.retry.max_delay < self.retry.base_delay:
            errors.append("retry.max_delay must be >= retry.base_delay")

        if not _is_number(self.executor.request_timeout) or self.executor.request_timeout <= 0:
            errors.append("executor.request_timeout must be a number > 0")
        if not self.executor.api_url:
            errors.append("executor.api_url must be set")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def build_jobs(self) -> List[TransferJob]:
        """Одна задача на каждое имя репозитория, в исходном порядке."""
        return [
            TransferJob(
                resource=name.strip(),
                source_account=self.original_account.strip(),
                destination_account=self.new_account.strip(),
                sequence=index,
            )
            for index, name in enumerate(self.resources)
        ]


def load_config(file_path: Union[str, Path]) -> TransferConfig:
    """
    Загрузка конфигурации из файла.

    Args:
        file_path: Путь к файлу конфигурации (.yaml, .yml или .json)

    Returns:
        Провалидированный объект конфигурации
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    suffix = file_path.suffix.lower()
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            if suffix in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            elif suffix == '.json':
                data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported configuration file format: {file_path.suffix}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to parse configuration file {file_path}: {e}") from e

    config = TransferConfig.from_dict(data or {})
    apply_env_overrides(config)
    config.validate()

    return config


def apply_env_overrides(config: TransferConfig, environ: Optional[Dict[str, str]] = None) -> TransferConfig:
    """
    Переопределение параметров из переменных окружения.

    Returns:
        Тот же объект конфигурации
    """
    env = os.environ if environ is None else environ

    try:
        if env.get('REPO_TRANSFER_NUM_WORKERS'):
            config.pool.num_workers = int(env['REPO_TRANSFER_NUM_WORKERS'])

        if env.get('REPO_TRANSFER_LOG_LEVEL'):
            config.pool.log_level = env['REPO_TRANSFER_LOG_LEVEL']

        if env.get('REPO_TRANSFER_FAIL_ON_ERRORS'):
            config.pool.fail_on_errors = env['REPO_TRANSFER_FAIL_ON_ERRORS'].lower() == 'true'

        if env.get('RETRY_MAX_RETRIES'):
            config.retry.max_retries = int(env['RETRY_MAX_RETRIES'])

        if env.get('RETRY_BASE_DELAY'):
            config.retry.base_delay = float(env['RETRY_BASE_DELAY'])

        if env.get('RETRY_MAX_DELAY'):
            config.retry.max_delay = float(env['RETRY_MAX_DELAY'])

        if env.get('REPO_TRANSFER_API_URL'):
            config.executor.api_url = env['REPO_TRANSFER_API_URL']

        if env.get('REPO_TRANSFER_REQUEST_TIMEOUT'):
            config.executor.request_timeout = float(env['REPO_TRANSFER_REQUEST_TIMEOUT'])
    except ValueError as e:
        raise ConfigurationError(f"Invalid environment override: {e}") from e

    return config


def load_token(env_var: str = DEFAULT_TOKEN_ENV, environ: Optional[Dict[str, str]] = None) -> str:
    """
    Получение токена доступа из окружения.

    Raises:
        CredentialError: Токен не задан или пуст
    """
    env = os.environ if environ is None else environ

    token = (env.get(env_var) or "").strip()
    if not token and env_var == DEFAULT_TOKEN_ENV:
        token = (env.get(FALLBACK_TOKEN_ENV) or "").strip()

    if not token:
        raise CredentialError(f"{env_var} environment variable is not set")

    return token
