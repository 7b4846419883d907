"""
Исполнитель переноса: один HTTP POST на репозиторий, ретраи транспорта
и классификация ответа.
"""

import threading
from typing import Callable, Dict, List, Optional
from dataclasses import dataclass
from urllib.parse import quote

import requests

from .retry_manager import RetryManager, RetryConfig
from ..models.job import TransferJob, TransferOutcome, FailureKind
from ..utils.logger import get_logger
from ..exceptions import CredentialError, RetryExhaustedError


logger = get_logger(__name__)


# Ошибки, после которых запрос имеет смысл повторить
TRANSPORT_EXCEPTIONS = (requests.ConnectionError, requests.Timeout)

SUCCESS_STATUS = 202

_FAILURE_BY_STATUS = {
    401: (FailureKind.UNAUTHORIZED, "Unauthorized", "Check the token and its permissions"),
    403: (FailureKind.FORBIDDEN, "Forbidden", "API rate limit hit or insufficient token scope"),
    404: (FailureKind.NOT_FOUND, "Not Found", "Source account or repository does not exist"),
    422: (FailureKind.UNPROCESSABLE, "Unprocessable Entity",
          "Semantic validation failed (invalid new owner or transfer already pending)"),
}


@dataclass
class ExecutorConfig:
    """Конфигурация исполнителя переноса."""
    api_url: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    request_timeout: float = 30.0  # Таймаут одной попытки
    body_excerpt_limit: int = 500
    user_agent: str = "repo-transfer"


def excerpt(body: Optional[str], limit: int) -> str:
    """Усечение тела ответа для диагностики."""
    if not body:
        return ""
    body = body.strip()
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


def classify_response(
    job: TransferJob,
    status_code: int,
    body: Optional[str],
    attempts: int = 1,
    excerpt_limit: int = 500
) -> TransferOutcome:
    """
    Классификация HTTP-ответа в итог задачи.

    Чистая функция: одинаковые (status_code, body) всегда дают одинаковый итог.
    """
    if status_code == SUCCESS_STATUS:
        return TransferOutcome.success(job, status_code=status_code, attempts=attempts)

    body_excerpt = excerpt(body, excerpt_limit)

    if status_code in _FAILURE_BY_STATUS:
        failure, reason, hint = _FAILURE_BY_STATUS[status_code]
        detail = f"repo {job.resource}: {reason} (HTTP {status_code}). {hint}. Response: {body_excerpt}"
    else:
        failure = FailureKind.UNEXPECTED
        detail = f"repo {job.resource}: Unexpected status code (HTTP {status_code}). Response: {body_excerpt}"

    return TransferOutcome.failed(
        job,
        failure,
        detail,
        status_code=status_code,
        body_excerpt=body_excerpt,
        attempts=attempts,
    )


class TransferExecutor:
    """
    Исполнитель переноса репозиториев через GitHub API.

    Конфигурация и менеджер ретраев разделяются воркерами только на чтение;
    сессия requests создается отдельно для каждого потока.
    """

    def __init__(
        self,
        token: str,
        config: Optional[ExecutorConfig] = None,
        retry_manager: Optional[RetryManager] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None
    ):
        if not token or not token.strip():
            raise CredentialError("API token is empty")

        self.config = config or ExecutorConfig()
        self._token = token.strip()
        self._retry_manager = retry_manager or RetryManager(
            RetryConfig(retry_on_exceptions=list(TRANSPORT_EXCEPTIONS))
        )

        self._session_factory = session_factory or requests.Session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

        logger.info(f"TransferExecutor initialized for {self.config.api_url}")

    @property
    def retry_manager(self) -> RetryManager:
        return self._retry_manager

    def build_url(self, job: TransferJob) -> str:
        """URL эндпоинта переноса для задачи."""
        base = self.config.api_url.rstrip('/')
        return f"{base}/repos/{quote(job.source_account, safe='')}/{quote(job.resource, safe='')}/transfer"

    def build_headers(self) -> Dict[str, str]:
        return {
            'Accept': 'application/vnd.github+json',
            'Authorization': f'Bearer {self._token}',
            'X-GitHub-Api-Version': self.config.api_version,
            'Content-Type': 'application/json',
            'User-Agent': self.config.user_agent,
        }

    @staticmethod
    def build_body(job: TransferJob) -> Dict[str, str]:
        return {'new_owner': job.destination_account, 'new_name': job.resource}

    def _get_session(self) -> requests.Session:
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._session_factory()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def execute(self, job: TransferJob) -> TransferOutcome:
        """
        Выполнение переноса одного репозитория.

        Args:
            job: Задача переноса

        Returns:
            Ровно один итог задачи; исключения наружу не выходят
        """
        url = self.build_url(job)
        headers = self.build_headers()
        body = self.build_body(job)

        logger.info(f"Attempting to transfer {job.source_account}/{job.resource} to {job.destination_account}")

        def send(attempt: int) -> requests.Response:
            return self._get_session().post(
                url,
                json=body,
                headers=headers,
                timeout=self.config.request_timeout,
            )

        try:
            response, attempts = self._retry_manager.execute_with_retry(send, name=f"transfer {job.resource}")
        except RetryExhaustedError as e:
            return TransferOutcome.failed(
                job,
                FailureKind.TRANSPORT_ERROR,
                f"repo {job.resource}: failed to send transfer request after {e.attempts} attempts: {e.last_exception}",
                attempts=e.attempts,
            )
        except requests.RequestException as e:
            return TransferOutcome.failed(
                job,
                FailureKind.TRANSPORT_ERROR,
                f"repo {job.resource}: failed to send transfer request: {e}",
            )

        outcome = classify_response(
            job,
            response.status_code,
            response.text,
            attempts=attempts,
            excerpt_limit=self.config.body_excerpt_limit,
        )
        if outcome.is_success():
            logger.info(f"Repository {job.resource} transfer accepted (HTTP {response.status_code})")
        else:
            logger.error(f"Repository {job.resource} transfer failed: {outcome.failure.value} "
                         f"(HTTP {response.status_code})")
        return outcome

    def close(self):
        """Закрытие всех созданных сессий."""
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def __repr__(self) -> str:
        return f"TransferExecutor(api_url={self.config.api_url})"
