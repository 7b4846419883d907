"""
Тесты для отдельных компонентов: канал задач, ретраи, агрегатор.
"""

import dataclasses
import threading
from collections import Counter

import pytest
import requests

from repo_transfer.core.job_channel import JobChannel
from repo_transfer.core.retry_manager import RetryManager, RetryConfig, BackoffStrategy
from repo_transfer.core.result_aggregator import ResultAggregator
from repo_transfer.models.job import TransferJob, TransferOutcome, FailureKind
from repo_transfer.exceptions import JobChannelError, RetryExhaustedError


def make_job(name: str, sequence: int = 0) -> TransferJob:
    return TransferJob(resource=name, source_account="orig", destination_account="new", sequence=sequence)


class TestTransferJob:
    """Тесты модели задачи."""

    def test_job_is_immutable(self):
        job = make_job("repo")
        with pytest.raises(dataclasses.FrozenInstanceError):
            job.resource = "other"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_resource_rejected(self, name):
        with pytest.raises(ValueError):
            make_job(name)


class TestJobChannel:
    """Тесты для канала задач."""

    def test_submit_and_get_job(self):
        channel = JobChannel(capacity=2)
        job = make_job("repo-1")

        channel.submit_job(job)
        assert len(channel) == 1

        assert channel.get_job() == job
        assert len(channel) == 0

    def test_closed_and_drained_returns_none(self):
        channel = JobChannel(capacity=1, poll_interval=0.01)
        channel.submit_job(make_job("repo-1"))
        channel.close()

        assert channel.get_job() is not None
        assert channel.get_job() is None
        assert channel.get_job() is None

    def test_submit_after_close_raises(self):
        channel = JobChannel(capacity=1)
        channel.close()

        with pytest.raises(JobChannelError):
            channel.submit_job(make_job("repo-1"))

    def test_overflow_raises(self):
        channel = JobChannel(capacity=1)
        channel.submit_job(make_job("repo-1"))

        with pytest.raises(JobChannelError):
            channel.submit_job(make_job("repo-2"))

    def test_invalid_capacity(self):
        with pytest.raises(JobChannelError):
            JobChannel(capacity=0)

    def test_blocked_consumer_wakes_on_close(self):
        channel = JobChannel(capacity=1, poll_interval=0.01)
        result = []

        consumer = threading.Thread(target=lambda: result.append(channel.get_job()))
        consumer.start()
        channel.close()
        consumer.join(timeout=2.0)

        assert not consumer.is_alive()
        assert result == [None]

    def test_each_job_claimed_once(self):
        """Каждая задача достается ровно одному потребителю."""
        jobs = [make_job(f"repo-{i}", i) for i in range(100)]
        channel = JobChannel(capacity=len(jobs), poll_interval=0.01)
        for job in jobs:
            channel.submit_job(job)
        channel.close()

        claimed = []
        lock = threading.Lock()

        def consume():
            while True:
                job = channel.get_job()
                if job is None:
                    return
                with lock:
                    claimed.append(job.sequence)

        threads = [threading.Thread(target=consume) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5.0)

        assert sorted(claimed) == list(range(100))
        assert channel.get_metrics()['jobs_retrieved'] == 100


class TestRetryManager:
    """Тесты для менеджера ретраев."""

    def test_defaults(self):
        manager = RetryManager()
        assert manager.config.max_retries == 3
        assert manager.config.base_delay == 2.0
        assert manager.config.max_delay == 10.0
        assert manager.max_attempts == 4

    def test_exponential_backoff_is_capped(self):
        manager = RetryManager(RetryConfig(base_delay=2.0, max_delay=10.0, jitter=False))

        delays = [manager.calculate_delay(n) for n in range(1, 5)]

        assert delays == [2.0, 4.0, 8.0, 10.0]

    def test_linear_backoff(self):
        config = RetryConfig(strategy=BackoffStrategy.LINEAR, base_delay=1.0, max_delay=10.0, jitter=False)
        manager = RetryManager(config)

        assert [manager.calculate_delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_fixed_backoff_from_string(self):
        config = RetryConfig(strategy="fixed", base_delay=1.5, jitter=False)
        manager = RetryManager(config)

        assert manager.calculate_delay(3) == 1.5

    def test_jitter_stays_within_bounds(self):
        manager = RetryManager(RetryConfig(base_delay=2.0, max_delay=10.0, jitter=True, jitter_factor=0.1))

        for attempt in range(1, 6):
            delay = manager.calculate_delay(attempt)
            assert 0.0 <= delay <= 10.0

    def test_success_after_transient_errors(self, fast_retry_manager):
        calls = []

        def operation(attempt):
            calls.append(attempt)
            if attempt < 3:
                raise requests.ConnectionError("connection reset")
            return "ok"

        result, attempts = fast_retry_manager.execute_with_retry(operation, name="op")

        assert result == "ok"
        assert attempts == 3
        assert calls == [1, 2, 3]
        assert fast_retry_manager.recorded_delays == [2.0, 4.0]

    def test_exhausted_raises_with_last_exception(self, fast_retry_manager):
        def operation(attempt):
            raise requests.Timeout(f"timeout {attempt}")

        with pytest.raises(RetryExhaustedError) as exc_info:
            fast_retry_manager.execute_with_retry(operation, name="op")

        assert exc_info.value.attempts == 4
        assert "timeout 4" in str(exc_info.value.last_exception)
        assert fast_retry_manager.get_stats()['exhausted'] == 1
        assert fast_retry_manager.get_stats()['total_retries'] == 3

    def test_non_retryable_exception_propagates(self, fast_retry_manager):
        calls = []

        def operation(attempt):
            calls.append(attempt)
            raise KeyError("bug")

        with pytest.raises(KeyError):
            fast_retry_manager.execute_with_retry(operation)

        assert calls == [1]

    def test_zero_retries(self):
        manager = RetryManager(RetryConfig(max_retries=0, jitter=False), sleep=lambda d: None)

        def operation(attempt):
            raise OSError("down")

        with pytest.raises(RetryExhaustedError) as exc_info:
            manager.execute_with_retry(operation)

        assert exc_info.value.attempts == 1


class TestResultAggregator:
    """Тесты для агрегатора итогов."""

    def test_counts_by_kind_in_any_order(self):
        jobs = [make_job(f"repo-{i}", i) for i in range(4)]
        outcomes = [
            TransferOutcome.failed(jobs[3], FailureKind.NOT_FOUND, "missing", status_code=404),
            TransferOutcome.success(jobs[0]),
            TransferOutcome.failed(jobs[1], FailureKind.TRANSPORT_ERROR, "down", attempts=4),
            TransferOutcome.success(jobs[2]),
        ]
        aggregator = ResultAggregator(expected_total=4)

        for outcome in outcomes:
            aggregator.record(outcome)
        summary = aggregator.finalize()

        assert aggregator.is_complete()
        assert summary.succeeded == 2
        assert summary.failed == 2
        assert summary.is_complete
        assert summary.attempts == 7
        assert summary.failures_by_kind == {FailureKind.NOT_FOUND: 1, FailureKind.TRANSPORT_ERROR: 1}
        assert [o.resource for o in summary.outcomes] == ["repo-3", "repo-0", "repo-1", "repo-2"]

    def test_counting_ignores_detail_text(self):
        """Текст сообщения не влияет на подсчет."""
        job = make_job("repo")
        aggregator = ResultAggregator(expected_total=2)

        aggregator.record(TransferOutcome.failed(job, FailureKind.UNEXPECTED, "[SUCCESS] looks fine"))
        aggregator.record(TransferOutcome.success(job))
        summary = aggregator.finalize()

        assert (summary.succeeded, summary.failed) == (1, 1)

    def test_incomplete_until_all_observed(self):
        aggregator = ResultAggregator(expected_total=2)
        aggregator.record(TransferOutcome.success(make_job("repo")))

        assert not aggregator.is_complete()
        assert aggregator.observed == 1

    def test_concurrent_records(self):
        aggregator = ResultAggregator(expected_total=400)
        job = make_job("repo")

        def produce(success):
            for _ in range(100):
                if success:
                    aggregator.record(TransferOutcome.success(job))
                else:
                    aggregator.record(TransferOutcome.failed(job, FailureKind.FORBIDDEN, "no"))

        threads = [threading.Thread(target=produce, args=(i % 2 == 0,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        summary = aggregator.finalize()
        assert Counter(o.is_success() for o in summary.outcomes) == Counter({True: 200, False: 200})
        assert summary.succeeded + summary.failed == 400
