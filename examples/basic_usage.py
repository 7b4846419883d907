"""
Базовый пример использования координатора переноса из кода.
"""

import sys

from repo_transfer import (
    RunCoordinator,
    TransferConfig,
    PoolConfig,
    load_token,
    setup_logging,
    ConfigurationError,
    CredentialError,
)


def main():
    """Перенос двух репозиториев с тремя воркерами."""
    setup_logging(level="INFO")

    config = TransferConfig(
        original_account="old-owner",
        new_account="new-owner",
        resources=["repo-one", "repo-two"],
        pool=PoolConfig(num_workers=3),
    )

    try:
        coordinator = RunCoordinator(config, load_token())
        summary = coordinator.run()
    except (ConfigurationError, CredentialError) as e:
        print(f"Фатальная ошибка: {e}")
        return 1

    print(f"Всего: {summary.total}, успешно: {summary.succeeded}, неудачно: {summary.failed}")
    for outcome in summary.failed_outcomes():
        print(f"  {outcome.resource}: {outcome.detail}")

    return coordinator.exit_code()


if __name__ == "__main__":
    sys.exit(main())
