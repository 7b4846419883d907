"""
Точка входа командной строки: repo-transfer.
"""

import argparse
import sys
from typing import List, Optional

from .core.run_coordinator import RunCoordinator
from .utils.config import DEFAULT_TOKEN_ENV, load_config, load_token
from .utils.logger import get_logger, setup_logging
from .exceptions import ConfigurationError, CredentialError, TransferError


logger = get_logger("repo_transfer")

EXIT_OK = 0
EXIT_FATAL = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-transfer",
        description="Конкурентный перенос репозиториев GitHub в другой аккаунт"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Путь к файлу конфигурации (.json, .yaml)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Количество воркеров (по умолчанию из конфигурации, 5)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Уровень логирования"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Файл для логов"
    )
    parser.add_argument(
        "--fail-on-errors",
        action="store_true",
        help="Код выхода 2, если хотя бы один перенос не удался"
    )
    parser.add_argument(
        "--token-env",
        type=str,
        default=DEFAULT_TOKEN_ENV,
        help="Переменная окружения с токеном"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Основная функция CLI."""
    args = build_parser().parse_args(argv)

    setup_logging(level=args.log_level or "INFO", log_file=args.log_file)
    logger.info("Initializing GitHub repository transfer")

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"Fatal error: failed to load configuration from {args.config}: {e}")
        return EXIT_FATAL

    if args.workers is not None:
        config.pool.num_workers = args.workers
    if args.fail_on_errors:
        config.pool.fail_on_errors = True
    if not args.log_level or (config.pool.log_file and not args.log_file):
        setup_logging(level=args.log_level or config.pool.log_level,
                      log_file=args.log_file or config.pool.log_file)

    logger.info(f"Configuration loaded from {args.config}. OriginalUser: {config.original_account}, "
                f"NewUser: {config.new_account}, Repositories: {len(config.resources)}")

    try:
        token = load_token(args.token_env)
    except CredentialError:
        token = None

    coordinator = RunCoordinator(config, token)
    try:
        summary = coordinator.run()
    except (ConfigurationError, CredentialError) as e:
        logger.error(f"Fatal error: {e}")
        return EXIT_FATAL
    except TransferError as e:
        logger.error(f"Run aborted: {e}")
        return EXIT_FATAL

    logger.info(f"Script execution finished. Total Repositories: {summary.total}, "
                f"Successes: {summary.succeeded}, Failures: {summary.failed}")
    for outcome in summary.failed_outcomes():
        logger.info(f"  [FAIL] {outcome.resource}: {outcome.failure.value}: {outcome.detail}")

    return coordinator.exit_code()


if __name__ == "__main__":
    sys.exit(main())
