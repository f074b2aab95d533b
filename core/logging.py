"""
로깅 설정

web 서버와 운영 스크립트(cli)가 공유하는 루트 로거 구성.
콘솔(stdout)과 일 단위로 교체되는 파일에 같은 형식으로 기록.

사용법:
    from core.logging import setup_logging
    setup_logging("web")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_RETENTION_DAYS = 7

# WARNING 미만은 버리는 라이브러리 로거
QUIET_LOGGERS = ("aiosqlite", "httpcore", "httpx", "asyncio", "uvicorn.access")


def get_log_file_path(process_name: str) -> Path:
    """프로세스별 로그 파일 (web/cli 외에는 공용 logs 디렉토리)"""
    log_dir = {"web": Paths.WEB_LOGS_DIR, "cli": Paths.CLI_LOGS_DIR}.get(process_name, Paths.LOGS_DIR)
    return log_dir / f"{process_name}.log"


def _daily_file_handler(log_file: Path) -> TimedRotatingFileHandler:
    handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"
    return handler


def setup_logging(
    process_name: str,
    level: int = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """루트 로거 초기화

    여러 번 호출해도 핸들러가 중복되지 않음 (기존 핸들러 교체).

    Args:
        process_name: "web" 또는 "cli"
        level: 콘솔/파일 공통 로그 레벨
        log_file: 로그 파일 경로 (기본: get_log_file_path(process_name))

    Returns:
        루트 Logger
    """
    log_file = log_file or get_log_file_path(process_name)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        _daily_file_handler(log_file),
    ]

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(f"Logging initialized: {process_name} -> {log_file}")
    return root
