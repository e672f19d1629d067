"""
Centralized logging configuration for FixFlow.

Every log record carries the thread name and the id of the job being worked
on (if any), so a status change can be followed from the HTTP request through
the store, the notification policy and the AI call.

Features:
    - Thread name and current job id in all log messages
    - Console output (always enabled)
    - Rotating file logs (optional, for production)
    - Separate error log for ERROR/CRITICAL messages
    - Helper functions for getting loggers with consistent naming

Log Format:
    2026-10-18 10:15:30 [INFO    ] [MainThread] [-] fixflow.app - Starting application
    2026-10-18 10:15:31 [INFO    ] [Thread-3] [job_1] fixflow.services.job_service - Status To Do -> Ready

Usage:
    # At application startup
    from logging_config import setup_logging, get_logger

    setup_logging(log_level=logging.INFO, enable_file_logging=True)

    # In modules
    logger = get_logger(__name__)

    # Tag everything logged while handling one job
    with job_context("job_1"):
        logger.info("Changing status")
"""

import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional


APP_NAMESPACE = "fixflow"

_current_job_id: ContextVar[Optional[str]] = ContextVar("fixflow_job_id", default=None)


# =============================================================================
# CONTEXT FILTER
# =============================================================================

class JobContextFilter(logging.Filter):
    """
    Logging filter that adds thread and job context to all log records.

    Adds:
        - thread_name: Name of the current thread
        - job_id: Job set by job_context(), or "-" outside of one
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        record.job_id = _current_job_id.get() or "-"
        return True


@contextmanager
def job_context(job_id: str) -> Iterator[None]:
    """
    Tag every record logged inside the block with job_id.

    Args:
        job_id: Id of the job being handled
    """
    token = _current_job_id.set(job_id)
    try:
        yield
    finally:
        _current_job_id.reset(token)


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    app_name: str = APP_NAMESPACE,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure application logging with job context.

    This sets up:
    1. Console handler (always enabled)
    2. Rotating file handler (optional)
    3. Error file handler (optional) - for ERROR/CRITICAL only
    4. Job context filter on every handler

    Args:
        app_name: Name of the root logger (default: "fixflow")
        log_level: Minimum log level (default: INFO)
        log_dir: Directory for log files (default: ./logs relative to this file)
        enable_file_logging: Whether to write to log files (default: True)

    Returns:
        Configured root logger instance
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False

    # Allows re-configuration (tests create several apps)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-8s] [%(thread_name)s] [%(job_id)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    context_filter = JobContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        app_log_file = log_dir / f"{app_name}.log"
        file_handler = RotatingFileHandler(
            filename=app_log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB per file
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        logger.addHandler(file_handler)

        error_log_file = log_dir / f"{app_name}_error.log"
        error_handler = RotatingFileHandler(
            filename=error_log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        error_handler.addFilter(context_filter)
        logger.addHandler(error_handler)

        logger.info(f"File logging enabled: {app_log_file}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


# =============================================================================
# LOGGER FACTORY FUNCTIONS
# =============================================================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger with the application namespace.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance, e.g. "fixflow.services.intake" for services.intake
    """
    if not name.startswith(APP_NAMESPACE):
        name = f"{APP_NAMESPACE}.{name}"
    return logging.getLogger(name)


def get_job_logger(job_id: str) -> logging.Logger:
    """
    Get a logger for a specific job.

    Makes it easy to filter the log for everything that happened to one
    work order.

    Args:
        job_id: Id of the job (e.g. "job_1a2b3c")

    Returns:
        Logger named "fixflow.job.<job_id>"
    """
    return logging.getLogger(f"{APP_NAMESPACE}.job.{job_id}")
