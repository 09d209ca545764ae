"""
Logging configuration for the interview engine.
Saves logs to project logs/ folder with rotation.
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Module-level logger cache
_loggers: dict = {}

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_project_root() -> Path:
    """Get project root directory."""
    # This file is interview_engine/utils/logger.py
    return Path(__file__).parent.parent.parent


def get_logs_dir() -> Path:
    """
    Get or create logs directory.

    Uses INTERVIEW_LOG_DIR when set, otherwise project_root/logs, falling
    back to /tmp/logs when that is not writable.

    Returns:
        Path: Logs directory path
    """
    env_dir = os.getenv("INTERVIEW_LOG_DIR")
    logs_dir = Path(env_dir) if env_dir else get_project_root() / "logs"

    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        logs_dir = Path("/tmp/logs")
        logs_dir.mkdir(parents=True, exist_ok=True)

    return logs_dir


def resolve_level(level: Optional[int] = None) -> int:
    """Explicit level, else INTERVIEW_LOG_LEVEL, else INFO."""
    if level is not None:
        return level
    env_level = os.getenv("INTERVIEW_LOG_LEVEL", "INFO").upper()
    return getattr(logging, env_level, logging.INFO)


def setup_logger(
    name: str,
    level: Optional[int] = None,
    log_to_console: bool = True,
    log_to_file: bool = True,
    session_id: Optional[str] = None,
) -> logging.Logger:
    """
    Set up a logger with console and file handlers.

    Args:
        name: Logger name (typically module name)
        level: Logging level (defaults to INFO or INTERVIEW_LOG_LEVEL env var)
        log_to_console: Whether to output to console
        log_to_file: Whether to output to file
        session_id: Optional session ID for session-specific log file

    Returns:
        Configured logger
    """
    level = resolve_level(level)

    cache_key = f"{name}_{session_id}" if session_id else name
    if cache_key in _loggers:
        return _loggers[cache_key]

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_to_file:
        logs_dir = get_logs_dir()

        file_handler = RotatingFileHandler(
            logs_dir / "interview_engine.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=5,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        if session_id:
            session_handler = logging.FileHandler(logs_dir / f"session_{session_id}.log")
            session_handler.setLevel(level)
            session_handler.setFormatter(formatter)
            logger.addHandler(session_handler)

    _loggers[cache_key] = logger
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get an existing logger or create a basic one.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if name in _loggers:
        return _loggers[name]
    return setup_logger(name)


class InterviewLogger:
    """
    Structured logger for interview sessions.
    Provides convenience methods for common log patterns.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        log_to_file: bool = True,
        log_to_console: bool = True,
    ):
        self.session_id = session_id or datetime.now().strftime("%Y%m%d_%H%M%S")
        self.logger = setup_logger(
            f"interview.{self.session_id}",
            log_to_console=log_to_console,
            log_to_file=log_to_file,
            session_id=self.session_id if log_to_file else None,
        )
        self.turn_count = 0

    def session_start(self, question_count: int, resumed: bool = False) -> None:
        """Log session start."""
        self.logger.info("=" * 60)
        self.logger.info(f"SESSION {'RESUMED' if resumed else 'START'}: {self.session_id}")
        self.logger.info(f"Questions: {question_count}")
        self.logger.info("=" * 60)

    def session_end(self, answers: int, dominant_sentiment: str, average_engagement: float) -> None:
        """Log session end with engagement summary."""
        self.logger.info("=" * 60)
        self.logger.info(f"SESSION END: {self.session_id}")
        self.logger.info(f"Answers: {answers}")
        self.logger.info(f"Dominant sentiment: {dominant_sentiment}")
        self.logger.info(f"Average engagement: {average_engagement}")
        self.logger.info("=" * 60)

    def state_changed(self, previous: str, current: str) -> None:
        self.logger.info(f"[State] {previous} -> {current}")

    def question_asked(self, number: int, question: str) -> None:
        """Log question put to the participant."""
        self.turn_count = number
        self.logger.info(f"[Q{number}] {question}")

    def answer_received(self, answer: str) -> None:
        """Log received answer."""
        # Truncate long answers for log readability
        display = answer[:200] + "..." if len(answer) > 200 else answer
        self.logger.info(f"[A{self.turn_count}] {display}")

    def summary_generated(self, is_fallback: bool) -> None:
        source = "template" if is_fallback else "LLM"
        self.logger.info(f"[Summary] generated from {source}")

    def persistence_failed(self, message: str) -> None:
        self.logger.warning(f"[Persistence] {message} - continuing in memory")

