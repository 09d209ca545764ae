"""
Utility modules for the interview engine.
"""

from .logger import InterviewLogger, get_logger, get_logs_dir, setup_logger

__all__ = [
    "setup_logger",
    "get_logger",
    "InterviewLogger",
    "get_logs_dir",
]
