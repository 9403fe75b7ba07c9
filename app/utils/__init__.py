"""
Utility modules for the PR ticket linker.
"""

from app.utils.logging import (
    get_logger,
    setup_logging,
    LogContext,
    log_webhook_event,
    log_api_call,
    log_error_with_context,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "log_webhook_event",
    "log_api_call",
    "log_error_with_context",
]
