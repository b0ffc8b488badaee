"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_operation: ContextVar[str] = ContextVar("operation", default="")
_submission_id: ContextVar[str] = ContextVar("submission_id", default="")


def set_log_context(
    operation: Optional[str] = None,
    submission_id: Optional[str] = None,
) -> None:
    if operation is not None:
        _operation.set(operation)
    if submission_id is not None:
        _submission_id.set(submission_id)


def get_log_context() -> Dict[str, str]:
    return {
        "operation": _operation.get(),
        "submission_id": _submission_id.get(),
    }


def clear_log_context() -> None:
    _operation.set("")
    _submission_id.set("")


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(operation="get_submission_status", submission_id=sid):
            # All logs in this block carry operation and submission_id
            do_work()
    """

    def __init__(
        self,
        operation: Optional[str] = None,
        submission_id: Optional[str] = None,
    ):
        self.new_context = {
            "operation": operation,
            "submission_id": submission_id,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        set_log_context(**self.new_context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        set_log_context(
            operation=self.old_context.get("operation", ""),
            submission_id=self.old_context.get("submission_id", ""),
        )
        return False
