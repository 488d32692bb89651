import inspect
import traceback
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

import typer

from settings_sync.core.exceptions import SettingsSyncError
from settings_sync.utils.logging import get_logger

logger = get_logger("core.error_handler")


def handle_error(
    error: Exception | None = None,
    *,
    context: str | None = None,
    verbose: bool = False,
    error_str: str | None = None,
) -> None:
    """Central error handler for command entrypoints.

    Args:
        error: The exception instance to handle (can be None if error_str is provided).
        context: Optional string describing where the error occurred.
        verbose: If True, log detailed traceback for debugging.
        error_str: Optional error message string if no exception object is available.
    """
    ctx = f"[{context}]" if context else ""

    if error is None:
        logger.critical(f"{ctx} {error_str or 'An unknown error occurred'}".strip())
        return

    if isinstance(error, SettingsSyncError):
        # Known errors carry their own subsystem prefix
        logger.error(f"{ctx} {error}".strip())
    else:
        error_name = type(error).__name__
        error_msg = str(error) if str(error) else "No error message provided"
        logger.critical(f"{ctx} Unexpected error: {error_name}: {error_msg}".strip())

    if verbose:
        trace = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        logger.debug(f"Traceback:\n{trace}")


T = TypeVar("T")
P = ParamSpec("P")


def safe_entrypoint(context: str) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to wrap CLI commands with unified error handling.

    Errors are logged through ``handle_error`` and turned into exit code 1.
    typer/click exit exceptions pass through untouched.
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            verbose = bool(kwargs.get("verbose", False))
            try:
                return func(*args, **kwargs)
            except Exception as err:
                if "Exit" in err.__class__.__name__:
                    raise
                handle_error(err, context=context, verbose=verbose)
                raise typer.Exit(code=1) from err

        wrapper.__signature__ = inspect.signature(func)
        return wrapper

    return decorator
