"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import typer

from nexus_cli.errors import NexusError
from nexus_cli.utils import exit_codes
from nexus_cli.utils.logger import get_logger
from nexus_cli.utils.ui.formatters import format_error


def command_wrapper(func: Callable) -> Callable:
    """Run a (possibly async) command, logging it and mapping errors to exit codes.

    ``NexusError`` prints its message and exits with the error's exit code;
    anything else is logged with its traceback and exits with 1.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if asyncio.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            logger.info("command completed: %s (%.3fs)", cmd, time.monotonic() - start)
            return result

        except NexusError as e:
            logger.error(
                "command failed: %s (%.3fs) - [%s] %s",
                cmd,
                time.monotonic() - start,
                e.code,
                e.message,
            )
            format_error(e.message)
            raise typer.Exit(code=e.exit_code) from e

        except typer.Exit:
            raise

        except Exception as e:
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                time.monotonic() - start,
                e,
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {e}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
