"""
Loguru setup for the e2e harness.

Usage:

    from pinstack_e2e.core.Logging.log_setup import configure_logging, log_context

    log = configure_logging(settings)
    with log_context(scenario="test_follow_creates_notification") as scoped:
        scoped.info("Following user")

``configure_logging`` replaces Loguru's default sink with a single stderr sink
whose format depends on ``settings.env``: readable lines for local and test
runs, JSON records (``serialize=True``) for dev and prod pipelines. The
returned logger is bound with ``env`` and is what callers pass down to the
gateway client, the test context and the poll helpers.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional, TextIO

from loguru import logger

from pinstack_e2e.core.config import Settings

HUMAN_ENVS = {"local", "test"}

_HUMAN_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[scenario]}</cyan> | "
    "{message} | {extra}"
)


def _ensure_scenario_field(record: dict) -> bool:
    record["extra"].setdefault("scenario", "-")
    return True


def configure_logging(settings: Settings, sink: Optional[TextIO] = None) -> Any:
    """Install the harness sink and return a logger bound with ``env``."""
    logger.remove()
    target = sink or sys.stderr
    if settings.env in HUMAN_ENVS:
        logger.add(
            target,
            level=settings.test.log_level,
            format=_HUMAN_FORMAT,
            colorize=bool(getattr(target, "isatty", lambda: False)()),
            filter=_ensure_scenario_field,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            target,
            level=settings.test.log_level,
            serialize=True,
            filter=_ensure_scenario_field,
            backtrace=False,
            diagnose=False,
        )
    return logger.bind(env=settings.env)


@contextmanager
def log_context(**fields: Any) -> Iterator[Any]:
    """Contextualize the base logger and yield a logger bound with the same fields."""
    clean = {k: v for k, v in fields.items() if v is not None}
    with logger.contextualize(**clean):
        yield logger.bind(**clean)
