"""structlog configuration for pagesctl.

Everything goes to stderr: stdout carries only the rendered deploy result.
Lines logged while a deploy step runs carry a ``step`` field, including
the replayed build output and git commands, so a failing run can be read
step by step. ``--log-json`` switches to one JSON object per line.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager

import structlog

PAGES_LOGGER = "pagesctl"


def _shared_processors(*, log_json: bool) -> list[structlog.types.Processor]:
    timestamper = (
        structlog.processors.TimeStamper(fmt="iso")
        if log_json
        else structlog.processors.TimeStamper(fmt="%H:%M:%S")
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        timestamper,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route stdlib and structlog records through one stderr handler.

    Args:
        verbose: Show DEBUG records from pagesctl (step progress, git
            commands, build output). Otherwise only warnings and errors.
        log_json: Render JSON lines instead of the console format.
    """
    shared = _shared_processors(log_json=log_json)
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger(PAGES_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)


@contextmanager
def step_logging(step: str) -> Generator[None]:
    """Tag every record logged inside the block with ``step=<step>``."""
    with structlog.contextvars.bound_contextvars(step=step):
        yield
