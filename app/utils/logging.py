"""structlog setup shared by every Info.plist component.

Components obtain loggers with :func:`get_logger` and emit snake_case events
with keyword context::

    log = get_logger("mergers.info_plist")
    log.debug("fragment_merged", path=str(path), keys=len(fragment))

:func:`configure_logging` is called once by the CLI entry points; library
code never configures logging itself.
"""

import logging
import sys

import structlog

_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """Install the structlog processor chain.

    Args:
        level: Minimum level name (``DEBUG``, ``INFO``, ``WARNING``, ``ERROR``).
        json:  Render JSON lines instead of the human-readable console format.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _LEVELS.get(level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    """Return a structlog logger bound to *name*."""
    return structlog.get_logger(name)
