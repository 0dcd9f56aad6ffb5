"""structlog setup shared by the CLI and scripts."""

import logging

import structlog


def configure_logging(level: str = "INFO", colors: bool = True) -> None:
    """
    Configure structlog for console output.

    Args:
        level: Minimum level name to emit (e.g. "DEBUG", "INFO")
        colors: Use ANSI colors in the console renderer
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
