"""structlog setup shared by the CLI and host applications.

Everything cqbus logs, stdlib ``logging.getLogger(__name__)`` debug lines and
the structlog ``dispatch.retry`` events alike, ends up in one handler on the
root logger, rendered either for a terminal or as JSON lines.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

import structlog

if TYPE_CHECKING:
    from cqbus.config.models import LoggingConfig

PACKAGE_LOGGER = "cqbus"


def _pre_chain(log_json: bool) -> list[structlog.types.Processor]:
    """Processors applied to structlog and foreign stdlib records alike."""
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_json:
        # Retry events carry the handler error as exc_info.
        processors.append(structlog.processors.format_exc_info)
    processors.append(structlog.processors.UnicodeDecoder())
    return processors


def _renderer(log_json: bool, stream: TextIO) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through a single stderr handler.

    Args:
        verbose: Let ``cqbus.*`` loggers through at DEBUG. Otherwise they
            stop at WARNING, which still shows every retry event.
        log_json: One JSON object per line instead of console output.
        stream: Destination; ``sys.stderr`` at call time by default.

    Calling it again replaces the previous handler.
    """
    out = stream if stream is not None else sys.stderr
    pre_chain = _pre_chain(log_json)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json, out),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)


def configure_from(config: LoggingConfig, *, stream: TextIO | None = None) -> None:
    """Apply a ``[logging]`` config section."""
    configure_logging(verbose=config.verbose, log_json=config.log_json, stream=stream)
