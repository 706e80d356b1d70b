"""Route galaxyctl's log output through structlog.

Both structlog loggers and plain ``logging.getLogger(__name__)`` records
end up on one stderr handler, rendered as console lines or, with
``--log-json``, one JSON object per line. Every entry carries the
registry name so logs from several registries can be told apart.
"""

from __future__ import annotations

import logging
import sys

import structlog

_HANDLER_NAME = "galaxyctl-stderr"

# Third-party loggers kept at WARNING even under --verbose.
_NOISY = ("sqlalchemy", "pluggy")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(log_json: bool) -> logging.Handler:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    registry_name: str | None = None,
) -> None:
    """Install the galaxyctl handler on the root logger.

    Calling it again replaces the previous galaxyctl handler and context
    instead of stacking a second one.

    Args:
        verbose: Let ``galaxyctl.*`` loggers through at DEBUG, not just WARNING.
        log_json: Render JSON lines instead of console lines.
        registry_name: Bound as ``registry`` on every entry.
    """
    structlog.contextvars.clear_contextvars()
    if registry_name:
        structlog.contextvars.bind_contextvars(registry=registry_name)

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for old in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(old)
    root.addHandler(_stderr_handler(log_json))
    root.setLevel(logging.WARNING)

    logging.getLogger("galaxyctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)
