"""
flagprompt structured logging.

Scope
- get_logger(name): structlog logger over the stdlib logger 'name'. Lazy, so
  module-level loggers pick up a configuration made later.
- configure_logging(): opt-in console (or JSON) rendering on stderr.

Defaults
- Nothing is configured on import: an application that never calls
  configure_logging() only sees WARNING and above through stdlib logging.
- FLAGPROMPT_LOG_LEVEL: level name (default WARNING).
- FLAGPROMPT_LOG_FORMAT: "json" selects the JSON renderer.

Prompts and usage lines go to the command's own output stream, never through
these loggers.

Quick start
    import logging
    from flagprompt import configure_logging

    configure_logging(level=logging.DEBUG)
"""
import logging
import os
import sys

import structlog

LOG_FORMAT_ENV_VAR = "FLAGPROMPT_LOG_FORMAT"
LOG_LEVEL_ENV_VAR = "FLAGPROMPT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def _level():
    name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, name, logging.WARNING)
    return level if isinstance(level, int) else logging.WARNING


def _processors():
    # shared by structlog events and foreign stdlib records
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(*, force_json=False, level=None):
    """
    Configure structlog and replace the stdlib root handlers with one on stderr.

    Parameters
    - force_json: bool
      JSON rendering regardless of FLAGPROMPT_LOG_FORMAT.
    - level: None | int
      stdlib level; None reads FLAGPROMPT_LOG_LEVEL.

    Calling it again reconfigures from scratch.
    """
    json = force_json or os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"
    level = level if level is not None else _level()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=_processors(),
        )
    )
    root.addHandler(handler)


def get_logger(name=None, /):
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


__all__ = (
    "get_logger",
    "configure_logging",
)
