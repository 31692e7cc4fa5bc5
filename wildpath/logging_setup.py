# wildpath/logging_setup.py
import logging
import sys
from typing import List, Optional, TextIO

import structlog

LOGGER_NAME = "wildpath"

# silent until configure_logging attaches a real handler.
logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str):
    """
    structlog logger backed by the stdlib logger `name`.

    Events stay in stdlib logging, so importing wildpath as a library never
    writes to stdout whether or not structlog has been configured.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def _shared_processors(debug: bool) -> List:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if debug:
        # pruning decisions are easier to follow with the emitting function attached.
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                {structlog.processors.CallsiteParameter.MODULE, structlog.processors.CallsiteParameter.FUNC_NAME}
            )
        )
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    return processors


def configure_logging(
    log_level_str: str = "warning",
    force_json_logs: bool = False,
    stream: Optional[TextIO] = None,
):
    """
    Routes structlog events from the `wildpath` loggers to stderr (or `stream`).

    Console rendering by default, one JSON object per line when
    `force_json_logs` is set. Calling it again replaces the previous handler.
    """
    log_level = getattr(logging, log_level_str.upper(), logging.WARNING)
    target = stream if stream is not None else sys.stderr

    structlog.configure(
        processors=_shared_processors(log_level <= logging.DEBUG),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if force_json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=target.isatty())

    handler = logging.StreamHandler(target)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[structlog.stdlib.add_log_level],
        )
    )

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    package_logger.propagate = False

    structlog.get_logger(__name__).info("logging_configured", level=log_level_str, json=force_json_logs)
