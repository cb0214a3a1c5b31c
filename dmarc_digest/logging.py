import logging
import logging.config
from typing import Any, Dict, List, Union, cast

import structlog

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_FOREIGN_PRE_CHAIN = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.format_exc_info,
]


def _formatter(processors: List[Any]) -> Dict[str, Any]:
    return {
        "()": structlog.stdlib.ProcessorFormatter,
        "processors": [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
        + processors,
        "foreign_pre_chain": _FOREIGN_PRE_CHAIN,
    }


def _formatters() -> Dict[str, Any]:
    timestamper = structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False)
    return {
        "plain": _formatter(
            [timestamper, structlog.dev.ConsoleRenderer(colors=False)]
        ),
        "colored": _formatter(
            [timestamper, structlog.dev.ConsoleRenderer(colors=True)]
        ),
        "json": _formatter(
            [
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(),
            ]
        ),
    }


def configure_logging(overrides: dict, *, debug: bool):
    """Routes structlog and stdlib logging through one dictConfig setup.

    Log output goes to stderr so that it never mixes with the rendered
    reports on stdout. ``overrides`` is a dictConfig fragment taken from the
    ``logging`` entry of the configuration file.
    """
    log_level = (
        logging.DEBUG
        if debug
        else parse_log_level(overrides.get("root", {}).get("level", logging.INFO))
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging_config: Dict[str, Any] = {
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "colored",
            },
        },
        "root": {},
    }
    logging_config.update(overrides)
    logging_config.update(
        {"version": 1, "incremental": False, "formatters": _formatters()}
    )
    root = cast(dict, logging_config["root"])
    root.setdefault("handlers", ["default"])
    root["level"] = log_level
    logging.config.dictConfig(logging_config)


def parse_log_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    try:
        return _LOG_LEVELS[str(level).lower()]
    except KeyError:
        raise ValueError(f"invalid log level: {level}") from None
