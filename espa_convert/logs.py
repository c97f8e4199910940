"""
Logging configuration
"""

import contextlib
import logging
import logging.config
from importlib import resources
from pathlib import Path
from typing import Union

import structlog


class ValueRenderer:
    """Renders the event and its call site, followed by any bound context."""

    def __init__(self, keys=("event", "filename", "func_name", "lineno")):
        self.keys = keys

    def __call__(self, logger, method_name, log) -> str:
        context = " ".join(f"{k}={v}" for k, v in log.items() if k not in self.keys)
        message = f"{log['event']}    [{log['filename']}:{log['lineno']}]"

        return f"{message}    {context}" if context else message


COMMON_PROCESSORS = (
    structlog.contextvars.merge_contextvars,
    structlog.processors.CallsiteParameterAdder(
        [
            structlog.processors.CallsiteParameter.FILENAME,
            structlog.processors.CallsiteParameter.FUNC_NAME,
            structlog.processors.CallsiteParameter.LINENO,
        ],
    ),
    ValueRenderer(),
)


LOGGER_NAMES = ("status", "espa_convert")


@contextlib.contextmanager
def logging_directory(path: Union[str, Path]):
    """
    A context manager that additionally writes the conversion logs into the specified
    directory for the lifetime of the manager.

    Logs are appended to `espa-convert.log` in that directory, the file handler
    is removed again once the manager loses context.
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path / "espa-convert.log", mode="a", encoding="utf8")
    loggers = [logging.getLogger(name) for name in LOGGER_NAMES]

    for logger in loggers:
        logger.addHandler(handler)

    try:
        yield
    finally:
        for logger in loggers:
            logger.removeHandler(handler)
        handler.close()


def getLogger(logger_name: str = "root", **kwargs):
    if logger_name in LOGGER_NAMES:
        logger = structlog.wrap_logger(logging.getLogger(logger_name), COMMON_PROCESSORS, **kwargs)
    else:
        logger = logging.getLogger(logger_name)
    return logger


logging.config.fileConfig(
    str(resources.files("espa_convert").joinpath("logging.cfg")),
    disable_existing_loggers=False,
)

ROOT_LOGGER = getLogger()
STATUS_LOGGER = getLogger("status")
ESPA_LOGGER = getLogger("espa_convert")
