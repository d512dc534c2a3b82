"""Reporting collaborator used by the factory.

The factory never decides how loud a message is or whether the process should
stop; it hands every message to a :class:`Reporter` together with a short tag
and a :class:`Severity`. The default :class:`LoggingReporter` forwards to the
standard ``logging`` module and raises on fatal reports.
"""

import logging
from enum import Enum
from typing import Optional, Protocol

from typefactory.errors import FactoryFatalError

__all__ = ["Severity", "Reporter", "LoggingReporter"]


class Severity(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL


class Reporter(Protocol):
    def report(self, tag: str, message: str, severity: Severity) -> None: ...


class LoggingReporter:
    """Route factory reports to a :class:`logging.Logger`.

    Messages are prefixed with their tag, and the tag is also attached to the
    log record as ``record.tag`` so handlers can filter on it.

    Args:
        logger: The logger to write to. Defaults to the ``typefactory`` logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("typefactory")

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def report(self, tag: str, message: str, severity: Severity) -> None:
        """Log a report, raising if it is fatal.

        Raises:
            FactoryFatalError: If ``severity`` is :attr:`Severity.FATAL`.
        """
        self._logger.log(severity.value, "[%s] %s", tag, message, extra={"tag": tag})
        if severity is Severity.FATAL:
            raise FactoryFatalError(tag, message)
