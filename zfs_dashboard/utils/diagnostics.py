"""Diagnostic sink port used by stores to report their own problems."""

import logging
from typing import Protocol


class DiagnosticSink(Protocol):
    def debug(self, message: str, /) -> None: ...

    def info(self, message: str, /) -> None: ...

    def warning(self, message: str, /) -> None: ...

    def error(self, message: str, /) -> None: ...


class LoggerSink:
    """Forward diagnostics to a stdlib logger."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def debug(self, message: str, /) -> None:
        self._logger.debug(message)

    def info(self, message: str, /) -> None:
        self._logger.info(message)

    def warning(self, message: str, /) -> None:
        self._logger.warning(message)

    def error(self, message: str, /) -> None:
        self._logger.error(message)
