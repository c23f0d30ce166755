from __future__ import annotations

import logging
import sys
from pathlib import Path

from dependency_injector.resources import Resource

from .formatters import HumanReadableFormatter, JSONFormatter


RUN_LOG_FILENAME = "sync.jsonl"


class RunLogger(Resource):
    """Structured logger for sync runs.

    Writes one JSON object per event to ``<logs_dir>/sync.jsonl`` and
    optionally mirrors events to the console in human-readable form.
    """

    def init(
        self,
        *,
        logs_dir: Path | None = None,
        logger_name: str = "trissue",
        console_output: bool = False,
        file_output: bool = True,
        level: str = "INFO",
    ) -> "RunLogger":
        """Initialize handlers.

        Args:
            logs_dir: Directory for the JSONL run log (required for file output)
            logger_name: Logger name
            console_output: Whether to enable console output
            file_output: Whether to append to the JSONL run log
            level: Logging level (DEBUG, INFO, WARNING, ERROR)

        Returns:
            Self for dependency_injector Resource pattern
        """
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            numeric_level = logging.INFO

        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers: list[logging.Handler] = []

        if file_output and logs_dir is not None:
            self._attach(self._run_log_handler(Path(logs_dir) / RUN_LOG_FILENAME), numeric_level)

        if console_output:
            # stdout carries the command output
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(HumanReadableFormatter())
            self._attach(console, numeric_level)

        return self

    @staticmethod
    def _run_log_handler(path: Path) -> logging.Handler:
        """Append-mode JSONL handler; one run log accumulates every sync."""
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8", mode="a")
        handler.setFormatter(JSONFormatter())
        return handler

    def _attach(self, handler: logging.Handler, level: int) -> None:
        handler.setLevel(level)
        self._logger.addHandler(handler)
        self._handlers.append(handler)

    def shutdown(self, resource: "RunLogger") -> None:
        """Flush and close all handlers so the log file is released."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def debug(self, message: str, **fields) -> None:
        self._logger.debug(message, extra=fields or None)

    def info(self, message: str, **fields) -> None:
        self._logger.info(message, extra=fields or None)

    def warning(self, message: str, **fields) -> None:
        self._logger.warning(message, extra=fields or None)

    def error(self, message: str, exc_info: bool = False, **fields) -> None:
        self._logger.error(message, extra=fields or None, exc_info=exc_info)

    def exception(self, message: str, **fields) -> None:
        self._logger.exception(message, extra=fields or None)
