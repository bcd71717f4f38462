"""User notification sink."""

from typing import Protocol

from loguru import logger


class Notifier(Protocol):
    """Receives user-facing outcome messages."""

    def success(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggerNotifier:
    """Notifier that forwards messages to the log."""

    def success(self, message: str) -> None:
        logger.success(message)

    def info(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)
