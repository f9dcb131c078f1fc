from abc import ABC, abstractmethod


class LoggingPort(ABC):
    """Logging seam used by the SDK core.

    Messages use %-style placeholders; arguments are only formatted when the
    record is actually emitted.
    """

    @abstractmethod
    def debug(self, msg: str, *args) -> None:
        pass

    @abstractmethod
    def info(self, msg: str, *args) -> None:
        pass

    @abstractmethod
    def warning(self, msg: str, *args) -> None:
        pass

    @abstractmethod
    def error(self, msg: str, *args) -> None:
        pass
