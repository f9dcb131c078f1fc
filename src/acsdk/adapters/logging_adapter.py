import logging
from acsdk.core.interfaces.logging import LoggingPort
from acsdk.core.logging_config import coerce_level


class LoggingAdapter(LoggingPort):
    """Concrete logging adapter.

    Delegates to Python's logging. It does NOT add its own handlers: an
    application (or `configure_logging` from the CLI) decides where records
    go. The tracked job id is injected by the handlers' filter.
    """

    def __init__(self, name: str = "acsdk", log_level: int | str = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(coerce_level(log_level))
        # Let records reach whatever handlers the host application installed
        self.logger.propagate = True
        self.logger.debug("Initialized logger name=%s level=%s", name, self.logger.level)

    def debug(self, msg: str, *args) -> None:
        self.logger.debug(msg, *args)

    def info(self, msg: str, *args) -> None:
        self.logger.info(msg, *args)

    def warning(self, msg: str, *args) -> None:
        self.logger.warning(msg, *args)

    def error(self, msg: str, *args) -> None:
        self.logger.error(msg, *args)
