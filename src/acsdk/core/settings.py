# Logging adapter for SDK-wide logging
from acsdk.adapters.logging_adapter import LoggingAdapter

from pydantic import HttpUrl, SecretStr, field_validator
from pydantic_settings import BaseSettings
from rich import print

from acsdk.core.interfaces.logging import LoggingPort

DEFAULT_API_URL = "https://api.automationcloud.net"
DEFAULT_VAULT_URL = "https://vault.automationcloud.net"


# using pydantic_settings to manage environment variables
# and do automatic type casting in a central place
class AcSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }
    AC_TOKEN: SecretStr | None = None
    AC_API_URL: HttpUrl = HttpUrl(DEFAULT_API_URL)
    AC_VAULT_URL: HttpUrl = HttpUrl(DEFAULT_VAULT_URL)
    AC_LOG_LEVEL: str = "INFO"
    # Push channel (server-sent events) is opt-in; polling is the default strategy
    AC_TRACK_USE_SSE: bool = False
    AC_TRACK_POLL_INTERVAL: float = 0.2  # seconds
    AC_SSE_RECONNECT_DELAY: float = 3.0  # seconds
    AC_HTTP_TIMEOUT: float = 10.0  # seconds

    @field_validator("AC_TRACK_POLL_INTERVAL", "AC_SSE_RECONNECT_DELAY", "AC_HTTP_TIMEOUT")
    def ensure_positive(cls, value: float) -> float:
        """Intervals and timeouts must be strictly positive."""
        if value <= 0:
            raise ValueError("must be greater than 0")
        return value

    def print_settings(self, logger: LoggingPort):
        """Prints the settings for debugging purposes"""
        logger.info("Automation Cloud SDK settings:")
        print(self)


app_settings = AcSettings()

logger = LoggingAdapter("acsdk", app_settings.AC_LOG_LEVEL)
