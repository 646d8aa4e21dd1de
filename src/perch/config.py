"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=8080, log_level="debug", log_hits=False)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 9999
    workers: int = 1

    # Logging
    log_level: str = "info"
    log_hits: bool = True

    # Transport timeouts (seconds), handed to pounce
    request_timeout: float = 10.0
    keep_alive_timeout: float = 5.0
