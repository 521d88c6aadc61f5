"""Environment configuration for sample store entry points.

Variables:
- SENSOR_DB_PATH: backing SQLite file (default "sensors.db")
- LOG_LEVEL: logging level name (default "INFO")
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from sensor_store.errors import InvalidSetting

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_DB_PATH = "sensors.db"


@dataclass
class StoreSettings:
    """Settings the CLI needs to open a store.

    Attributes:
        db_path: Backing SQLite file.
        log_level: Logging level name.
    """

    db_path: str = DEFAULT_DB_PATH
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate settings values."""
        if not self.db_path:
            raise InvalidSetting("db_path must not be empty")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise InvalidSetting(f"Unknown log level '{self.log_level}'")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreSettings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for tests)

        Raises:
            InvalidSetting: If a variable is invalid
        """
        env = os.environ if environ is None else environ

        return cls(
            db_path=env.get("SENSOR_DB_PATH", DEFAULT_DB_PATH),
            log_level=env.get("LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
