"""Runtime settings (read from the environment / a .env file) and logging setup."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

ENV_PREFIX = "COUNTER_BOARD_"


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///counter_board.db"
    database_echo: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv(f"{ENV_PREFIX}DATABASE_URL", cls.database_url),
            database_echo=_env_flag(os.getenv(f"{ENV_PREFIX}DATABASE_ECHO")),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", cls.log_level).upper(),
        )


def configure_logging(level: str | int | None = None) -> None:
    """Without an explicit level, use the one from the environment (COUNTER_BOARD_LOG_LEVEL)."""
    logging.basicConfig(
        level=level if level is not None else Settings.from_env().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
