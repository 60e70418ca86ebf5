"""Configuration management for the mail client."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .ingestion.imap import DEFAULT_SEARCH_SINCE
from .processing.dates import MONTHS


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    accounts_file: Path = Path("accounts.yml")

    # IMAP listings only include messages on or after this date
    search_since: str = DEFAULT_SEARCH_SINCE

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration object

        Raises:
            ValueError: If a variable holds a malformed value
        """
        config = cls(
            accounts_file=Path(os.getenv("CLIMAIL_ACCOUNTS_FILE", "accounts.yml")),
            search_since=os.getenv("CLIMAIL_SEARCH_SINCE", DEFAULT_SEARCH_SINCE),
            log_level=os.getenv("CLIMAIL_LOG_LEVEL", "WARNING").upper(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check the IMAP date and log level.

        Raises:
            ValueError: If either value is malformed
        """
        parts = self.search_since.split("-")
        if len(parts) != 3 or not parts[0].isdigit() or not parts[2].isdigit() or parts[1].lower() not in MONTHS:
            raise ValueError(f"Search date must look like 1-Dec-2019, got: {self.search_since}")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
