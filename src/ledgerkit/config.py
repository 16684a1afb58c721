"""Ledger configuration.

Settings are read once (usually from the environment) and passed explicitly to
the services, the posting engine and the reporters.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping, Optional


DB_PATH_ENV = "LEDGERKIT_DB_PATH"


@dataclass(frozen=True)
class LedgerConfig:
    """Settings that influence validation, numbering and reporting."""

    balance_tolerance: Decimal = Decimal("0.01")
    journal_prefix: str = "JE"
    journal_number_width: int = 6
    default_currency: str = "USD"
    max_account_level: int = 10

    def __post_init__(self):
        if self.balance_tolerance <= 0:
            raise ValueError("balance_tolerance must be positive")
        if self.journal_number_width < 1:
            raise ValueError("journal_number_width must be at least 1")
        if len(self.default_currency) != 3:
            raise ValueError(
                f"default_currency must be a 3-letter code, got '{self.default_currency}'"
            )

    def format_journal_number(self, sequence: int) -> str:
        """Render a sequence value as a journal number (e.g. JE000042)."""
        return f"{self.journal_prefix}{sequence:0{self.journal_number_width}d}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LedgerConfig":
        """Build a config from LEDGERKIT_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            LedgerConfig with defaults for unset variables

        Raises:
            ValueError: If a variable is set to an invalid value
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        tolerance = env.get("LEDGERKIT_BALANCE_TOLERANCE")
        if tolerance:
            try:
                kwargs["balance_tolerance"] = Decimal(tolerance)
            except InvalidOperation:
                raise ValueError(f"Invalid LEDGERKIT_BALANCE_TOLERANCE '{tolerance}'")

        prefix = env.get("LEDGERKIT_JOURNAL_PREFIX")
        if prefix:
            kwargs["journal_prefix"] = prefix

        width = env.get("LEDGERKIT_JOURNAL_NUMBER_WIDTH")
        if width:
            try:
                kwargs["journal_number_width"] = int(width)
            except ValueError:
                raise ValueError(f"Invalid LEDGERKIT_JOURNAL_NUMBER_WIDTH '{width}'")

        currency = env.get("LEDGERKIT_DEFAULT_CURRENCY")
        if currency:
            kwargs["default_currency"] = currency.upper()

        return cls(**kwargs)


def default_database_path() -> str:
    """Return the database path from LEDGERKIT_DB_PATH or ~/.ledgerkit/ledgerkit.db."""
    database_path = os.environ.get(DB_PATH_ENV)
    if database_path:
        return database_path

    db_dir = Path.home() / ".ledgerkit"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "ledgerkit.db")
