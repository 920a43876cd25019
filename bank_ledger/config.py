"""Configuration management for the bank ledger."""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from .exceptions import ConfigurationError

LOG_FORMATS = ("standard", "json")


@dataclass
class LedgerConfig:
    """Settings for the ledger engine and its SQLite store."""

    db_path: str = "bank.db"
    db_timeout: float = 5.0
    savings_interest_rate: Decimal = Decimal('0.02')
    checking_monthly_fee: Decimal = Decimal('10.00')
    admin_secret: str = "admin123"
    log_level: str = "INFO"
    log_format: str = "standard"

    def __post_init__(self):
        if not isinstance(self.savings_interest_rate, Decimal):
            self.savings_interest_rate = Decimal(str(self.savings_interest_rate))
        if not isinstance(self.checking_monthly_fee, Decimal):
            self.checking_monthly_fee = Decimal(str(self.checking_monthly_fee))

    def validate(self) -> 'LedgerConfig':
        """Check the settings and return self."""
        if self.savings_interest_rate < 0:
            raise ConfigurationError("Savings interest rate cannot be negative")
        if self.checking_monthly_fee < 0:
            raise ConfigurationError("Checking monthly fee cannot be negative")
        if self.db_timeout <= 0:
            raise ConfigurationError("Database timeout must be positive")
        if not self.admin_secret:
            raise ConfigurationError("Admin secret cannot be empty")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"Log format must be one of {', '.join(LOG_FORMATS)}: {self.log_format!r}"
            )
        return self

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        defaults = cls()
        try:
            config = cls(
                db_path=os.getenv("BANK_DB_PATH", defaults.db_path),
                db_timeout=float(os.getenv("BANK_DB_TIMEOUT", str(defaults.db_timeout))),
                savings_interest_rate=Decimal(
                    os.getenv("BANK_SAVINGS_RATE", str(defaults.savings_interest_rate))
                ),
                checking_monthly_fee=Decimal(
                    os.getenv("BANK_CHECKING_FEE", str(defaults.checking_monthly_fee))
                ),
                admin_secret=os.getenv("BANK_ADMIN_SECRET", defaults.admin_secret),
                log_level=os.getenv("BANK_LOG_LEVEL", defaults.log_level),
                log_format=os.getenv("BANK_LOG_FORMAT", defaults.log_format),
            )
        except (InvalidOperation, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

        return config.validate()
